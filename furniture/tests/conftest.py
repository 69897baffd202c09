from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from furniture.services.shipping_service import (
    ShippingService,
    ShippingSettings,
    StaticShippingSettingsProvider,
)
from furniture.tests.factories import OrderFactory, OrderItemFactory, UserFactory

# ==========================================
# 0. 테스트 상수 (Business Policy Constants)
# ==========================================

# 비즈니스 정책 상수 (서비스에서 import)
DEFAULT_FREE_SHIPPING_AREAS = ShippingService.DEFAULT_FREE_SHIPPING_AREAS
DEFAULT_SHIPPING_FEE = ShippingService.DEFAULT_STANDARD_SHIPPING_FEE

# ==========================================
# 1. 전역 설정 (Session Scope)
# ==========================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging_for_tests():
    """
    caplog가 서비스/태스크 로그를 캡처할 수 있도록 propagate=True로 설정
    """
    import logging

    for logger_name in ["furniture.services", "furniture.views", "furniture.tasks", "celery"]:
        logging.getLogger(logger_name).propagate = True


# ==========================================
# 2. API 클라이언트 Fixture
# ==========================================


@pytest.fixture
def api_client():
    """DRF APIClient 인스턴스 (비로그인)"""
    return APIClient()


@pytest.fixture
def authenticated_client(user):
    """일반 고객으로 인증된 APIClient"""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def staff_client(staff_user):
    """관리자로 인증된 APIClient"""
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


@pytest.fixture
def supplier_client(supplier_user):
    """공급사로 인증된 APIClient"""
    client = APIClient()
    client.force_authenticate(user=supplier_user)
    return client


# ==========================================
# 3. 사용자(User) Fixture
# ==========================================


@pytest.fixture
def user(db):
    """기본 일반 고객 (이메일 있음)"""
    return UserFactory(username="customer", email="customer@example.com", full_name="Maria Santos")


@pytest.fixture
def other_user(db):
    """다른 고객 (권한 테스트용)"""
    return UserFactory(username="other_customer", email="other@example.com")


@pytest.fixture
def staff_user(db):
    """관리자"""
    return UserFactory.staff(username="admin", email="admin@efurnish.com")


@pytest.fixture
def supplier_user(db):
    """승인된 공급사"""
    return UserFactory.supplier(username="supplier", email="supplier@example.com")


# ==========================================
# 4. 배송비 설정 Fixture
# ==========================================


@pytest.fixture
def default_settings():
    """기본 배송비 설정 (Cabusao, Del Gallego, Lupi, Ragay, Sipocot / 500)"""
    return ShippingService.DEFAULT_SETTINGS


@pytest.fixture
def custom_settings():
    """관리자가 변경한 배송비 설정"""
    return ShippingSettings.build(["Naga City", "Pili"], Decimal("350"))


@pytest.fixture
def static_shipping_service(default_settings):
    """DB를 사용하지 않는 배송비 서비스"""
    return ShippingService(StaticShippingSettingsProvider(default_settings))


# ==========================================
# 5. 주문 Fixture
# ==========================================


@pytest.fixture
def order(db, user):
    """pending 상태 주문 (상품 2개)"""
    order = OrderFactory(user=user)
    OrderItemFactory(order=order, product_name="Narra Dining Chair", quantity=1, unit_price=Decimal("600"))
    OrderItemFactory(order=order, product_name="Rattan Side Table", quantity=1, unit_price=Decimal("400"))
    return order


@pytest.fixture
def order_factory(db, user):
    """
    주문 생성 헬퍼

    사용 예시:
        shipped = order_factory(status="shipped")
    """

    def _create_order(**kwargs):
        kwargs.setdefault("user", user)
        order = OrderFactory(**kwargs)
        OrderItemFactory(order=order)
        return order

    return _create_order
