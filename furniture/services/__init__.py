"""
eFurnish 비즈니스 로직 서비스 패키지

서비스 레이어 패턴:
- 뷰와 모델 사이의 비즈니스 로직 계층
- 배송비/주문 금액 계산은 이 패키지에서만 수행
- 트랜잭션 관리, 주문 상태 전이 규칙 처리
"""

from .base import ServiceError, log_service_call
from .municipality_service import OTHER_MUNICIPALITY, LocationName, MunicipalityClassifier, StructuredAddress
from .order_service import OrderCreationError, OrderService, OrderServiceError
from .order_total_service import CheckoutSummary, LineItem, OrderTotals, OrderTotalService
from .setting_service import SettingService, SettingServiceError
from .shipping_service import (
    DatabaseShippingSettingsProvider,
    ShippingFeeResult,
    ShippingService,
    ShippingSettings,
    ShippingSettingsProvider,
    StaticShippingSettingsProvider,
)

__all__ = [
    # Base
    "ServiceError",
    "log_service_call",
    # 배송지 판별
    "OTHER_MUNICIPALITY",
    "LocationName",
    "MunicipalityClassifier",
    "StructuredAddress",
    # 배송비
    "DatabaseShippingSettingsProvider",
    "ShippingFeeResult",
    "ShippingService",
    "ShippingSettings",
    "ShippingSettingsProvider",
    "StaticShippingSettingsProvider",
    # 주문 금액
    "CheckoutSummary",
    "LineItem",
    "OrderTotals",
    "OrderTotalService",
    # 주문
    "OrderCreationError",
    "OrderService",
    "OrderServiceError",
    # 설정
    "SettingService",
    "SettingServiceError",
]
