"""
체크아웃 흐름 테스트

장바구니 요약 -> 로그인(JWT) -> 주문 생성 -> 관리자 상태 변경 -> 안내 메일
"""

import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from furniture.models import NotificationLog
from furniture.services.shipping_service import DatabaseShippingSettingsProvider, ShippingSettings
from furniture.tests.factories import TestConstants

CART = [
    {
        "id": "sofa-01",
        "name": "3-Seater Sofa",
        "price": "15000",
        "quantity": 1,
        "discount": {"percentage": 10},
        "customization": {"fabric": "linen", "totalCustomizationCost": 500},
    },
    {"id": "chair-02", "name": "Narra Dining Chair", "price": "2500", "quantity": 2},
]


@pytest.mark.django_db
class TestCheckoutSummaryView:
    """POST /api/checkout/summary/"""

    def test_summary_free_shipping(self, api_client):
        # Act
        response = api_client.post(
            reverse("checkout-summary"),
            {"items": CART, "shipping_address": TestConstants.FREE_AREA_ADDRESS},
            format="json",
        )

        # Assert
        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            "municipality": "Lupi",
            "is_free_shipping": True,
            "subtotal": "20500.00",
            "discount": "1550.00",
            "shipping_fee": "0.00",
            "grand_total": "18950.00",
        }

    def test_summary_standard_fee(self, api_client):
        response = api_client.post(
            reverse("checkout-summary"),
            {"items": CART, "shipping_address": "Magsaysay Ave, Naga City"},
            format="json",
        )

        assert response.data["municipality"] == "Naga City"
        assert response.data["shipping_fee"] == "500.00"
        assert response.data["grand_total"] == "19450.00"

    def test_empty_cart(self, api_client):
        response = api_client.post(
            reverse("checkout-summary"),
            {"items": [], "shipping_address": "Pili"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["subtotal"] == "0.00"
        assert response.data["grand_total"] == "500.00"

    def test_invalid_item(self, api_client):
        response = api_client.post(
            reverse("checkout-summary"),
            {"items": [{"price": "100", "quantity": 0}], "shipping_address": "Lupi"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db(transaction=True)
class TestCheckoutFlow:
    """로그인부터 상태 변경 메일까지"""

    def _login(self, username):
        client = APIClient()
        response = client.post(
            reverse("token-obtain"),
            {"username": username, "password": "testpass123"},
            format="json",
        )
        assert response.status_code == status.HTTP_200_OK
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        return client

    def test_invalid_credentials(self, api_client, user):
        response = api_client.post(
            reverse("token-obtain"),
            {"username": user.username, "password": "wrong"},
            format="json",
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_summary_matches_placed_order(self, user, supplier_user, mailoutbox):
        # Arrange: 공급사가 배송비 설정 변경
        supplier = self._login(supplier_user.username)
        response = supplier.put(
            reverse("shipping-settings"),
            {"free_shipping_areas": ["Pili"], "standard_shipping_fee": 300},
            format="json",
        )
        assert response.status_code == status.HTTP_200_OK
        assert DatabaseShippingSettingsProvider().get() == ShippingSettings.build(["Pili"], 300)

        customer = self._login(user.username)
        checkout = {"items": CART, "shipping_address": TestConstants.FREE_AREA_ADDRESS}

        # Act: 요약 -> 주문
        summary = customer.post(reverse("checkout-summary"), checkout, format="json")
        placed = customer.post(reverse("order-list"), {**checkout, "payment_method": "online"}, format="json")

        # Assert: Lupi는 더 이상 무료배송 지역이 아님
        assert placed.status_code == status.HTTP_201_CREATED
        assert summary.data["shipping_fee"] == "300.00"
        assert placed.data["shipping_fee"] == summary.data["shipping_fee"]
        assert placed.data["total_amount"] == summary.data["grand_total"]
        assert placed.data["order_items"][0]["product_id"] == "sofa-01"
        assert placed.data["order_items"][0]["customization"] == {"fabric": "linen", "totalCustomizationCost": 500}

        # Act: 공급사가 상태 변경
        order_id = placed.data["id"]
        shipped = supplier.post(
            reverse("order-update-status", args=[order_id]),
            {"status": "shipped"},
            format="json",
        )

        # Assert: 주문 확인 + 상태 변경 메일
        assert shipped.status_code == status.HTTP_200_OK
        assert [message.subject for message in mailoutbox] == [
            f"Order Confirmation #{order_id}",
            f"Order Status Update - Order #{order_id}",
        ]
        assert all(message.to == [user.email] for message in mailoutbox)
        assert NotificationLog.objects.filter(order_id=order_id, status="sent").count() == 2

        # 고객은 변경된 상태를 조회
        detail = customer.get(reverse("order-detail", args=[order_id]))
        assert detail.data["status"] == "shipped"
        assert detail.data["status_message"] == "Your order has been shipped and is on its way!"
