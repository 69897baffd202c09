"""
스토어 설정 API 테스트 (GET/POST /api/settings/?key=...)
"""

from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status

from furniture.models import StoreSetting
from furniture.services.setting_service import SettingService, SettingServiceError
from furniture.tests.factories import StoreSettingFactory


def settings_url(key=None):
    url = reverse("store-settings")
    return f"{url}?key={key}" if key is not None else url


@pytest.mark.django_db
class TestStoreSettingGet:
    """설정 조회"""

    def test_key_is_required(self, api_client):
        response = api_client.get(settings_url())

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {"error": "Key parameter is required"}

    def test_blank_key_is_rejected(self, api_client):
        response = api_client.get(settings_url("%20%20"))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_shipping_settings_default(self, api_client):
        # Act
        response = api_client.get(settings_url("shipping_settings"))

        # Assert
        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            "free_shipping_areas": ["Cabusao", "Del Gallego", "Lupi", "Ragay", "Sipocot"],
            "standard_shipping_fee": "500",
        }

    def test_unknown_key_returns_empty_object(self, api_client):
        response = api_client.get(settings_url("homepage_banner"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {}

    def test_stored_value(self, api_client):
        StoreSettingFactory(key="homepage_banner", value={"title": "Rainy Season Sale", "active": True})

        response = api_client.get(settings_url("homepage_banner"))

        assert response.data == {"title": "Rainy Season Sale", "active": True}


@pytest.mark.django_db
class TestStoreSettingPost:
    """설정 저장"""

    def test_staff_can_save(self, staff_client):
        # Act
        response = staff_client.post(
            settings_url("homepage_banner"),
            {"title": "Rainy Season Sale"},
            format="json",
        )

        # Assert
        assert response.status_code == status.HTTP_200_OK
        assert response.data["success"] is True
        assert response.data["key"] == "homepage_banner"
        assert response.data["value"] == {"title": "Rainy Season Sale"}
        assert StoreSetting.objects.get(key="homepage_banner").value == {"title": "Rainy Season Sale"}

    def test_save_replaces_whole_value(self, staff_client):
        StoreSettingFactory(key="homepage_banner", value={"title": "Old", "subtitle": "Old"})

        staff_client.post(settings_url("homepage_banner"), {"title": "New"}, format="json")

        assert StoreSetting.objects.get(key="homepage_banner").value == {"title": "New"}

    def test_shipping_settings_are_validated(self, staff_client):
        response = staff_client.post(
            settings_url("shipping_settings"),
            {"free_shipping_areas": ["Lupi"], "standard_shipping_fee": -1},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["code"] == "INVALID_VALUE"
        assert not StoreSetting.objects.filter(key="shipping_settings").exists()

    def test_shipping_settings_are_normalized(self, staff_client):
        response = staff_client.post(
            settings_url("shipping_settings"),
            {"freeShippingAreas": ["Lupi", "LUPI"], "standardShippingFee": 300},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["value"] == {"free_shipping_areas": ["Lupi"], "standard_shipping_fee": "300"}

    def test_body_must_be_object(self, staff_client):
        response = staff_client.post(settings_url("homepage_banner"), ["not", "an", "object"], format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {"error": "Request body must be a JSON object"}

    def test_key_is_required(self, staff_client):
        response = staff_client.post(settings_url(), {"title": "x"}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_customer_cannot_save(self, authenticated_client):
        response = authenticated_client.post(settings_url("homepage_banner"), {"title": "x"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_supplier_cannot_save(self, supplier_client):
        """공급사는 배송비 설정만 변경 가능 (일반 설정은 관리자 전용)"""
        response = supplier_client.post(settings_url("homepage_banner"), {"title": "x"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_save_failure_returns_500(self, staff_client):
        with patch.object(StoreSetting.objects, "update_or_create", side_effect=DatabaseError("locked")):
            response = staff_client.post(settings_url("homepage_banner"), {"title": "x"}, format="json")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR


@pytest.mark.django_db
class TestSettingService:
    """SettingService 직접 호출"""

    def test_get_value_falls_back_on_database_error(self):
        with patch.object(StoreSetting.objects, "filter", side_effect=DatabaseError("down")):
            value = SettingService.get_value("shipping_settings")

        assert value["standard_shipping_fee"] == "500"

    def test_blank_key_raises(self):
        with pytest.raises(SettingServiceError) as exc_info:
            SettingService.set_value("  ", {})

        assert exc_info.value.code == "KEY_REQUIRED"
        assert exc_info.value.to_response() == {"error": "Setting key is required.", "code": "KEY_REQUIRED"}
