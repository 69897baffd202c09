from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rest_framework import serializers

from ..services.shipping_service import ShippingSettings


class AddressField(serializers.Field):
    """
    배송지 입력 필드

    - 구조화 주소: {"street", "barangay", "city", "province", "region", "postal_code"}
    - 자유 입력 주소: 문자열
    배송비 계산은 서비스 레이어(MunicipalityClassifier)에서 처리합니다.
    """

    default_error_messages = {
        "invalid": "Address must be an object or a string.",
        "blank": "Address is required.",
    }

    def to_internal_value(self, data: Any) -> dict | str:
        if isinstance(data, Mapping):
            return dict(data)
        if isinstance(data, str):
            if not data.strip():
                self.fail("blank")
            return data.strip()
        self.fail("invalid")

    def to_representation(self, value: Any) -> Any:
        return value


class ShippingSettingsSerializer(serializers.Serializer):
    """
    배송비 설정 입력 검증 Serializer

    - 전체 교체만 지원 (두 필드 모두 필수)
    - 기존 camelCase 키(freeShippingAreas, standardShippingFee)도 허용
    """

    CAMEL_CASE_KEYS = {
        "freeShippingAreas": "free_shipping_areas",
        "standardShippingFee": "standard_shipping_fee",
    }

    free_shipping_areas = serializers.ListField(
        child=serializers.CharField(max_length=100, allow_blank=True),
        allow_empty=True,
        help_text="무료배송 municipality 이름 목록",
    )
    standard_shipping_fee = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        help_text="무료배송 지역 외 기본 배송비 (페소, 정수)",
    )

    def to_internal_value(self, data: Any) -> dict:
        if isinstance(data, Mapping):
            data = {self.CAMEL_CASE_KEYS.get(key, key): value for key, value in data.items()}
        return super().to_internal_value(data)

    def validate(self, attrs: dict) -> dict:
        try:
            attrs["settings"] = ShippingSettings.build(
                attrs["free_shipping_areas"],
                attrs["standard_shipping_fee"],
            )
        except ValueError as e:
            raise serializers.ValidationError(str(e))
        return attrs

    def to_representation(self, instance: ShippingSettings) -> dict:
        return instance.to_dict()


class ShippingQuoteRequestSerializer(serializers.Serializer):
    """배송비 견적 요청"""

    address = AddressField(help_text="구조화 주소(object) 또는 자유 입력 주소(string)")


class ShippingQuoteSerializer(serializers.Serializer):
    """배송비 견적 결과 (ShippingFeeResult)"""

    municipality = serializers.CharField()
    shipping_fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    is_free_shipping = serializers.BooleanField()
