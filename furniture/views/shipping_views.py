from __future__ import annotations

import logging

from django.db import DatabaseError
from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import permissions, serializers as drf_serializers, status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ..permissions import IsAdminOrSupplierOrReadOnly
from ..serializers.shipping_serializers import (
    ShippingQuoteRequestSerializer,
    ShippingQuoteSerializer,
    ShippingSettingsSerializer,
)
from ..services.shipping_service import DatabaseShippingSettingsProvider, ShippingService
from ..throttles import SettingsUpdateRateThrottle

logger = logging.getLogger(__name__)


# ===== Swagger 문서화용 응답 Serializers =====


class ShippingSettingsResponseSerializer(drf_serializers.Serializer):
    """배송비 설정 응답"""

    free_shipping_areas = drf_serializers.ListField(child=drf_serializers.CharField())
    standard_shipping_fee = drf_serializers.CharField(help_text="기본 배송비 (예: '500')")


class ShippingErrorResponseSerializer(drf_serializers.Serializer):
    """배송 API 에러 응답"""

    error = drf_serializers.CharField()
    code = drf_serializers.CharField(required=False)


class ShippingSettingsView(APIView):
    """
    배송비 설정 조회/변경

    - GET /api/shipping/settings/: 누구나 (설정을 읽을 수 없으면 기본값)
    - PUT /api/shipping/settings/: 관리자/공급사, 전체 교체
    """

    permission_classes = [IsAdminOrSupplierOrReadOnly]
    provider_class = DatabaseShippingSettingsProvider

    def get_throttles(self):
        if self.request.method == "PUT":
            return [SettingsUpdateRateThrottle()]
        return super().get_throttles()

    def get_provider(self) -> DatabaseShippingSettingsProvider:
        return self.provider_class()

    @extend_schema(
        responses={200: ShippingSettingsResponseSerializer},
        summary="배송비 설정 조회",
        description="무료배송 지역 목록과 기본 배송비를 조회합니다. 저장된 설정이 없으면 기본값을 반환합니다.",
        tags=["Shipping"],
    )
    def get(self, request: Request) -> Response:
        settings = self.get_provider().get()
        return Response(settings.to_dict())

    @extend_schema(
        request=ShippingSettingsSerializer,
        responses={
            200: ShippingSettingsResponseSerializer,
            400: ShippingErrorResponseSerializer,
            403: ShippingErrorResponseSerializer,
            500: ShippingErrorResponseSerializer,
        },
        summary="배송비 설정 변경",
        description="""
무료배송 지역 목록과 기본 배송비를 통째로 교체합니다. (관리자/공급사 전용)

**요청 본문:**
```json
{
    "free_shipping_areas": ["Cabusao", "Del Gallego", "Lupi", "Ragay", "Sipocot"],
    "standard_shipping_fee": 500
}
```
        """,
        tags=["Shipping"],
    )
    def put(self, request: Request) -> Response:
        serializer = ShippingSettingsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            saved = self.get_provider().update(serializer.validated_data["settings"])
        except DatabaseError as e:
            logger.error(f"배송비 설정 저장 실패: user_id={request.user.id}, error={e}", exc_info=True)
            return Response(
                {"error": "Failed to save shipping settings.", "code": "SETTINGS_SAVE_FAILED"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        logger.info(f"배송비 설정 변경: user_id={request.user.id}, settings={saved.to_dict()}")
        return Response(saved.to_dict())


class ShippingQuoteView(APIView):
    """배송지 주소 기준 배송비 견적 (POST /api/shipping/quote/)"""

    permission_classes = [permissions.AllowAny]

    @extend_schema(
        request=ShippingQuoteRequestSerializer,
        responses={200: ShippingQuoteSerializer},
        summary="배송비 견적",
        description="배송지 주소(구조화 주소 또는 자유 입력 문자열)로 municipality와 배송비를 계산합니다.",
        examples=[
            OpenApiExample(
                "구조화 주소",
                value={"address": {"city": {"name": "Lupi", "code": "051716000"}}},
                request_only=True,
            ),
            OpenApiExample(
                "자유 입력 주소",
                value={"address": "123 Rizal St, Naga City, Camarines Sur"},
                request_only=True,
            ),
        ],
        tags=["Shipping"],
    )
    def post(self, request: Request) -> Response:
        serializer = ShippingQuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        quote = ShippingService().quote(serializer.validated_data["address"])
        return Response(ShippingQuoteSerializer(quote).data)
