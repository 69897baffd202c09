from __future__ import annotations

import logging

from django.db import DatabaseError
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ..permissions import IsStaffOrReadOnly
from ..serializers.setting_serializers import SettingKeyQuerySerializer, StoreSettingSerializer
from ..services.setting_service import SettingService, SettingServiceError
from ..throttles import SettingsUpdateRateThrottle

logger = logging.getLogger(__name__)

KEY_PARAMETER = OpenApiParameter(
    name="key",
    type=OpenApiTypes.STR,
    location=OpenApiParameter.QUERY,
    required=True,
    description="설정 키 (예: shipping_settings)",
)


class StoreSettingView(APIView):
    """
    key 단위 스토어 설정 조회/저장

    - GET  /api/settings/?key=...: 누구나, 저장된 값이 없으면 key별 기본값
    - POST /api/settings/?key=...: 관리자, JSON 객체 본문으로 전체 교체
    """

    permission_classes = [IsStaffOrReadOnly]

    def get_throttles(self):
        if self.request.method == "POST":
            return [SettingsUpdateRateThrottle()]
        return super().get_throttles()

    def _get_key(self, request: Request) -> str | None:
        query = SettingKeyQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return None
        return query.validated_data["key"]

    @extend_schema(
        parameters=[KEY_PARAMETER],
        responses={200: OpenApiTypes.OBJECT},
        summary="설정 조회",
        tags=["Settings"],
    )
    def get(self, request: Request) -> Response:
        key = self._get_key(request)
        if key is None:
            return Response({"error": "Key parameter is required"}, status=status.HTTP_400_BAD_REQUEST)

        return Response(SettingService.get_value(key))

    @extend_schema(
        parameters=[KEY_PARAMETER],
        request=OpenApiTypes.OBJECT,
        responses={200: StoreSettingSerializer},
        summary="설정 저장",
        description="JSON 객체 본문을 해당 key의 값으로 저장합니다. (관리자 전용)",
        tags=["Settings"],
    )
    def post(self, request: Request) -> Response:
        key = self._get_key(request)
        if key is None:
            return Response({"error": "Key parameter is required"}, status=status.HTTP_400_BAD_REQUEST)

        if not isinstance(request.data, dict):
            return Response(
                {"error": "Request body must be a JSON object"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            setting = SettingService.set_value(key, dict(request.data))
        except SettingServiceError as e:
            return Response(e.to_response(), status=status.HTTP_400_BAD_REQUEST)
        except DatabaseError as e:
            logger.error(f"설정 저장 실패: key={key}, error={e}", exc_info=True)
            return Response({"error": "Failed to update setting"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        logger.info(f"설정 변경: key={key}, user_id={request.user.id}")
        return Response({"success": True, **StoreSettingSerializer(setting).data})
