from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ..serializers.order_serializers import (
    CheckoutSummaryRequestSerializer,
    CheckoutSummarySerializer,
    LineItemInputSerializer,
)
from ..services.order_total_service import OrderTotalService


class CheckoutSummaryView(APIView):
    """
    체크아웃 리뷰 화면 금액 요약 (POST /api/checkout/summary/)

    주문 생성 전에 배송비와 합계를 미리 보여주기 위한 API이며,
    주문 생성 시에도 같은 계산(OrderTotalService)을 사용합니다.
    """

    permission_classes = [permissions.AllowAny]

    @extend_schema(
        request=CheckoutSummaryRequestSerializer,
        responses={200: CheckoutSummarySerializer},
        summary="체크아웃 금액 요약",
        description="""
장바구니 상품과 배송지로 상품 합계, 할인, 배송비, 최종 금액을 계산합니다.

- 상품 소계: (단가 + 개당 커스터마이징 비용) x 수량
- 할인: 상품 소계 x 할인율 / 100
- 최종 금액: 상품 합계 - 할인 + 배송비
        """,
        tags=["Checkout"],
    )
    def post(self, request: Request) -> Response:
        serializer = CheckoutSummaryRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        summary = OrderTotalService().summarize(
            LineItemInputSerializer.to_line_items(serializer.validated_data["items"]),
            serializer.validated_data["shipping_address"],
        )
        return Response(CheckoutSummarySerializer(summary).data)
