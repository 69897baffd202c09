from __future__ import annotations

import logging
from typing import Any

from django.db.models import Count
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, mixins, permissions, serializers as drf_serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.serializers import BaseSerializer

from ..filters import OrderFilter
from ..models.order import Order
from ..permissions import IsAdminOrSupplier, IsOrderOwnerOrManager, is_order_manager
from ..serializers.order_serializers import (
    OrderCreateSerializer,
    OrderDetailSerializer,
    OrderListSerializer,
    OrderStatusCountSerializer,
    OrderStatusUpdateSerializer,
)
from ..services.order_service import OrderCreationError, OrderService, OrderServiceError
from ..throttles import OrderCreateRateThrottle, OrderStatusRateThrottle

logger = logging.getLogger(__name__)


# ===== Swagger 문서화용 응답 Serializers =====


class OrderErrorResponseSerializer(drf_serializers.Serializer):
    """주문 에러 응답"""

    error = drf_serializers.CharField()
    code = drf_serializers.CharField(required=False)
    retryable = drf_serializers.BooleanField(required=False, help_text="같은 요청으로 다시 시도 가능 여부")


class OrderPagination(PageNumberPagination):
    """주문 목록 페이지네이션"""

    page_size = 10
    page_size_query_param = "page_size"
    max_page_size = 100


@extend_schema_view(
    list=extend_schema(
        summary="주문 목록 조회",
        description="""
주문 목록을 조회합니다. 일반 사용자는 본인 주문만, 관리자/공급사는 전체 주문을 조회합니다.

**필터링:**
- `status`: pending, processing, shipped, delivered, cancelled, returned
- `payment_method`: cod, online
- `start_date`, `end_date`: 주문일 범위 (YYYY-MM-DD)
- `search`: 고객 이름 또는 주문번호

**정렬:**
- `ordering`: created_at, -created_at, total_amount (기본: 최신순)
        """,
        tags=["Orders"],
    ),
    retrieve=extend_schema(
        summary="주문 상세 조회",
        description="주문 상세 정보를 조회합니다. 본인 주문 또는 관리자/공급사만 조회 가능합니다.",
        tags=["Orders"],
    ),
)
class OrderViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    """
    주문 관리 ViewSet

    엔드포인트:
    - GET  /api/orders/              - 주문 목록 조회
    - POST /api/orders/              - 주문 생성 (체크아웃 제출)
    - GET  /api/orders/{id}/         - 주문 상세 조회
    - POST /api/orders/{id}/status/  - 주문 상태 변경 (관리자/공급사)
    - GET  /api/orders/stats/        - 주문 상태별 건수 (관리자/공급사)
    """

    permission_classes = [permissions.IsAuthenticated, IsOrderOwnerOrManager]
    pagination_class = OrderPagination
    lookup_value_regex = r"\d+"

    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "total_amount"]
    ordering = ["-created_at"]

    def get_permissions(self):
        if self.action in ("update_status", "stats"):
            return [permissions.IsAuthenticated(), IsAdminOrSupplier()]
        return super().get_permissions()

    def get_throttles(self):
        """액션별로 다른 throttle 적용"""
        if self.action == "create":
            return [OrderCreateRateThrottle()]
        elif self.action == "update_status":
            return [OrderStatusRateThrottle()]
        return super().get_throttles()

    def get_queryset(self) -> Any:
        """
        주문 조회 쿼리셋

        - select_related("user"), prefetch_related("order_items"): N+1 방지
        - annotate(item_count): 상품 개수 미리 계산
        - 관리자/공급사: 전체 주문, 일반 사용자: 본인 주문만
        """
        queryset = (
            Order.objects.select_related("user")
            .prefetch_related("order_items")
            .annotate(item_count=Count("order_items"))
        )

        if is_order_manager(self.request.user):
            return queryset
        return queryset.filter(user=self.request.user)

    def get_serializer_class(self) -> type[BaseSerializer]:
        if self.action == "list":
            return OrderListSerializer
        elif self.action == "create":
            return OrderCreateSerializer
        elif self.action == "update_status":
            return OrderStatusUpdateSerializer
        return OrderDetailSerializer

    @extend_schema(
        request=OrderCreateSerializer,
        responses={
            201: OrderDetailSerializer,
            400: OrderErrorResponseSerializer,
            500: OrderErrorResponseSerializer,
        },
        summary="주문 생성",
        description="""
체크아웃 정보를 제출해 주문을 생성합니다. 배송비와 합계는 서버에서 다시 계산합니다.

**요청 본문:**
```json
{
    "items": [
        {"product_id": "sofa-01", "name": "3-Seater Sofa", "unit_price": "15000", "quantity": 1,
         "discount_percentage": "10", "customization_cost": "500"}
    ],
    "shipping_address": {"street": "123 Rizal St", "city": {"name": "Lupi", "code": "051716000"}},
    "payment_method": "cod",
    "change_needed": "20000"
}
```

저장에 실패하면 500과 함께 `code: ORDER_CREATE_FAILED`, `retryable: true`를 반환합니다.
        """,
        tags=["Orders"],
    )
    def create(self, request: Request, *args: Any, **kwargs: Any) -> Response:
        """주문 생성"""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = serializer.save()
        except OrderCreationError as e:
            logger.error(f"주문 생성 실패 (저장 오류): user_id={request.user.id}, error={e.details}")
            return Response(
                {"error": e.message, "code": e.code, "retryable": True},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        except OrderServiceError as e:
            logger.warning(f"주문 생성 실패: user_id={request.user.id}, code={e.code}, error={e.message}")
            return Response({"error": e.message, "code": e.code}, status=status.HTTP_400_BAD_REQUEST)

        logger.info(f"주문 생성: order_id={order.id}, user_id={request.user.id}, total_amount={order.total_amount}")
        return Response(OrderDetailSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=OrderStatusUpdateSerializer,
        responses={
            200: OrderDetailSerializer,
            400: OrderErrorResponseSerializer,
            403: OrderErrorResponseSerializer,
            404: OrderErrorResponseSerializer,
        },
        summary="주문 상태 변경",
        description="""
주문 상태를 변경하고 고객에게 안내 메일을 보냅니다. (관리자/공급사 전용)

**변경 규칙:**
- pending -> processing -> shipped -> delivered 순서로 앞으로만 이동 (건너뛰기 가능)
- 종료 상태(delivered, cancelled, returned)가 아니면 cancelled/returned로 변경 가능
- 종료 상태에서는 변경 불가, 같은 상태로 변경 불가

메일 발송 결과는 상태 변경 결과에 영향을 주지 않습니다.
        """,
        tags=["Orders"],
    )
    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """주문 상태 변경"""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = OrderService.transition_status(
                order_id=pk,
                new_status=serializer.validated_data["status"],
                reason=serializer.validated_data["reason"],
                changed_by=request.user,
            )
        except OrderServiceError as e:
            http_status = status.HTTP_404_NOT_FOUND if e.code == "ORDER_NOT_FOUND" else status.HTTP_400_BAD_REQUEST
            return Response({"error": e.message, "code": e.code}, status=http_status)

        return Response(OrderDetailSerializer(order).data)

    @extend_schema(
        responses={200: OrderStatusCountSerializer},
        summary="주문 상태별 건수",
        description="관리자 대시보드용 주문 상태별 건수를 조회합니다.",
        tags=["Orders"],
    )
    @action(detail=False, methods=["get"])
    def stats(self, request: Request) -> Response:
        """주문 상태별 건수"""
        return Response(OrderStatusCountSerializer(OrderService.get_status_counts()).data)
