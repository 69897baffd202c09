from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rest_framework import serializers

from ..models.order import Order, OrderItem
from ..services.order_service import OrderService
from ..services.order_total_service import LineItem
from .shipping_serializers import AddressField


class LineItemInputSerializer(serializers.Serializer):
    """
    장바구니 상품 한 줄 입력 Serializer

    장바구니 데이터 형식도 그대로 받을 수 있도록 별칭 키를 허용합니다.
    - price -> unit_price
    - id -> product_id, product_name -> name
    - customization.totalCustomizationCost -> customization_cost
    - discount.percentage -> discount_percentage
    """

    product_id = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    quantity = serializers.IntegerField(min_value=1)
    discount_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False, default=0
    )
    customization_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, default=0
    )
    customization = serializers.DictField(required=False, default=dict)

    def to_internal_value(self, data: Any) -> dict:
        if isinstance(data, Mapping):
            data = dict(data)
            if "unit_price" not in data and "price" in data:
                data["unit_price"] = data["price"]
            if "name" not in data and "product_name" in data:
                data["name"] = data["product_name"]
            if "product_id" not in data and data.get("id") is not None:
                data["product_id"] = str(data["id"])

            customization = data.get("customization")
            if "customization_cost" not in data and isinstance(customization, Mapping):
                if customization.get("totalCustomizationCost") is not None:
                    data["customization_cost"] = customization["totalCustomizationCost"]

            discount = data.get("discount")
            if "discount_percentage" not in data and isinstance(discount, Mapping):
                if discount.get("percentage") is not None:
                    data["discount_percentage"] = discount["percentage"]
        return super().to_internal_value(data)

    @staticmethod
    def to_line_items(validated_items: list[dict]) -> list[LineItem]:
        return [LineItem(**item) for item in validated_items]


class OrderItemSerializer(serializers.ModelSerializer):
    """주문 상품 조회용 Serializer"""

    subtotal = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",  # 주문 당시 상품명
            "quantity",
            "unit_price",  # 주문 당시 가격
            "discount_percentage",
            "customization_cost",
            "customization",
            "subtotal",
        ]
        read_only_fields = fields

    def get_subtotal(self, obj: OrderItem) -> str:
        return str(obj.get_subtotal())


class OrderListSerializer(serializers.ModelSerializer):
    """
    주문 목록 조회용 Serializer

    - item_count: queryset에서 annotate로 계산됨 (N+1 쿼리 방지)
    - user_username: queryset에서 select_related("user")로 최적화
    """

    user_username = serializers.CharField(source="user.username", read_only=True, default=None)
    item_count = serializers.IntegerField(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "user_username",
            "status",
            "status_display",
            "payment_method",
            "payment_status",
            "shipping_municipality",
            "shipping_fee",
            "is_free_shipping",
            "total_amount",
            "item_count",
            "created_at",
        ]


class OrderDetailSerializer(serializers.ModelSerializer):
    """
    주문 상세 조회용 Serializer

    - 일반 사용자는 본인 주문만 조회 가능 (ViewSet 레벨 제어)
    - 금액 정보는 주문 당시 계산값 그대로 반환
    """

    order_items = OrderItemSerializer(many=True, read_only=True)
    user_username = serializers.CharField(source="user.username", read_only=True, default=None)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    payment_method_display = serializers.CharField(source="get_payment_method_display", read_only=True)
    status_message = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "user",
            "user_username",
            "status",
            "status_display",
            "status_message",
            "status_reason",
            "status_updated_at",
            "order_items",
            "subtotal",
            "discount_amount",
            "shipping_fee",
            "is_free_shipping",
            "total_amount",
            "shipping_address",
            "shipping_municipality",
            "payment_method",
            "payment_method_display",
            "payment_status",
            "change_needed",
            "order_memo",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_status_message(self, obj: Order) -> str:
        return OrderService.get_status_message(obj.status)


class OrderCreateSerializer(serializers.Serializer):
    """
    주문 생성용 Serializer (체크아웃 제출)

    역할: 입력 데이터 형식 검증 후 OrderService 호출
    - 배송비/합계 계산과 저장은 OrderService.create_order에서 처리
    """

    items = LineItemInputSerializer(many=True, allow_empty=False)
    shipping_address = AddressField()
    payment_method = serializers.ChoiceField(choices=Order.PAYMENT_METHOD_CHOICES, default="cod")
    order_memo = serializers.CharField(required=False, allow_blank=True, default="")
    change_needed = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True,
        default=None,
        help_text="착불 결제 시 거스름돈 준비 금액",
    )

    def create(self, validated_data: dict) -> Order:
        return OrderService.create_order(
            user=self.context["request"].user,
            items=LineItemInputSerializer.to_line_items(validated_data["items"]),
            shipping_address=validated_data["shipping_address"],
            payment_method=validated_data["payment_method"],
            order_memo=validated_data["order_memo"],
            change_needed=validated_data["change_needed"],
        )


class OrderStatusUpdateSerializer(serializers.Serializer):
    """주문 상태 변경 요청 (관리자/공급사)"""

    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=1000)


class OrderStatusCountSerializer(serializers.Serializer):
    """주문 상태별 건수"""

    total = serializers.IntegerField()
    pending = serializers.IntegerField()
    processing = serializers.IntegerField()
    shipped = serializers.IntegerField()
    delivered = serializers.IntegerField()
    cancelled = serializers.IntegerField()
    returned = serializers.IntegerField()


class CheckoutSummaryRequestSerializer(serializers.Serializer):
    """체크아웃 요약 요청 (장바구니 상품 + 배송지)"""

    items = LineItemInputSerializer(many=True, allow_empty=True)
    shipping_address = AddressField()


class CheckoutSummarySerializer(serializers.Serializer):
    """체크아웃 요약 결과 (CheckoutSummary)"""

    municipality = serializers.CharField()
    is_free_shipping = serializers.BooleanField()
    subtotal = serializers.DecimalField(source="totals.subtotal", max_digits=14, decimal_places=2)
    discount = serializers.DecimalField(source="totals.discount", max_digits=14, decimal_places=2)
    shipping_fee = serializers.DecimalField(source="totals.shipping_fee", max_digits=14, decimal_places=2)
    grand_total = serializers.DecimalField(source="totals.grand_total", max_digits=14, decimal_places=2)
