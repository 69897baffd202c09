from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

if TYPE_CHECKING:
    from ..services.order_total_service import LineItem


class Order(models.Model):
    """
    고객 주문 정보를 저장하는 모델
    - 체크아웃 시 한 번 생성되며, 금액/상품 정보는 이후 수정하지 않음
    - 생성 이후에는 관리자/공급사가 상태(status)만 변경
    """

    # 주문 상태 선택지 정의
    STATUS_CHOICES = [
        ("pending", "주문접수"),  # 주문은 들어왔지만 아직 처리 전
        ("processing", "처리중"),  # 제작/포장 중
        ("shipped", "배송중"),  # 발송됨
        ("delivered", "배송완료"),  # 고객이 받음
        ("cancelled", "주문취소"),  # 주문 취소됨
        ("returned", "반품완료"),  # 반품 처리됨
    ]

    # 상태 진행 순서 (취소/반품은 별도)
    STATUS_PROGRESSION = ["pending", "processing", "shipped", "delivered"]

    TERMINAL_STATUSES = frozenset({"delivered", "cancelled", "returned"})

    # 현재 상태 -> 변경 가능한 상태
    # 진행 순서상 앞으로만 이동 가능, 종료 상태가 아니면 언제든 취소/반품 가능
    ALLOWED_TRANSITIONS = {
        "pending": frozenset({"processing", "shipped", "delivered", "cancelled", "returned"}),
        "processing": frozenset({"shipped", "delivered", "cancelled", "returned"}),
        "shipped": frozenset({"delivered", "cancelled", "returned"}),
        "delivered": frozenset(),
        "cancelled": frozenset(),
        "returned": frozenset(),
    }

    # 결제 방법 선택지 (주문 생성 후 변경 불가)
    PAYMENT_METHOD_CHOICES = [
        ("cod", "Cash on Delivery"),
        ("online", "Online Payment"),
    ]

    PAYMENT_STATUS_CHOICES = [
        ("pending", "결제대기"),
        ("paid", "결제완료"),
    ]

    # 주문한 사용자 (User가 삭제되어도 주문 기록은 남김)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="orders",
        verbose_name="주문자",
    )

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default="pending",
        db_index=True,
        verbose_name="주문상태",
    )

    status_reason = models.TextField(
        blank=True,
        default="",
        verbose_name="상태 변경 사유",
        help_text="취소/반품 사유 등 고객 안내 메일에 포함되는 문구",
    )

    status_updated_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="상태 변경일시",
    )

    payment_method = models.CharField(
        max_length=20,
        choices=PAYMENT_METHOD_CHOICES,
        default="cod",
        verbose_name="결제방법",
    )

    payment_status = models.CharField(
        max_length=20,
        choices=PAYMENT_STATUS_CHOICES,
        default="pending",
        verbose_name="결제상태",
    )

    # 배송지 (주문 당시 주소 스냅샷, 구조화 주소 또는 자유 입력 문자열)
    shipping_address = models.JSONField(
        default=dict,
        verbose_name="배송 주소",
    )

    shipping_municipality = models.CharField(
        max_length=100,
        default="other",
        verbose_name="배송 지역(시/군)",
        help_text="배송비 산정에 사용된 municipality (매칭 실패 시 'other')",
    )

    # 금액 정보 (주문 당시 계산값을 그대로 보존)
    subtotal = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        verbose_name="상품 합계",
    )

    discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        verbose_name="할인 금액",
    )

    shipping_fee = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        verbose_name="배송비",
    )

    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        verbose_name="최종 결제금액",
        help_text="상품 합계 - 할인 금액 + 배송비",
    )

    is_free_shipping = models.BooleanField(
        default=False,
        verbose_name="무료배송 여부",
    )

    # 착불(COD) 결제 시 거스름돈 준비 금액
    change_needed = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
        verbose_name="거스름돈 요청 금액",
    )

    order_memo = models.TextField(
        blank=True,
        default="",
        verbose_name="주문메모",
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name="주문일시")

    updated_at = models.DateTimeField(auto_now=True, verbose_name="수정일시")

    class Meta:
        db_table = "furniture_orders"
        verbose_name = "주문"
        verbose_name_plural = "주문 목록"
        ordering = ["-created_at"]
        indexes = [
            # 주문 상태별 최신 주문 조회 (관리자 주문 목록)
            models.Index(fields=["status", "-created_at"], name="order_status_created_idx"),
            # 사용자별 주문 조회
            models.Index(fields=["user", "-created_at"], name="order_user_created_idx"),
        ]

    def __str__(self) -> str:
        return f'Order #{self.pk} - {self.user.username if self.user else "guest"}'

    @property
    def is_terminal(self) -> bool:
        """종료 상태 여부 (더 이상 상태 변경 불가)"""
        return self.status in self.TERMINAL_STATUSES

    def can_transition_to(self, new_status: str) -> bool:
        """현재 상태에서 new_status로 변경 가능한지 확인"""
        return new_status in self.ALLOWED_TRANSITIONS.get(self.status, frozenset())

    def clean(self) -> None:
        """모델 필드 검증"""
        super().clean()

        # 1. 최종 결제 금액 검증
        expected_total = self.subtotal - self.discount_amount + self.shipping_fee
        if self.total_amount != expected_total:
            raise ValidationError(
                {
                    "total_amount": f"최종 금액이 올바르지 않습니다. "
                    f"예상: {expected_total}, 실제: {self.total_amount}"
                }
            )

        # 2. 무료배송 검증
        if self.is_free_shipping and self.shipping_fee > 0:
            raise ValidationError({"is_free_shipping": "무료배송인 경우 배송비는 0이어야 합니다."})


class OrderItem(models.Model):
    """
    주문에 포함된 개별 상품 정보 (주문 당시 스냅샷)
    - 상품 가격/할인/커스터마이징 비용이 바뀌어도 주문 기록은 유지
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="order_items",
        verbose_name="주문",
    )

    # 상품 카탈로그는 외부 시스템이므로 식별자만 보관
    product_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        verbose_name="상품 ID",
    )

    product_name = models.CharField(max_length=255, verbose_name="상품명(주문당시)")

    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)], verbose_name="수량")

    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        verbose_name="단가(주문당시)",
    )

    discount_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        verbose_name="할인율(%)",
    )

    # 개당 커스터마이징 비용 (수량만큼 곱해짐)
    customization_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        verbose_name="커스터마이징 비용(개당)",
    )

    customization = models.JSONField(
        default=dict,
        blank=True,
        verbose_name="커스터마이징 옵션",
    )

    class Meta:
        db_table = "furniture_order_items"
        verbose_name = "주문 상품"
        verbose_name_plural = "주문 상품 목록"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.product_name} x {self.quantity}"

    def to_line_item(self) -> LineItem:
        """금액 재계산용 LineItem으로 변환"""
        from ..services.order_total_service import LineItem

        return LineItem(
            unit_price=self.unit_price,
            quantity=self.quantity,
            discount_percentage=self.discount_percentage,
            customization_cost=self.customization_cost,
            name=self.product_name,
            product_id=self.product_id,
            customization=self.customization or {},
        )

    def get_subtotal(self) -> Decimal:
        """해당 상품의 소계 ((단가 + 커스터마이징 비용) x 수량)"""
        return self.to_line_item().line_total
