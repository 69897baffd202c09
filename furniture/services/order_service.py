"""주문 서비스 레이어

- 주문 생성 (체크아웃 제출): 배송비/합계 계산 후 Order + OrderItem 저장, 주문 확인 메일
- 주문 상태 변경: 전이 규칙 검증, 상태 저장, 상태 변경 안내 메일
- 주문 상태별 통계 (관리자 대시보드)

메일은 outbox 방식으로 처리합니다.
상태 변경과 같은 트랜잭션에서 NotificationLog(pending)를 저장하고,
커밋 후 Celery 태스크로 발송합니다. 발송 결과는 주문 처리 결과에 영향을 주지 않습니다.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping

from django.db import DatabaseError, transaction
from django.db.models import Count
from django.utils import timezone

from ..models.notification import NotificationLog
from ..models.order import Order, OrderItem
from ..tasks.email_tasks import send_order_notification_task
from .base import ServiceError, log_service_call
from .municipality_service import StructuredAddress
from .order_total_service import LineItem, OrderTotals, OrderTotalService
from .shipping_service import ShippingService

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class OrderServiceError(ServiceError):
    """주문 서비스 관련 에러"""

    pass


class OrderCreationError(OrderServiceError):
    """주문 저장 실패 (재시도 가능)"""

    def __init__(self, message: str = "Failed to place order. Please try again.", details: dict | None = None):
        super().__init__(message, code="ORDER_CREATE_FAILED", details=details)


class OrderService:
    """주문 관련 비즈니스 로직을 처리하는 서비스"""

    # 상태 변경 안내 메일 문구
    STATUS_MESSAGES = {
        "processing": "We're now processing your order.",
        "shipped": "Your order has been shipped and is on its way!",
        "delivered": "Your order has been delivered. Enjoy!",
        "cancelled": "Your order has been cancelled.",
    }
    DEFAULT_STATUS_MESSAGE = "Your order status has been updated to: {status}"
    CONFIRMATION_MESSAGE = "Thank you for your order! We'll let you know once it's being processed."

    SUBJECTS = {
        "order_confirmation": "Order Confirmation #{order_id}",
        "order_status_update": "Order Status Update - Order #{order_id}",
    }

    VALID_STATUSES = frozenset(status for status, _ in Order.STATUS_CHOICES)
    VALID_PAYMENT_METHODS = frozenset(method for method, _ in Order.PAYMENT_METHOD_CHOICES)

    @classmethod
    def get_status_message(cls, status: str) -> str:
        """상태별 고객 안내 문구"""
        return cls.STATUS_MESSAGES.get(status, cls.DEFAULT_STATUS_MESSAGE.format(status=status))

    # ------------------------------------------------------------------
    # 주문 생성
    # ------------------------------------------------------------------

    @classmethod
    @log_service_call
    def create_order(
        cls,
        user,
        items: Iterable[LineItem | Mapping[str, Any]],
        shipping_address: StructuredAddress | Mapping[str, Any] | str,
        payment_method: str = "cod",
        order_memo: str = "",
        change_needed: Decimal | None = None,
        shipping_service: ShippingService | None = None,
    ) -> Order:
        """
        체크아웃 제출 -> 주문 생성

        Args:
            user: 주문 사용자
            items: LineItem 또는 상품 dict 목록
            shipping_address: 배송지 (구조화 주소 또는 자유 입력 문자열)
            payment_method: "cod" 또는 "online"
            order_memo: 배송 요청사항
            change_needed: 착불 결제 시 거스름돈 준비 금액
            shipping_service: 배송비 계산 서비스 (None이면 DB 설정 사용)

        Returns:
            Order: 생성된 주문

        Raises:
            OrderServiceError: 상품 없음, 잘못된 상품 정보/결제 방법
            OrderCreationError: 주문 저장 실패
        """
        try:
            line_items = [item if isinstance(item, LineItem) else LineItem.from_dict(item) for item in items]
        except (ValueError, TypeError, AttributeError) as e:
            raise OrderServiceError(f"Invalid order item: {e}", code="INVALID_ITEM") from e

        if not line_items:
            raise OrderServiceError("Your order has no items.", code="EMPTY_ORDER")

        if payment_method not in cls.VALID_PAYMENT_METHODS:
            raise OrderServiceError(
                f"Unsupported payment method: {payment_method}",
                code="INVALID_PAYMENT_METHOD",
            )

        user_id = getattr(user, "id", None)
        logger.info(
            f"주문 생성 시작: user_id={user_id}, items_count={len(line_items)}, payment_method={payment_method}"
        )

        # 1. 배송비 + 주문 합계 계산 (설정 조회 실패 시 기본값으로 계산됨)
        shipping_service = shipping_service or ShippingService()
        quote = shipping_service.quote(shipping_address)
        totals = cls._round_totals(OrderTotalService.aggregate(line_items, quote["shipping_fee"]))

        logger.info(
            f"주문 금액 계산 완료: municipality={quote['municipality']}, subtotal={totals.subtotal}, "
            f"discount={totals.discount}, shipping_fee={totals.shipping_fee}, grand_total={totals.grand_total}"
        )

        # 2. 주문 + 주문 상품 + 확인 메일 outbox 저장 (하나의 트랜잭션)
        try:
            with transaction.atomic():
                order = Order.objects.create(
                    user=user,
                    status="pending",
                    payment_method=payment_method,
                    payment_status="pending",
                    shipping_address=cls._address_snapshot(shipping_address),
                    shipping_municipality=quote["municipality"],
                    subtotal=totals.subtotal,
                    discount_amount=totals.discount,
                    shipping_fee=totals.shipping_fee,
                    total_amount=totals.grand_total,
                    is_free_shipping=quote["is_free_shipping"],
                    change_needed=change_needed if payment_method == "cod" else None,
                    order_memo=order_memo,
                )
                OrderItem.objects.bulk_create(
                    [
                        OrderItem(
                            order=order,
                            product_id=item.product_id,
                            product_name=item.name,
                            quantity=item.quantity,
                            unit_price=item.unit_price,
                            discount_percentage=item.discount_percentage,
                            customization_cost=item.customization_cost,
                            customization=item.customization,
                        )
                        for item in line_items
                    ]
                )
                notification_log = cls._create_notification_log(order, "order_confirmation")

                # 3. 커밋 후 주문 확인 메일 발송 요청
                cls._dispatch_on_commit(notification_log)
        except DatabaseError as e:
            logger.error(f"주문 저장 실패: user_id={user_id}, error={e}", exc_info=True)
            raise OrderCreationError(details={"reason": str(e)}) from e

        logger.info(f"주문 생성 완료: order_id={order.id}, user_id={user_id}, total_amount={order.total_amount}")

        return order

    @staticmethod
    def _round_totals(totals: OrderTotals) -> OrderTotals:
        """DB 저장 단위(센타보)로 반올림 (합계 공식은 반올림 후 값으로 다시 맞춤)"""
        subtotal = totals.subtotal.quantize(CENT, rounding=ROUND_HALF_UP)
        discount = totals.discount.quantize(CENT, rounding=ROUND_HALF_UP)
        shipping_fee = totals.shipping_fee.quantize(CENT, rounding=ROUND_HALF_UP)
        return OrderTotals(
            subtotal=subtotal,
            discount=discount,
            shipping_fee=shipping_fee,
            grand_total=subtotal - discount + shipping_fee,
        )

    @staticmethod
    def _address_snapshot(address: StructuredAddress | Mapping[str, Any] | str) -> dict[str, Any]:
        """주문에 저장할 배송지 스냅샷"""
        if isinstance(address, StructuredAddress):
            structured = address
        elif isinstance(address, Mapping):
            structured = StructuredAddress.from_dict(address)
        else:
            return {"full_address": str(address or "").strip()}

        snapshot = structured.to_dict()
        snapshot["full_address"] = structured.format()
        return snapshot

    # ------------------------------------------------------------------
    # 주문 상태 변경
    # ------------------------------------------------------------------

    @classmethod
    @log_service_call
    def transition_status(cls, order_id: int, new_status: str, reason: str = "", changed_by=None) -> Order:
        """
        주문 상태 변경

        - 전이 규칙: Order.ALLOWED_TRANSITIONS (종료 상태에서는 변경 불가, 같은 상태 재설정 불가)
        - 행 잠금(select_for_update) 후 상태 저장 + 안내 메일 outbox 저장
        - 커밋 후 메일 발송 태스크 1회 요청 (요청 실패는 로그만 남김)

        Args:
            order_id: 주문 ID
            new_status: 변경할 상태
            reason: 변경 사유 (메일에 포함)
            changed_by: 변경한 관리자/공급사 (로그용)

        Returns:
            Order: 상태가 변경된 주문

        Raises:
            OrderServiceError: INVALID_STATUS / ORDER_NOT_FOUND / INVALID_TRANSITION
        """
        if new_status not in cls.VALID_STATUSES:
            raise OrderServiceError(f"Unknown order status: {new_status}", code="INVALID_STATUS")

        changed_by_id = getattr(changed_by, "id", None)

        with transaction.atomic():
            try:
                order = Order.objects.select_for_update().select_related("user").get(pk=order_id)
            except Order.DoesNotExist:
                raise OrderServiceError(f"Order #{order_id} not found.", code="ORDER_NOT_FOUND")

            previous_status = order.status
            if not order.can_transition_to(new_status):
                raise OrderServiceError(
                    f"Cannot change order status from {previous_status} to {new_status}.",
                    code="INVALID_TRANSITION",
                    details={"from": previous_status, "to": new_status},
                )

            order.status = new_status
            order.status_reason = reason or ""
            order.status_updated_at = timezone.now()
            order.save(update_fields=["status", "status_reason", "status_updated_at", "updated_at"])

            notification_log = cls._create_notification_log(order, "order_status_update")
            cls._dispatch_on_commit(notification_log)

        logger.info(
            f"주문 상태 변경: order_id={order.id}, {previous_status} -> {new_status}, "
            f"changed_by={changed_by_id}"
        )

        return order

    # ------------------------------------------------------------------
    # 통계
    # ------------------------------------------------------------------

    @classmethod
    @log_service_call
    def get_status_counts(cls, queryset=None) -> dict[str, int]:
        """
        주문 상태별 건수

        Returns:
            dict: {"total": n, "pending": n, "processing": n, ...} (모든 상태 포함)
        """
        queryset = Order.objects.all() if queryset is None else queryset
        counts = {status: 0 for status, _ in Order.STATUS_CHOICES}
        for row in queryset.order_by().values("status").annotate(count=Count("id")):
            counts[row["status"]] = row["count"]
        return {"total": sum(counts.values()), **counts}

    # ------------------------------------------------------------------
    # 알림 (outbox)
    # ------------------------------------------------------------------

    @classmethod
    def build_notification_payload(cls, order: Order, notification_type: str) -> dict[str, Any]:
        """메일 렌더링에 필요한 주문 스냅샷 (JSON 직렬화 가능한 값만)"""
        user = order.user
        if notification_type == "order_confirmation":
            message = cls.CONFIRMATION_MESSAGE
        else:
            message = cls.get_status_message(order.status)

        return {
            "recipient": user.email if user else "",
            "recipient_name": user.display_name if user else "",
            "order_id": order.id,
            "status": order.status,
            "status_display": order.get_status_display(),
            "message": message,
            "reason": order.status_reason,
            "items": [
                {
                    "name": item.product_name,
                    "quantity": item.quantity,
                    "unit_price": str(item.unit_price),
                    "customization_cost": str(item.customization_cost),
                    "customization": item.customization,
                }
                for item in order.order_items.all()
            ],
            "subtotal": str(order.subtotal),
            "discount": str(order.discount_amount),
            "shipping_fee": str(order.shipping_fee),
            "total": str(order.total_amount),
            "payment_method": order.payment_method,
            "payment_status": order.payment_status,
            "shipping_address": order.shipping_address.get("full_address", ""),
            "created_at": order.created_at.isoformat() if order.created_at else None,
            "status_updated_at": order.status_updated_at.isoformat() if order.status_updated_at else None,
        }

    @classmethod
    def _create_notification_log(cls, order: Order, notification_type: str) -> NotificationLog:
        """
        발송 대기 NotificationLog 생성 (호출하는 쪽의 트랜잭션 안에서 실행)

        수신 이메일이 없어도 로그는 남김 (발송 태스크가 failed로 기록)
        """
        payload = cls.build_notification_payload(order, notification_type)
        if not payload["recipient"]:
            logger.warning(f"수신 이메일 없음: order_id={order.id}, type={notification_type}")

        return NotificationLog.objects.create(
            order=order,
            user=order.user,
            notification_type=notification_type,
            recipient_email=payload["recipient"],
            subject=cls.SUBJECTS[notification_type].format(order_id=order.id),
            payload=payload,
        )

    @classmethod
    def _dispatch_on_commit(cls, notification_log: NotificationLog) -> None:
        """트랜잭션 커밋 후 발송 요청 (롤백되면 요청하지 않음)"""
        transaction.on_commit(lambda: cls._dispatch_notification(notification_log))

    @staticmethod
    def _dispatch_notification(notification_log: NotificationLog) -> None:
        """메일 발송 태스크 요청 (실패해도 예외를 던지지 않음, 주기 재시도 태스크가 처리)"""
        try:
            send_order_notification_task.delay(notification_log.id)
        except Exception as e:
            logger.error(
                f"알림 발송 요청 실패: notification_log_id={notification_log.id}, "
                f"order_id={notification_log.order_id}, error={e}"
            )
            try:
                NotificationLog.objects.filter(pk=notification_log.pk, status="pending").update(
                    status="failed",
                    error_message=f"enqueue failed: {e}",
                    updated_at=timezone.now(),
                )
            except DatabaseError as db_error:
                logger.error(f"알림 로그 실패 처리 오류: notification_log_id={notification_log.id}, error={db_error}")
