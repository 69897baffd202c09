"""
OrderService 테스트

- 주문 생성: 서버 측 배송비/합계 계산, 주문 확인 알림 outbox
- 상태 변경: 전이 규칙, 안내 메일 1회 요청, 요청 실패가 상태 변경에 영향 없음
- 알림 요청은 커밋 후에만 실행되므로 transaction=True로 실제 커밋
- 상태별 통계
"""

from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError, transaction

from furniture.models import NotificationLog, Order, OrderItem
from furniture.services.order_service import OrderCreationError, OrderService, OrderServiceError
from furniture.services.order_total_service import LineItem
from furniture.tests.factories import OrderFactory, TestConstants, UserFactory

TASK_PATH = "furniture.services.order_service.send_order_notification_task"


@pytest.fixture
def cart_items():
    """장바구니 상품 2개 (소계 20500, 할인 1550)"""
    return [
        LineItem(
            unit_price="15000",
            quantity=1,
            discount_percentage="10",
            customization_cost="500",
            name="3-Seater Sofa",
            product_id="sofa-01",
            customization={"fabric": "linen"},
        ),
        LineItem(unit_price="2500", quantity=2, name="Narra Dining Chair", product_id="chair-02"),
    ]


@pytest.mark.django_db(transaction=True)
class TestCreateOrder:
    """주문 생성"""

    def test_create_order_in_free_shipping_area(self, user, cart_items, static_shipping_service):
        # Arrange & Act
        with patch(TASK_PATH) as mock_task:
            order = OrderService.create_order(
                user=user,
                items=cart_items,
                shipping_address=TestConstants.FREE_AREA_ADDRESS,
                shipping_service=static_shipping_service,
            )

        # Assert
        order.refresh_from_db()
        assert order.status == "pending"
        assert order.user == user
        assert order.shipping_municipality == "Lupi"
        assert order.is_free_shipping is True
        assert order.subtotal == Decimal("20500.00")
        assert order.discount_amount == Decimal("1550.00")
        assert order.shipping_fee == Decimal("0.00")
        assert order.total_amount == Decimal("18950.00")
        assert order.order_items.count() == 2
        mock_task.delay.assert_called_once()

    def test_create_order_in_standard_fee_area(self, user, cart_items, static_shipping_service):
        with patch(TASK_PATH):
            order = OrderService.create_order(
                user=user,
                items=cart_items,
                shipping_address=TestConstants.PAID_AREA_ADDRESS,
                shipping_service=static_shipping_service,
            )

        assert order.shipping_municipality == "Pili"
        assert order.is_free_shipping is False
        assert order.shipping_fee == Decimal("500")
        assert order.total_amount == order.subtotal - order.discount_amount + order.shipping_fee

    def test_order_items_are_snapshotted(self, user, cart_items, static_shipping_service):
        with patch(TASK_PATH):
            order = OrderService.create_order(
                user=user,
                items=cart_items,
                shipping_address="Lupi, Camarines Sur",
                shipping_service=static_shipping_service,
            )

        sofa = order.order_items.get(product_id="sofa-01")
        assert sofa.product_name == "3-Seater Sofa"
        assert sofa.customization_cost == Decimal("500")
        assert sofa.customization == {"fabric": "linen"}
        assert sofa.get_subtotal() == Decimal("15500")

    def test_address_snapshot_has_full_address(self, user, cart_items, static_shipping_service):
        with patch(TASK_PATH):
            order = OrderService.create_order(
                user=user,
                items=cart_items,
                shipping_address=TestConstants.FREE_AREA_ADDRESS,
                shipping_service=static_shipping_service,
            )

        assert order.shipping_address["city"] == {"name": "Lupi", "code": "051716000"}
        assert order.shipping_address["full_address"].startswith("123 Rizal St, Poblacion, Lupi")

    def test_free_text_address_snapshot(self, user, cart_items, static_shipping_service):
        with patch(TASK_PATH):
            order = OrderService.create_order(
                user=user,
                items=cart_items,
                shipping_address="  Zone 4, Sipocot  ",
                shipping_service=static_shipping_service,
            )

        assert order.shipping_address == {"full_address": "Zone 4, Sipocot"}
        assert order.shipping_municipality == "Sipocot"

    def test_totals_are_rounded_to_centavos(self, user, static_shipping_service):
        items = [LineItem(unit_price="0.35", quantity=3, discount_percentage="33.33")]

        with patch(TASK_PATH):
            order = OrderService.create_order(
                user=user,
                items=items,
                shipping_address="Makati",
                shipping_service=static_shipping_service,
            )

        # 1.05 x 33.33% = 0.349965 -> 0.35
        assert order.subtotal == Decimal("1.05")
        assert order.discount_amount == Decimal("0.35")
        assert order.total_amount == Decimal("500.70")

    def test_accepts_cart_dicts(self, user, static_shipping_service):
        items = [{"id": "bed-1", "name": "Queen Bed", "price": "18000", "quantity": 1}]

        with patch(TASK_PATH):
            order = OrderService.create_order(
                user=user,
                items=items,
                shipping_address="Lupi",
                shipping_service=static_shipping_service,
            )

        assert order.subtotal == Decimal("18000")
        assert order.order_items.get().product_id == "bed-1"

    def test_change_needed_only_for_cod(self, user, cart_items, static_shipping_service):
        with patch(TASK_PATH):
            cod_order = OrderService.create_order(
                user=user,
                items=cart_items,
                shipping_address="Lupi",
                payment_method="cod",
                change_needed=Decimal("20000"),
                shipping_service=static_shipping_service,
            )
            online_order = OrderService.create_order(
                user=user,
                items=cart_items,
                shipping_address="Lupi",
                payment_method="online",
                change_needed=Decimal("20000"),
                shipping_service=static_shipping_service,
            )

        assert cod_order.change_needed == Decimal("20000")
        assert online_order.change_needed is None

    def test_confirmation_notification_is_queued(self, user, cart_items, static_shipping_service):
        # Act
        with patch(TASK_PATH) as mock_task:
            order = OrderService.create_order(
                user=user,
                items=cart_items,
                shipping_address="Lupi",
                shipping_service=static_shipping_service,
            )

        # Assert
        notification_log = NotificationLog.objects.get(order=order)
        assert notification_log.notification_type == "order_confirmation"
        assert notification_log.status == "pending"
        assert notification_log.recipient_email == "customer@example.com"
        assert notification_log.subject == f"Order Confirmation #{order.id}"
        assert notification_log.payload["total"] == str(order.total_amount)
        mock_task.delay.assert_called_once_with(notification_log.id)

    def test_empty_order_raises(self, user, static_shipping_service):
        with pytest.raises(OrderServiceError) as exc_info:
            OrderService.create_order(
                user=user,
                items=[],
                shipping_address="Lupi",
                shipping_service=static_shipping_service,
            )

        assert exc_info.value.code == "EMPTY_ORDER"
        assert Order.objects.count() == 0

    def test_invalid_item_raises(self, user, static_shipping_service):
        with pytest.raises(OrderServiceError) as exc_info:
            OrderService.create_order(
                user=user,
                items=[{"price": "-100", "quantity": 1}],
                shipping_address="Lupi",
                shipping_service=static_shipping_service,
            )

        assert exc_info.value.code == "INVALID_ITEM"

    def test_invalid_payment_method_raises(self, user, cart_items, static_shipping_service):
        with pytest.raises(OrderServiceError) as exc_info:
            OrderService.create_order(
                user=user,
                items=cart_items,
                shipping_address="Lupi",
                payment_method="bitcoin",
                shipping_service=static_shipping_service,
            )

        assert exc_info.value.code == "INVALID_PAYMENT_METHOD"

    def test_database_error_creates_nothing(self, user, cart_items, static_shipping_service):
        """저장 실패 시 주문/상품/알림 모두 저장되지 않음"""
        # Arrange
        with patch.object(OrderItem.objects, "bulk_create", side_effect=DatabaseError("disk full")):
            with patch(TASK_PATH) as mock_task:
                # Act
                with pytest.raises(OrderCreationError) as exc_info:
                    OrderService.create_order(
                        user=user,
                        items=cart_items,
                        shipping_address="Lupi",
                        shipping_service=static_shipping_service,
                    )

        # Assert
        assert exc_info.value.code == "ORDER_CREATE_FAILED"
        assert Order.objects.count() == 0
        assert NotificationLog.objects.count() == 0
        mock_task.delay.assert_not_called()

    def test_user_without_email_still_queues_notification(self, cart_items, static_shipping_service):
        """수신 이메일이 없어도 알림 로그를 남기고 발송을 요청"""
        user = UserFactory(username="no_email", email="")

        with patch(TASK_PATH) as mock_task:
            order = OrderService.create_order(
                user=user,
                items=cart_items,
                shipping_address="Lupi",
                shipping_service=static_shipping_service,
            )

        notification_log = NotificationLog.objects.get(order=order)
        assert notification_log.recipient_email == ""
        mock_task.delay.assert_called_once_with(notification_log.id)

    def test_user_without_email_is_recorded_as_failed(self, cart_items, static_shipping_service):
        user = UserFactory(username="no_email", email="")

        order = OrderService.create_order(
            user=user,
            items=cart_items,
            shipping_address="Lupi",
            shipping_service=static_shipping_service,
        )

        notification_log = NotificationLog.objects.get(order=order)
        assert notification_log.status == "failed"
        assert notification_log.error_message == "no recipient email"


@pytest.mark.django_db(transaction=True)
class TestTransitionStatus:
    """주문 상태 변경"""

    @pytest.mark.parametrize("new_status", ["processing", "shipped", "delivered", "cancelled", "returned"])
    def test_transition_sends_one_notification(self, order, staff_user, new_status):
        """pending 주문의 상태 변경 1회당 알림 요청 1회"""
        # Act
        with patch(TASK_PATH) as mock_task:
            updated = OrderService.transition_status(order.id, new_status, changed_by=staff_user)

        # Assert
        order.refresh_from_db()
        assert updated.status == new_status
        assert order.status == new_status
        assert order.status_updated_at is not None

        notification_log = NotificationLog.objects.get(order=order, notification_type="order_status_update")
        assert notification_log.payload["status"] == new_status
        assert notification_log.payload["message"] == OrderService.get_status_message(new_status)
        assert notification_log.subject == f"Order Status Update - Order #{order.id}"
        mock_task.delay.assert_called_once_with(notification_log.id)

    def test_reason_is_saved_and_sent(self, order):
        with patch(TASK_PATH):
            OrderService.transition_status(order.id, "cancelled", reason="Out of stock")

        order.refresh_from_db()
        notification_log = NotificationLog.objects.get(order=order)
        assert order.status_reason == "Out of stock"
        assert notification_log.payload["reason"] == "Out of stock"

    def test_notification_payload_contents(self, order):
        with patch(TASK_PATH):
            OrderService.transition_status(order.id, "shipped")

        payload = NotificationLog.objects.get(order=order).payload
        assert payload["recipient"] == "customer@example.com"
        assert payload["recipient_name"] == "Maria Santos"
        assert payload["order_id"] == order.id
        assert payload["total"] == "1500.00"
        assert [item["name"] for item in payload["items"]] == ["Narra Dining Chair", "Rattan Side Table"]

    def test_enqueue_failure_does_not_block_transition(self, order):
        """메일 요청 실패는 상태 변경 결과에 영향 없음 (로그는 failed로 남김)"""
        # Arrange
        with patch(TASK_PATH) as mock_task:
            mock_task.delay.side_effect = ConnectionError("broker unavailable")

            # Act
            updated = OrderService.transition_status(order.id, "processing")

        # Assert
        order.refresh_from_db()
        assert updated.status == "processing"
        assert order.status == "processing"
        notification_log = NotificationLog.objects.get(order=order)
        assert notification_log.status == "failed"
        assert "broker unavailable" in notification_log.error_message

    def test_user_without_email_still_gets_one_notification(self):
        # Arrange
        order = OrderFactory(user=UserFactory(username="no_email", email=""))

        # Act
        with patch(TASK_PATH) as mock_task:
            OrderService.transition_status(order.id, "shipped")

        # Assert
        notification_log = NotificationLog.objects.get(order=order)
        assert notification_log.recipient_email == ""
        mock_task.delay.assert_called_once_with(notification_log.id)

    def test_notification_waits_for_outer_commit(self, order):
        """바깥 트랜잭션이 커밋되기 전에는 발송 요청하지 않음"""
        with patch(TASK_PATH) as mock_task:
            with transaction.atomic():
                OrderService.transition_status(order.id, "processing")
                mock_task.delay.assert_not_called()

            mock_task.delay.assert_called_once()

    def test_rolled_back_transition_sends_nothing(self, order):
        with patch(TASK_PATH) as mock_task:
            with pytest.raises(RuntimeError):
                with transaction.atomic():
                    OrderService.transition_status(order.id, "processing")
                    raise RuntimeError("rollback")

        order.refresh_from_db()
        assert order.status == "pending"
        assert NotificationLog.objects.filter(order=order).count() == 0
        mock_task.delay.assert_not_called()

    def test_unknown_status_raises(self, order):
        with patch(TASK_PATH) as mock_task:
            with pytest.raises(OrderServiceError) as exc_info:
                OrderService.transition_status(order.id, "teleported")

        assert exc_info.value.code == "INVALID_STATUS"
        mock_task.delay.assert_not_called()

    def test_missing_order_raises(self, db):
        with pytest.raises(OrderServiceError) as exc_info:
            OrderService.transition_status(999999, "processing")

        assert exc_info.value.code == "ORDER_NOT_FOUND"

    @pytest.mark.parametrize(
        "current, new_status",
        [
            ("processing", "pending"),
            ("shipped", "processing"),
            ("delivered", "cancelled"),
            ("cancelled", "processing"),
            ("returned", "delivered"),
            ("pending", "pending"),
        ],
    )
    def test_disallowed_transition_raises(self, order_factory, current, new_status):
        # Arrange
        order = order_factory(status=current)

        # Act
        with patch(TASK_PATH) as mock_task:
            with pytest.raises(OrderServiceError) as exc_info:
                OrderService.transition_status(order.id, new_status)

        # Assert
        order.refresh_from_db()
        assert exc_info.value.code == "INVALID_TRANSITION"
        assert exc_info.value.details == {"from": current, "to": new_status}
        assert order.status == current
        assert NotificationLog.objects.filter(order=order).count() == 0
        mock_task.delay.assert_not_called()

    def test_full_progression(self, order):
        with patch(TASK_PATH) as mock_task:
            for new_status in ["processing", "shipped", "delivered"]:
                OrderService.transition_status(order.id, new_status)

        order.refresh_from_db()
        assert order.status == "delivered"
        assert mock_task.delay.call_count == 3
        assert NotificationLog.objects.filter(order=order).count() == 3


class TestStatusMessage:
    """상태별 안내 문구"""

    @pytest.mark.parametrize(
        "status, expected",
        [
            ("processing", "We're now processing your order."),
            ("shipped", "Your order has been shipped and is on its way!"),
            ("delivered", "Your order has been delivered. Enjoy!"),
            ("cancelled", "Your order has been cancelled."),
        ],
    )
    def test_known_status(self, status, expected):
        assert OrderService.get_status_message(status) == expected

    def test_other_status_uses_default_message(self):
        assert OrderService.get_status_message("returned") == "Your order status has been updated to: returned"


@pytest.mark.django_db
class TestStatusCounts:
    """상태별 통계"""

    def test_counts_include_every_status(self, db):
        counts = OrderService.get_status_counts()

        assert counts == {
            "total": 0,
            "pending": 0,
            "processing": 0,
            "shipped": 0,
            "delivered": 0,
            "cancelled": 0,
            "returned": 0,
        }

    def test_counts(self, user):
        # Arrange
        for status in ["pending", "pending", "shipped", "cancelled"]:
            OrderFactory(user=user, status=status)

        # Act
        counts = OrderService.get_status_counts()

        # Assert
        assert counts["total"] == 4
        assert counts["pending"] == 2
        assert counts["shipped"] == 1
        assert counts["cancelled"] == 1
        assert counts["delivered"] == 0

    def test_counts_for_queryset(self, user, other_user):
        OrderFactory(user=user, status="pending")
        OrderFactory(user=other_user, status="pending")

        counts = OrderService.get_status_counts(Order.objects.filter(user=user))

        assert counts["total"] == 1
