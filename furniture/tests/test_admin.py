"""
관리자 페이지 주문 상태 변경 액션 테스트
"""

from unittest.mock import patch

import pytest
from django.contrib import admin

from furniture.admin import OrderAdmin
from furniture.models import Order

TASK_PATH = "furniture.services.order_service.send_order_notification_task"


@pytest.fixture
def order_admin():
    return OrderAdmin(Order, admin.site)


@pytest.mark.django_db(transaction=True)
class TestOrderAdminActions:
    """선택 주문 일괄 상태 변경"""

    def test_every_non_pending_status_has_an_action(self, order_admin):
        action_statuses = {name.removeprefix("mark_as_") for name in order_admin.actions}

        assert action_statuses == set(Order.ALLOWED_TRANSITIONS["pending"])

    def test_mark_as_returned(self, rf, order_admin, staff_user, order_factory):
        # Arrange
        shipped = order_factory(status="shipped")
        request = rf.post("/admin/furniture/order/")
        request.user = staff_user

        # Act
        with patch(TASK_PATH) as mock_task, patch.object(OrderAdmin, "message_user") as mock_message:
            order_admin.mark_as_returned(request, Order.objects.filter(pk=shipped.pk))

        # Assert
        shipped.refresh_from_db()
        assert shipped.status == "returned"
        mock_task.delay.assert_called_once()
        mock_message.assert_called_once()

    def test_terminal_orders_are_reported(self, rf, order_admin, staff_user, order_factory):
        delivered = order_factory(status="delivered")
        request = rf.post("/admin/furniture/order/")
        request.user = staff_user

        with patch(TASK_PATH), patch.object(OrderAdmin, "message_user") as mock_message:
            order_admin.mark_as_returned(request, Order.objects.filter(pk=delivered.pk))

        delivered.refresh_from_db()
        assert delivered.status == "delivered"
        assert mock_message.call_count == 2
