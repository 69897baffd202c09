"""
Celery 태스크 패키지
모든 태스크를 여기서 임포트하여 Celery가 자동으로 발견할 수 있게 함
"""

from .email_tasks import retry_failed_notifications_task, send_order_notification_task

__all__ = [
    # 주문 알림 메일 태스크
    "send_order_notification_task",
    "retry_failed_notifications_task",
]
