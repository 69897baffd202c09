"""주문 알림 메일 태스크

NotificationLog(outbox)에 저장된 발송 요청을 실제 메일로 보냅니다.
- send_order_notification_task: 로그 1건 발송 (실패 시 failed로 기록, 예외를 던지지 않음)
- retry_failed_notifications_task: 최근 24시간 내 실패 건과 오래 멈춘 대기 건 재발송 (Celery Beat, 5분마다)
"""

from __future__ import annotations

from datetime import timedelta

from celery import shared_task
from celery.utils.log import get_task_logger
from django.conf import settings
from django.core.mail import send_mail
from django.db.models import Q
from django.template.loader import render_to_string
from django.utils import timezone

from ..models.notification import NotificationLog

logger = get_task_logger(__name__)

# 실패 로그 재발송 정책
MAX_NOTIFICATION_RETRIES = 3
RETRY_WINDOW = timedelta(hours=24)

# 이 시간 동안 pending에서 바뀌지 않은 로그는 워커가 놓친 것으로 보고 다시 발송
PENDING_GRACE_PERIOD = timedelta(minutes=10)

NO_RECIPIENT_ERROR = "no recipient email"

TEMPLATES = {
    "order_confirmation": "email/order_confirmation.html",
    "order_status_update": "email/order_status_update.html",
}


def _build_plain_message(payload: dict) -> str:
    """HTML을 표시할 수 없는 메일 클라이언트용 텍스트 본문"""
    lines = [
        f"Hi {payload.get('recipient_name') or 'there'},",
        "",
        payload.get("message", ""),
    ]
    if payload.get("reason"):
        lines.append(f"Reason: {payload['reason']}")

    lines += ["", f"Order #{payload.get('order_id')} ({payload.get('status_display') or payload.get('status')})"]
    for item in payload.get("items", []):
        lines.append(f"- {item['name']} x {item['quantity']} @ PHP {item['unit_price']}")
    lines += [
        "",
        f"Subtotal: PHP {payload.get('subtotal')}",
        f"Discount: PHP {payload.get('discount')}",
        f"Shipping: PHP {payload.get('shipping_fee')}",
        f"Total: PHP {payload.get('total')}",
        "",
        f"Questions? Contact us at {settings.STORE_SUPPORT_EMAIL}.",
    ]
    return "\n".join(lines)


@shared_task(bind=True)
def send_order_notification_task(self, notification_log_id):
    """
    주문 알림 메일 발송 태스크 (비동기)

    Args:
        self: Celery task 인스턴스 (bind=True)
        notification_log_id: NotificationLog ID

    Returns:
        dict: 발송 결과 {'success': bool, 'message': str}
    """
    try:
        notification_log = NotificationLog.objects.get(id=notification_log_id)
    except NotificationLog.DoesNotExist:
        logger.error(f"알림 로그를 찾을 수 없습니다: notification_log_id={notification_log_id}")
        return {"success": False, "message": "알림 로그를 찾을 수 없습니다."}

    # 중복 발송 방지
    if notification_log.status == "sent":
        logger.info(f"이미 발송된 알림입니다: notification_log_id={notification_log_id}")
        return {"success": True, "message": "이미 발송된 알림입니다."}

    if not notification_log.recipient_email:
        logger.warning(
            f"수신 이메일 없음, 발송 실패 처리: notification_log_id={notification_log_id}, "
            f"order_id={notification_log.order_id}"
        )
        notification_log.mark_as_failed(NO_RECIPIENT_ERROR)
        return {"success": False, "message": NO_RECIPIENT_ERROR}

    payload = notification_log.payload or {}

    try:
        html_message = render_to_string(
            TEMPLATES[notification_log.notification_type],
            {
                "payload": payload,
                "support_email": settings.STORE_SUPPORT_EMAIL,
                "support_phone": settings.STORE_SUPPORT_PHONE,
                "orders_url": f"{settings.FRONTEND_URL}/orders/{payload.get('order_id', '')}",
            },
        )

        send_mail(
            subject=notification_log.subject,
            message=_build_plain_message(payload),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[notification_log.recipient_email],
            html_message=html_message,
            fail_silently=False,
        )
    except Exception as e:
        # 발송 실패는 주문 처리에 영향을 주지 않음 (주기 태스크가 재시도)
        logger.error(
            f"알림 메일 발송 실패: notification_log_id={notification_log_id}, "
            f"recipient={notification_log.recipient_email}, error={e}"
        )
        notification_log.mark_as_failed(str(e))
        return {"success": False, "message": str(e)}

    notification_log.mark_as_sent()
    logger.info(
        f"알림 메일 발송 성공: notification_log_id={notification_log_id}, "
        f"type={notification_log.notification_type}, recipient={notification_log.recipient_email}"
    )

    return {
        "success": True,
        "message": "메일이 성공적으로 발송되었습니다.",
        "recipient": notification_log.recipient_email,
    }


@shared_task(bind=True)
def retry_failed_notifications_task(self):
    """
    실패한 주문 알림 재발송 태스크 (주기적 실행)

    최근 24시간 이내 알림 중 재시도 횟수가 3회 미만인 것을 재발송
    - failed: 발송 또는 발송 요청 실패
    - pending: 10분 넘게 상태가 바뀌지 않음 (브로커는 받았지만 워커가 처리하지 못한 경우)
    수신 이메일이 없는 로그는 재발송하지 않음

    Returns:
        dict: 재시도 결과 통계
    """
    now = timezone.now()
    retry_logs = (
        NotificationLog.objects.filter(
            created_at__gte=now - RETRY_WINDOW,
            retry_count__lt=MAX_NOTIFICATION_RETRIES,
        )
        .filter(Q(status="failed") | Q(status="pending", updated_at__lt=now - PENDING_GRACE_PERIOD))
        .exclude(recipient_email="")
        .order_by("created_at")
    )

    # delay()가 eager 모드에서 즉시 실행되어 상태가 바뀌므로 ID 목록을 먼저 고정
    rows = list(retry_logs.values_list("id", "status"))
    log_ids = [log_id for log_id, _ in rows]
    total_pending = sum(1 for _, log_status in rows if log_status == "pending")

    retry_attempted = 0
    retry_scheduled = 0

    for notification_log in NotificationLog.objects.filter(id__in=log_ids):
        retry_attempted += 1
        try:
            notification_log.mark_for_retry()
            send_order_notification_task.delay(notification_log.id)
            retry_scheduled += 1
            logger.info(
                f"알림 재발송 예약: notification_log_id={notification_log.id}, "
                f"retry_count={notification_log.retry_count}"
            )
        except Exception as e:
            logger.error(f"알림 재발송 예약 실패: notification_log_id={notification_log.id}, error={e}")
            notification_log.mark_as_failed(f"enqueue failed: {e}")

    result = {
        "success": True,
        "total_failed": len(log_ids) - total_pending,
        "total_pending": total_pending,
        "retry_attempted": retry_attempted,
        "retry_scheduled": retry_scheduled,
    }
    logger.info(f"실패 알림 재시도 완료: {result}")
    return result
