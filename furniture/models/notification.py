from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F
from django.utils import timezone


class NotificationLog(models.Model):
    """
    주문 알림 메일 발송 로그 (outbox)

    주문 생성/상태 변경과 같은 트랜잭션에서 pending으로 저장되고,
    Celery 태스크가 실제 발송 후 sent/failed로 갱신합니다.
    failed 로그와 오래 멈춘 pending 로그는 주기 태스크가 재시도합니다.
    """

    NOTIFICATION_TYPE_CHOICES = [
        ("order_confirmation", "주문 확인"),
        ("order_status_update", "주문 상태 변경"),
    ]

    STATUS_CHOICES = [
        ("pending", "대기중"),
        ("sent", "발송완료"),
        ("failed", "발송실패"),
    ]

    order = models.ForeignKey(
        "furniture.Order",
        on_delete=models.CASCADE,
        related_name="notification_logs",
        verbose_name="주문",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="notification_logs",
        verbose_name="수신 사용자",
    )

    notification_type = models.CharField(
        max_length=30,
        choices=NOTIFICATION_TYPE_CHOICES,
        verbose_name="알림 유형",
    )

    recipient_email = models.EmailField(
        blank=True,
        db_index=True,
        verbose_name="수신자 이메일",
    )

    subject = models.CharField(max_length=255, verbose_name="제목")

    # 메일 본문 렌더링에 필요한 데이터 (JSON 직렬화 가능한 값만)
    payload = models.JSONField(default=dict, verbose_name="발송 데이터")

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default="pending",
        db_index=True,
        verbose_name="상태",
    )

    retry_count = models.PositiveIntegerField(default=0, verbose_name="재시도 횟수")

    error_message = models.TextField(blank=True, default="", verbose_name="에러 메시지")

    sent_at = models.DateTimeField(null=True, blank=True, verbose_name="발송일시")

    created_at = models.DateTimeField(auto_now_add=True, verbose_name="생성일시")

    updated_at = models.DateTimeField(auto_now=True, verbose_name="수정일시")

    class Meta:
        db_table = "furniture_notification_logs"
        verbose_name = "알림 발송 로그"
        verbose_name_plural = "알림 발송 로그 목록"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="notif_status_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.notification_type} - {self.recipient_email} ({self.status})"

    def mark_as_sent(self) -> None:
        """발송 완료 처리"""
        self.status = "sent"
        self.sent_at = timezone.now()
        self.error_message = ""
        self.save(update_fields=["status", "sent_at", "error_message", "updated_at"])

    def mark_as_failed(self, error_message: str = "") -> None:
        """발송 실패 처리"""
        self.status = "failed"
        self.error_message = error_message
        self.save(update_fields=["status", "error_message", "updated_at"])

    def mark_for_retry(self) -> None:
        """재시도 대기 상태로 되돌리고 재시도 횟수 증가"""
        NotificationLog.objects.filter(pk=self.pk).update(
            status="pending",
            retry_count=F("retry_count") + 1,
            updated_at=timezone.now(),
        )
        self.refresh_from_db(fields=["status", "retry_count", "updated_at"])
