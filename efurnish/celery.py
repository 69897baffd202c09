"""
Celery 설정 파일
Redis를 브로커로 사용하여 주문 알림 메일 등 비동기 작업 처리
"""

from __future__ import annotations

import os

from celery import Celery
from celery.schedules import crontab
from celery.signals import task_failure
from celery.utils.log import get_task_logger

# Django 설정 모듈 지정
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "efurnish.settings")

# Celery 앱 생성
app = Celery("efurnish")

# Django 설정에서 CELERY_ 접두사가 붙은 설정 로드
app.config_from_object("django.conf:settings", namespace="CELERY")

# TESTING 환경에서는 Django settings의 broker 설정을 강제로 적용
from django.conf import settings  # noqa: E402

if hasattr(settings, "CELERY_BROKER_URL"):
    app.conf.broker_url = settings.CELERY_BROKER_URL
if hasattr(settings, "CELERY_RESULT_BACKEND"):
    app.conf.result_backend = settings.CELERY_RESULT_BACKEND

# 등록된 Django 앱에서 tasks 자동 로드
app.autodiscover_tasks()

# Celery Beat 스케줄 설정
app.conf.beat_schedule = {
    # 발송 실패한 주문 알림 메일 재시도 - 5분마다
    "retry-failed-notifications": {
        "task": "furniture.tasks.email_tasks.retry_failed_notifications_task",
        "schedule": crontab(minute="*/5"),
        "options": {
            "expires": 300,  # 5분 후 만료
        },
    },
}

app.conf.update(
    # 작업 결과 만료 시간 (초)
    result_expires=3600,
    timezone="Asia/Manila",
    # 작업 직렬화 방식
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    # 작업 실행 옵션
    task_soft_time_limit=300,  # 5분
    task_time_limit=600,  # 10분
    # 워커 설정
    worker_max_tasks_per_child=1000,
    worker_prefetch_multiplier=4,
    # 큐 설정
    task_default_queue="default",
    task_queues={
        "default": {
            "exchange": "default",
            "exchange_type": "direct",
            "routing_key": "default",
        },
        "order_processing": {  # 주문 처리
            "exchange": "order_processing",
            "exchange_type": "direct",
            "routing_key": "order.process",
        },
        "notifications": {  # 알림 메일 전용 큐
            "exchange": "notifications",
            "exchange_type": "direct",
            "routing_key": "notifications",
        },
    },
    task_routes={
        "furniture.tasks.email_tasks.*": {
            "queue": "notifications",
            "routing_key": "notifications",
        },
    },
)

# TESTING 환경에서 broker 설정 최종 강제 적용
if getattr(settings, "TESTING", False):
    app.conf.broker_url = settings.CELERY_BROKER_URL
    app.conf.result_backend = settings.CELERY_RESULT_BACKEND


logger = get_task_logger(__name__)


@task_failure.connect
def task_failure_handler(sender, task_id, exception, **kwargs):
    """
    Log failed tasks
    """
    logger.error(f"Task failed: {sender.name}, task_id={task_id}, error={exception}")
