from __future__ import annotations

from django.db import models


class StoreSetting(models.Model):
    """
    스토어 설정 key-value 저장소

    - key 하나당 하나의 JSON 값 (예: "shipping_settings")
    - 값은 항상 통째로 교체 (부분 수정 없음, 마지막 저장이 최종값)
    """

    key = models.CharField(
        max_length=100,
        unique=True,
        verbose_name="설정 키",
    )

    value = models.JSONField(
        default=dict,
        verbose_name="설정 값",
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name="생성일시")

    updated_at = models.DateTimeField(auto_now=True, verbose_name="수정일시")

    class Meta:
        db_table = "furniture_settings"
        verbose_name = "스토어 설정"
        verbose_name_plural = "스토어 설정 목록"
        ordering = ["key"]

    def __str__(self) -> str:
        return self.key
