from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models

phone_regex = RegexValidator(
    regex=r"^(\+63|0)9\d{9}$",
    message="Enter a mobile number like '09171234567' or '+639171234567'.",
)


class User(AbstractUser):
    """
    커스텀 User 모델
    AbstractUser를 상속받아 기본 필드들(username, email, password 등)을 모두 포함하고,
    주문 알림 메일과 관리자/공급사 권한에 필요한 필드를 추가합니다.

    권한 구분:
    - is_staff: 관리자 (설정 변경, 주문 상태 변경)
    - is_supplier: 승인된 공급사 (배송비 설정, 주문 상태 변경)
    - 그 외: 일반 고객
    """

    full_name = models.CharField(
        max_length=150,
        blank=True,
        verbose_name="이름",
        help_text="주문 안내 메일에 표시되는 이름",
    )

    phone_number = models.CharField(
        max_length=15,
        validators=[phone_regex],
        blank=True,
        verbose_name="전화번호",
    )

    is_supplier = models.BooleanField(
        default=False,
        verbose_name="공급사 여부",
        help_text="체크 시 공급사 포털에서 배송비 설정 및 주문 상태 변경 권한 부여",
    )

    class Meta:
        db_table = "furniture_users"
        verbose_name = "사용자"
        verbose_name_plural = "사용자 목록"

    def __str__(self) -> str:
        return f"{self.username} ({self.display_name})"

    @property
    def display_name(self) -> str:
        """메일 인사말용 이름 (full_name > first/last name > username 순)"""
        return self.full_name or self.get_full_name() or self.username

    @property
    def can_manage_orders(self) -> bool:
        """주문 상태 변경 가능 여부 (관리자 또는 공급사)"""
        return self.is_staff or self.is_supplier
