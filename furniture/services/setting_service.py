"""스토어 설정(key-value) 서비스"""

from __future__ import annotations

import logging
from typing import Any, Callable

from django.db import DatabaseError

from ..models.setting import StoreSetting
from .base import ServiceError, log_service_call
from .shipping_service import SHIPPING_SETTINGS_KEY, ShippingService, ShippingSettings

logger = logging.getLogger(__name__)


class SettingServiceError(ServiceError):
    """설정 서비스 관련 에러"""

    pass


class SettingService:
    """key 단위 설정 조회/저장"""

    # 저장된 값이 없을 때 key별 기본값 (등록되지 않은 key는 빈 dict)
    DEFAULTS: dict[str, Callable[[], Any]] = {
        SHIPPING_SETTINGS_KEY: lambda: ShippingService.DEFAULT_SETTINGS.to_dict(),
    }

    # 저장 전 형식 검증이 필요한 key
    VALIDATORS: dict[str, Callable[[Any], Any]] = {
        SHIPPING_SETTINGS_KEY: lambda value: ShippingSettings.from_dict(value).to_dict(),
    }

    @classmethod
    def get_default(cls, key: str) -> Any:
        factory = cls.DEFAULTS.get(key)
        return factory() if factory else {}

    @classmethod
    @log_service_call
    def get_value(cls, key: str) -> Any:
        """
        설정 값 조회

        저장된 값이 없거나 조회에 실패하면 key별 기본값을 반환합니다 (예외 없음).
        """
        try:
            setting = StoreSetting.objects.filter(key=key).first()
        except DatabaseError as e:
            logger.warning(f"설정 조회 실패, 기본값 사용: key={key}, error={e}")
            return cls.get_default(key)

        if setting is None:
            return cls.get_default(key)
        return setting.value

    @classmethod
    @log_service_call
    def set_value(cls, key: str, value: Any) -> StoreSetting:
        """
        설정 값 저장 (없으면 생성, 있으면 전체 교체)

        Raises:
            SettingServiceError: 빈 key 또는 key별 형식 검증 실패
        """
        if not key or not key.strip():
            raise SettingServiceError("Setting key is required.", code="KEY_REQUIRED")

        validator = cls.VALIDATORS.get(key)
        if validator is not None:
            try:
                value = validator(value)
            except ValueError as e:
                raise SettingServiceError(str(e), code="INVALID_VALUE") from e

        setting, created = StoreSetting.objects.update_or_create(key=key, defaults={"value": value})
        logger.info(f"설정 저장: key={key}, created={created}")
        return setting
