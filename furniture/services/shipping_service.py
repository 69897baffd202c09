"""배송 서비스 레이어

배송비 정책:
- 무료배송 지역(municipality)으로 가는 주문은 배송비 0
- 그 외 지역은 고정 기본 배송비 (standard_shipping_fee)
- 무료배송 지역 목록과 기본 배송비는 관리자/공급사가 변경 가능 (StoreSetting "shipping_settings")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Protocol, TypedDict, runtime_checkable

from django.db import DatabaseError

from ..models.setting import StoreSetting
from .base import log_service_call
from .municipality_service import MunicipalityClassifier, StructuredAddress

logger = logging.getLogger(__name__)

SHIPPING_SETTINGS_KEY = "shipping_settings"


def _normalize_area(name: str) -> str:
    return name.strip().lower()


@dataclass(frozen=True, eq=False)
class ShippingSettings:
    """
    배송비 설정 값

    - free_shipping_areas: 무료배송 municipality 이름 목록 (대소문자/앞뒤 공백 무시)
    - standard_shipping_fee: 그 외 지역 기본 배송비 (0 이상, 페소 단위 정수)

    두 설정의 비교는 지역 이름의 대소문자와 순서를 무시합니다.
    """

    free_shipping_areas: tuple[str, ...]
    standard_shipping_fee: Decimal

    @classmethod
    def build(cls, free_shipping_areas: Iterable[str], standard_shipping_fee: Any) -> ShippingSettings:
        """
        입력값 검증 후 ShippingSettings 생성

        - 지역 이름은 앞뒤 공백 제거, 빈 이름 제외, 대소문자 무시 중복 제거 (처음 입력한 표기 유지)
        - 배송비는 음수/소수/숫자가 아닌 값 불가

        Raises:
            ValueError: 형식이 올바르지 않은 경우
        """
        if isinstance(free_shipping_areas, (str, bytes)) or not isinstance(free_shipping_areas, Iterable):
            raise ValueError("free_shipping_areas must be a list of municipality names.")

        areas: list[str] = []
        seen: set[str] = set()
        for area in free_shipping_areas:
            if not isinstance(area, str):
                raise ValueError("free_shipping_areas must contain only strings.")
            name = area.strip()
            if not name or _normalize_area(name) in seen:
                continue
            seen.add(_normalize_area(name))
            areas.append(name)

        return cls(free_shipping_areas=tuple(areas), standard_shipping_fee=cls._parse_fee(standard_shipping_fee))

    @staticmethod
    def _parse_fee(value: Any) -> Decimal:
        if isinstance(value, bool) or value is None:
            raise ValueError("standard_shipping_fee must be a number.")
        try:
            fee = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise ValueError("standard_shipping_fee must be a number.") from e
        if not fee.is_finite():
            raise ValueError("standard_shipping_fee must be a number.")
        if fee < 0:
            raise ValueError("standard_shipping_fee must not be negative.")
        if fee != fee.to_integral_value():
            raise ValueError("standard_shipping_fee must be a whole peso amount.")
        # "500.00" -> "500"
        return fee.to_integral_value()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ShippingSettings:
        """
        저장된 JSON / API 본문 -> ShippingSettings

        snake_case 키와 기존 camelCase 키(freeShippingAreas, standardShippingFee) 모두 허용
        """
        if not isinstance(data, Mapping):
            raise ValueError("Shipping settings must be an object.")

        areas = data.get("free_shipping_areas", data.get("freeShippingAreas"))
        fee = data.get("standard_shipping_fee", data.get("standardShippingFee"))
        if areas is None or fee is None:
            raise ValueError("free_shipping_areas and standard_shipping_fee are required.")
        return cls.build(areas, fee)

    def to_dict(self) -> dict[str, Any]:
        return {
            "free_shipping_areas": list(self.free_shipping_areas),
            "standard_shipping_fee": str(self.standard_shipping_fee),
        }

    @property
    def normalized_areas(self) -> frozenset[str]:
        return frozenset(_normalize_area(area) for area in self.free_shipping_areas)

    def is_free_area(self, municipality: str) -> bool:
        """municipality가 무료배송 지역인지 (대소문자 무시 정확히 일치)"""
        if not isinstance(municipality, str):
            return False
        return _normalize_area(municipality) in self.normalized_areas

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShippingSettings):
            return NotImplemented
        return (
            self.normalized_areas == other.normalized_areas
            and self.standard_shipping_fee == other.standard_shipping_fee
        )

    def __hash__(self) -> int:
        return hash((self.normalized_areas, self.standard_shipping_fee))


class ShippingFeeResult(TypedDict):
    """배송비 계산 결과"""

    municipality: str
    shipping_fee: Decimal
    is_free_shipping: bool


@runtime_checkable
class ShippingSettingsProvider(Protocol):
    """배송비 설정 조회 인터페이스 (서비스에 주입)"""

    def get(self) -> ShippingSettings: ...


class ShippingService:
    """배송 관련 비즈니스 로직을 처리하는 서비스"""

    # 설정이 없거나 읽을 수 없을 때 사용하는 기본값
    DEFAULT_FREE_SHIPPING_AREAS = ("Cabusao", "Del Gallego", "Lupi", "Ragay", "Sipocot")
    DEFAULT_STANDARD_SHIPPING_FEE = Decimal("500")
    DEFAULT_SETTINGS = ShippingSettings(
        free_shipping_areas=DEFAULT_FREE_SHIPPING_AREAS,
        standard_shipping_fee=DEFAULT_STANDARD_SHIPPING_FEE,
    )

    def __init__(self, provider: ShippingSettingsProvider | None = None):
        self.provider = provider or DatabaseShippingSettingsProvider()

    @classmethod
    def compute_fee(cls, municipality: str, settings: ShippingSettings | None = None) -> Decimal:
        """
        배송비 계산

        Args:
            municipality: 배송지 municipality 이름 (MunicipalityClassifier 결과)
            settings: 배송비 설정 (None이면 기본값)

        Returns:
            Decimal: 무료배송 지역이면 0, 아니면 기본 배송비
        """
        settings = settings or cls.DEFAULT_SETTINGS
        if settings.is_free_area(municipality):
            return Decimal("0")
        return settings.standard_shipping_fee

    @log_service_call
    def quote(self, address: StructuredAddress | Mapping[str, Any] | str | None) -> ShippingFeeResult:
        """
        배송지 주소 기준 배송비 견적

        Args:
            address: 구조화 주소 또는 자유 입력 주소

        Returns:
            ShippingFeeResult: municipality, 배송비, 무료배송 여부
        """
        municipality = MunicipalityClassifier.classify(address)
        fee = self.compute_fee(municipality, self.provider.get())

        logger.info(f"배송비 계산 완료: municipality={municipality}, shipping_fee={fee}")

        return {
            "municipality": municipality,
            "shipping_fee": fee,
            "is_free_shipping": fee == 0,
        }


class StaticShippingSettingsProvider:
    """고정된 설정을 반환하는 provider (테스트, 오프라인 계산용)"""

    def __init__(self, settings: ShippingSettings | None = None):
        self.settings = settings or ShippingService.DEFAULT_SETTINGS

    def get(self) -> ShippingSettings:
        return self.settings


class DatabaseShippingSettingsProvider:
    """StoreSetting 테이블에서 배송비 설정을 읽고 쓰는 provider"""

    key = SHIPPING_SETTINGS_KEY

    def get(self) -> ShippingSettings:
        """
        현재 배송비 설정 조회

        - 저장된 값이 없으면 기본값으로 생성
        - DB 오류 또는 저장된 값이 깨진 경우 WARNING 로그 후 기본값 반환 (예외 없음)
        """
        try:
            setting, created = StoreSetting.objects.get_or_create(
                key=self.key,
                defaults={"value": ShippingService.DEFAULT_SETTINGS.to_dict()},
            )
        except DatabaseError as e:
            logger.warning(f"배송비 설정 조회 실패, 기본값 사용: error={e}")
            return ShippingService.DEFAULT_SETTINGS

        if created:
            logger.info(f"배송비 설정 기본값 생성: key={self.key}")

        try:
            return ShippingSettings.from_dict(setting.value)
        except ValueError as e:
            logger.warning(f"저장된 배송비 설정 형식 오류, 기본값 사용: value={setting.value!r}, error={e}")
            return ShippingService.DEFAULT_SETTINGS

    def update(self, settings: ShippingSettings) -> ShippingSettings:
        """
        배송비 설정 전체 교체 (부분 수정 없음, 마지막 저장이 최종값)

        Raises:
            DatabaseError: 저장 실패 시 그대로 전파
        """
        setting, created = StoreSetting.objects.update_or_create(
            key=self.key,
            defaults={"value": settings.to_dict()},
        )
        logger.info(
            f"배송비 설정 저장: free_shipping_areas={list(settings.free_shipping_areas)}, "
            f"standard_shipping_fee={settings.standard_shipping_fee}, created={created}"
        )
        return ShippingSettings.from_dict(setting.value)
