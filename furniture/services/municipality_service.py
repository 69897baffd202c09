"""배송지 주소 -> municipality(시/군) 판별 서비스

배송비는 municipality 단위로 결정됩니다.
- 구조화 주소(시/군 선택 입력): city 이름을 그대로 사용
- 자유 입력 주소(문자열): 키워드 매칭으로 추출 (정확도 낮음, fallback 용도)
판별할 수 없으면 항상 OTHER_MUNICIPALITY("other")를 반환하며 예외를 던지지 않습니다.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

logger = logging.getLogger(__name__)

# 어떤 지역에도 매칭되지 않은 주소
OTHER_MUNICIPALITY = "other"


@dataclass(frozen=True)
class LocationName:
    """주소 구성요소 (이름 + 지역 계층 코드)"""

    name: str = ""
    code: str = ""

    @classmethod
    def from_value(cls, value: Any) -> LocationName:
        """{"name", "code"} dict 또는 문자열을 LocationName으로 변환"""
        if isinstance(value, LocationName):
            return value
        if isinstance(value, Mapping):
            return cls(
                name=str(value.get("name") or "").strip(),
                code=str(value.get("code") or "").strip(),
            )
        if isinstance(value, str):
            return cls(name=value.strip())
        return cls()


@dataclass(frozen=True)
class StructuredAddress:
    """
    구조화된 배송지 주소

    barangay/city/province/region은 지역 선택 UI에서 고른 값이며,
    code는 지역 계층 데이터의 식별자입니다 (배송비 계산에는 쓰지 않음).
    """

    street: str = ""
    barangay: LocationName = field(default_factory=LocationName)
    city: LocationName = field(default_factory=LocationName)
    province: LocationName = field(default_factory=LocationName)
    region: LocationName = field(default_factory=LocationName)
    postal_code: str = ""

    LOCATION_PARTS = ("barangay", "city", "province", "region")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StructuredAddress:
        """
        dict -> StructuredAddress

        지원 형식:
            {"city": {"name": "Lupi", "code": "051716000"}, ...}
            {"city": "Lupi", ...}
            {"city_name": "Lupi", "city_code": "051716000", ...}
        """
        parts = {}
        for part in cls.LOCATION_PARTS:
            value = data.get(part)
            if value is None and (f"{part}_name" in data or f"{part}_code" in data):
                value = {"name": data.get(f"{part}_name"), "code": data.get(f"{part}_code")}
            parts[part] = LocationName.from_value(value)

        return cls(
            street=str(data.get("street") or "").strip(),
            postal_code=str(data.get("postal_code") or data.get("postalCode") or "").strip(),
            **parts,
        )

    def to_dict(self) -> dict[str, Any]:
        """주문 스냅샷 저장용 dict"""
        data: dict[str, Any] = {"street": self.street, "postal_code": self.postal_code}
        for part in self.LOCATION_PARTS:
            location = getattr(self, part)
            data[part] = {"name": location.name, "code": location.code}
        return data

    def format(self) -> str:
        """메일/관리자 화면 표시용 한 줄 주소"""
        pieces = [self.street] + [getattr(self, part).name for part in self.LOCATION_PARTS]
        text = ", ".join(piece for piece in pieces if piece)
        if self.postal_code:
            text = f"{text} {self.postal_code}".strip()
        return text


class MunicipalityClassifier:
    """배송지 주소에서 municipality를 판별하는 분류기"""

    # (키워드, 정식 명칭) - 선언 순서대로 첫 매칭이 우선
    # "naga city"처럼 구체적인 키워드가 겹치는 짧은 키워드("naga")보다 앞에 있어야 함
    KEYWORDS: tuple[tuple[str, str], ...] = (
        ("naga city", "Naga City"),
        ("del gallego", "Del Gallego"),
        ("san fernando", "San Fernando"),
        ("cabusao", "Cabusao"),
        ("lupi", "Lupi"),
        ("ragay", "Ragay"),
        ("sipocot", "Sipocot"),
        ("bombon", "Bombon"),
        ("calabanga", "Calabanga"),
        ("camaligan", "Camaligan"),
        ("canaman", "Canaman"),
        ("gainza", "Gainza"),
        ("magarao", "Magarao"),
        ("milaor", "Milaor"),
        ("minalabac", "Minalabac"),
        ("pamplona", "Pamplona"),
        ("pasacao", "Pasacao"),
        ("naga", "Naga City"),
    )

    # 단어 단위로만 매칭 ("naga"가 "Dinagat" 안에서 매칭되지 않도록)
    _PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = tuple(
        (re.compile(rf"\b{re.escape(keyword)}\b"), municipality) for keyword, municipality in KEYWORDS
    )

    @classmethod
    def classify(cls, address: StructuredAddress | Mapping[str, Any] | str | None) -> str:
        """
        주소 -> municipality 이름 (판별 불가 시 "other")

        Args:
            address: StructuredAddress, 주소 dict, 자유 입력 문자열, 또는 None

        Returns:
            str: municipality 이름 또는 OTHER_MUNICIPALITY
        """
        if isinstance(address, StructuredAddress):
            return cls._from_structured(address)

        if isinstance(address, Mapping):
            try:
                structured = StructuredAddress.from_dict(address)
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning(f"주소 파싱 실패, 'other'로 처리: error={e}")
                return OTHER_MUNICIPALITY
            return cls._from_structured(structured)

        if isinstance(address, str):
            return cls.match_keyword(address)

        return OTHER_MUNICIPALITY

    @staticmethod
    def _from_structured(address: StructuredAddress) -> str:
        return address.city.name.strip() or OTHER_MUNICIPALITY

    @classmethod
    def match_keyword(cls, text: str) -> str:
        """자유 입력 주소 문자열에서 키워드로 municipality 추출"""
        lowered = text.strip().lower()
        if not lowered:
            return OTHER_MUNICIPALITY

        for pattern, municipality in cls._PATTERNS:
            if pattern.search(lowered):
                return municipality

        logger.debug(f"키워드 매칭 실패: address={text!r}")
        return OTHER_MUNICIPALITY
