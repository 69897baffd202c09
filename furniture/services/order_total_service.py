"""주문 금액 계산 서비스

체크아웃 화면, 주문 요약, 주문 생성, 주문 확인 메일이 모두 같은 계산을 사용합니다.

계산식:
- line_total = (unit_price + customization_cost) x quantity   (커스터마이징 비용은 개당)
- line_discount = line_total x discount_percentage / 100
- grand_total = subtotal - discount + shipping_fee
중간 반올림 없이 Decimal로 계산합니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

from .base import log_service_call
from .municipality_service import StructuredAddress
from .shipping_service import ShippingService

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _to_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{field_name} must be a number.")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"{field_name} must be a number.") from e
    if not result.is_finite():
        raise ValueError(f"{field_name} must be a number.")
    return result


@dataclass(frozen=True)
class LineItem:
    """주문 상품 한 줄 (단가, 수량, 할인율, 개당 커스터마이징 비용)"""

    unit_price: Decimal
    quantity: int
    discount_percentage: Decimal = ZERO
    customization_cost: Decimal = ZERO
    name: str = ""
    product_id: str = ""
    customization: dict = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        # frozen dataclass이므로 object.__setattr__로 정규화
        object.__setattr__(self, "unit_price", _to_decimal(self.unit_price, "unit_price"))
        object.__setattr__(
            self, "discount_percentage", _to_decimal(self.discount_percentage, "discount_percentage")
        )
        object.__setattr__(
            self, "customization_cost", _to_decimal(self.customization_cost, "customization_cost")
        )

        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError("quantity must be an integer.")
        if self.quantity < 1:
            raise ValueError("quantity must be at least 1.")
        if self.unit_price < 0:
            raise ValueError("unit_price must not be negative.")
        if not ZERO <= self.discount_percentage <= HUNDRED:
            raise ValueError("discount_percentage must be between 0 and 100.")
        if self.customization_cost < 0:
            raise ValueError("customization_cost must not be negative.")

    @property
    def line_total(self) -> Decimal:
        return (self.unit_price + self.customization_cost) * self.quantity

    @property
    def line_discount(self) -> Decimal:
        return self.line_total * self.discount_percentage / HUNDRED

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LineItem:
        """
        장바구니/요청 데이터 -> LineItem

        허용 키:
        - 단가: unit_price 또는 price
        - 커스터마이징 비용: customization_cost 또는 customization.totalCustomizationCost
        - 할인율: discount_percentage 또는 discount.percentage
        """
        customization = data.get("customization") or {}
        if not isinstance(customization, Mapping):
            customization = {}

        customization_cost = data.get("customization_cost")
        if customization_cost is None:
            customization_cost = customization.get("totalCustomizationCost", ZERO)

        discount_percentage = data.get("discount_percentage")
        if discount_percentage is None:
            discount = data.get("discount") or {}
            discount_percentage = discount.get("percentage", ZERO) if isinstance(discount, Mapping) else ZERO

        unit_price = data.get("unit_price", data.get("price"))

        return cls(
            unit_price=unit_price,
            quantity=data.get("quantity", 1),
            discount_percentage=discount_percentage if discount_percentage is not None else ZERO,
            customization_cost=customization_cost if customization_cost is not None else ZERO,
            name=str(data.get("name") or data.get("product_name") or ""),
            product_id=str(data.get("product_id") or data.get("id") or ""),
            customization=dict(customization),
        )


@dataclass(frozen=True)
class OrderTotals:
    """주문 금액 합계"""

    subtotal: Decimal
    discount: Decimal
    shipping_fee: Decimal
    grand_total: Decimal

    def to_dict(self) -> dict[str, Decimal]:
        return {
            "subtotal": self.subtotal,
            "discount": self.discount,
            "shipping_fee": self.shipping_fee,
            "grand_total": self.grand_total,
        }


@dataclass(frozen=True)
class CheckoutSummary:
    """체크아웃 리뷰 화면용 요약 (배송지 판별 결과 + 금액)"""

    municipality: str
    is_free_shipping: bool
    totals: OrderTotals


class OrderTotalService:
    """주문 금액 합산 서비스"""

    def __init__(self, shipping_service: ShippingService | None = None):
        self.shipping_service = shipping_service or ShippingService()

    @staticmethod
    def aggregate(items: Iterable[LineItem], shipping_fee: Decimal | int | str) -> OrderTotals:
        """
        상품 목록 + 배송비 -> 주문 합계

        - 할인은 상품별로 계산한 뒤 합산
        - 빈 목록이면 subtotal/discount는 0, grand_total은 배송비
        - 입력값을 변경하지 않으며 같은 입력에는 항상 같은 결과

        Args:
            items: LineItem 목록
            shipping_fee: 배송비 (0 이상)

        Returns:
            OrderTotals
        """
        fee = _to_decimal(shipping_fee, "shipping_fee")
        if fee < 0:
            raise ValueError("shipping_fee must not be negative.")

        subtotal = ZERO
        discount = ZERO
        for item in items:
            subtotal += item.line_total
            discount += item.line_discount

        return OrderTotals(
            subtotal=subtotal,
            discount=discount,
            shipping_fee=fee,
            grand_total=subtotal - discount + fee,
        )

    @log_service_call
    def summarize(
        self,
        items: Iterable[LineItem],
        address: StructuredAddress | Mapping[str, Any] | str | None,
    ) -> CheckoutSummary:
        """
        체크아웃 요약 (배송지 기준 배송비 + 주문 합계)

        Args:
            items: LineItem 목록
            address: 배송지 주소

        Returns:
            CheckoutSummary
        """
        quote = self.shipping_service.quote(address)
        totals = self.aggregate(items, quote["shipping_fee"])
        return CheckoutSummary(
            municipality=quote["municipality"],
            is_free_shipping=quote["is_free_shipping"],
            totals=totals,
        )
