from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

CENTS = Decimal("0.01")
DEFAULT_EXPEDITED_FEE = Decimal("75")


class PricedService(Protocol):
    one_time_price: Decimal | None
    recurring_price: Decimal | None
    expedited_price: Decimal | None


@dataclass(frozen=True)
class OrderTotal:
    base_price: Decimal
    expedited_fee: Decimal
    total: Decimal

    @property
    def total_cents(self) -> int:
        return to_cents(self.total)


def _money(value: Decimal | int | str | None) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def base_price(service: PricedService) -> Decimal:
    """One-time price when set, otherwise the recurring price, otherwise zero."""
    if service.one_time_price is not None:
        return _money(service.one_time_price)
    if service.recurring_price is not None:
        return _money(service.recurring_price)
    return _money(None)


def calculate_order_total(
    service: PricedService,
    *,
    is_expedited: bool,
    default_expedited_fee: Decimal = DEFAULT_EXPEDITED_FEE,
) -> OrderTotal:
    base = base_price(service)
    fee = _money(None)
    if is_expedited:
        fee = _money(service.expedited_price if service.expedited_price is not None else default_expedited_fee)
    return OrderTotal(base_price=base, expedited_fee=fee, total=(base + fee).quantize(CENTS))


def calculate_total(
    service: PricedService,
    *,
    is_expedited: bool,
    default_expedited_fee: Decimal = DEFAULT_EXPEDITED_FEE,
) -> Decimal:
    return calculate_order_total(
        service, is_expedited=is_expedited, default_expedited_fee=default_expedited_fee
    ).total


def format_amount(amount: Decimal) -> str:
    return f"{_money(amount):.2f}"


def to_cents(amount: Decimal) -> int:
    return int((_money(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))
