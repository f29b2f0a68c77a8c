from __future__ import annotations

from decimal import Decimal

from parafort_core.checkout.pricing import (
    calculate_order_total,
    calculate_total,
    format_amount,
    to_cents,
)
from parafort_core.schemas.service import ServiceSnapshot


def _service(**prices) -> ServiceSnapshot:
    return ServiceSnapshot(id=1, name="LLC Formation", **prices)


def test_expedited_total_adds_expedite_fee():
    service = _service(one_time_price=Decimal("250"), expedited_price=Decimal("75"))
    assert format_amount(calculate_total(service, is_expedited=True)) == "325.00"


def test_standard_total_is_base_price():
    service = _service(one_time_price=Decimal("250"), expedited_price=Decimal("75"))
    assert format_amount(calculate_total(service, is_expedited=False)) == "250.00"


def test_missing_expedite_price_falls_back_to_default_fee():
    service = _service(one_time_price=Decimal("99.5"))
    assert calculate_total(service, is_expedited=True) == Decimal("174.50")


def test_default_fee_is_configurable():
    service = _service(one_time_price=Decimal("100"))
    total = calculate_total(service, is_expedited=True, default_expedited_fee=Decimal("50"))
    assert total == Decimal("150.00")


def test_recurring_price_used_when_no_one_time_price():
    service = _service(recurring_price=Decimal("49.99"))
    breakdown = calculate_order_total(service, is_expedited=False)
    assert breakdown.base_price == Decimal("49.99")
    assert breakdown.expedited_fee == Decimal("0.00")


def test_unpriced_service_totals_zero():
    assert calculate_total(_service(), is_expedited=False) == Decimal("0.00")


def test_cents_conversion_rounds_half_up():
    assert to_cents(Decimal("325")) == 32500
    assert to_cents(Decimal("10.005")) == 1001
    assert calculate_order_total(_service(one_time_price=Decimal("19.99")), is_expedited=False).total_cents == 1999
