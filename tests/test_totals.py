from decimal import Decimal
from types import SimpleNamespace

import pytest

from invoicing.services.totals import compute_line_total, compute_totals, recompute_for_tax_rate, round2


def _item(quantity, price):
    return SimpleNamespace(quantity=quantity, price=price)


def test_reference_example():
    totals = compute_totals([_item(2, 50.005)], 10)
    assert totals.subtotal == Decimal("100.01")
    assert totals.tax_amount == Decimal("10.00")
    assert totals.total_amount == Decimal("110.01")


def test_line_total_is_not_rounded():
    assert compute_line_total(Decimal("3"), Decimal("0.3333")) == Decimal("0.9999")
    totals = compute_totals([_item(Decimal("3"), Decimal("0.3333"))])
    assert totals.line_totals == (Decimal("0.9999"),)
    assert totals.subtotal == Decimal("1.00")


def test_total_is_rounded_from_raw_sums():
    # 10.00 + 5.00 from the rounded parts, 15.006 from the raw sums
    totals = compute_totals([_item(Decimal("2"), Decimal("5.002"))], 50)
    assert totals.subtotal == Decimal("10.00")
    assert totals.tax_amount == Decimal("5.00")
    assert totals.total_amount == Decimal("15.01")


@pytest.mark.parametrize(
    "items, rate",
    [
        ([("1.5", "19.99"), ("3", "7.125")], "8.25"),
        ([("0.01", "999999.99")], "0"),
        ([("12", "0.045"), ("7", "1.005"), ("1", "33.333")], "17.5"),
    ],
)
def test_total_matches_raw_computation(items, rate):
    lines = [_item(Decimal(q), Decimal(p)) for q, p in items]
    totals = compute_totals(lines, Decimal(rate))

    raw_subtotal = sum((Decimal(q) * Decimal(p) for q, p in items), Decimal("0"))
    raw_tax = raw_subtotal * Decimal(rate) / 100
    assert totals.total_amount == round2(raw_subtotal + raw_tax)
    assert totals.subtotal == round2(raw_subtotal)
    assert totals.tax_amount == round2(raw_tax)


def test_round_half_away_from_zero():
    assert round2(Decimal("0.005")) == Decimal("0.01")
    assert round2(Decimal("2.675")) == Decimal("2.68")
    assert round2(Decimal("-0.005")) == Decimal("-0.01")


def test_zero_tax_rate_default():
    totals = compute_totals([_item(4, "2.50")])
    assert totals.tax_rate == Decimal("0")
    assert totals.tax_amount == Decimal("0.00")
    assert totals.total_amount == Decimal("10.00")


def test_tax_only_recompute_uses_stored_subtotal():
    totals = recompute_for_tax_rate(Decimal("100.01"), 20)
    assert totals.line_totals == ()
    assert totals.subtotal == Decimal("100.01")
    assert totals.tax_amount == Decimal("20.00")
    assert totals.total_amount == Decimal("120.01")
