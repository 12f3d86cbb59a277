"""Invoice totals computation.

Every aggregate is rounded once, from unrounded intermediate sums:

    subtotal     = round2(sum(qty * price))
    tax_amount   = round2(subtotal_raw * tax_rate / 100)
    total_amount = round2(subtotal_raw + tax_raw)

Adding already-rounded parts instead can drift by one cent, so the order of
operations here is part of the contract.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Protocol, Tuple, Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


class LineLike(Protocol):
    quantity: Number
    price: Number


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # go through repr so 50.005 stays 50.005
        return Decimal(repr(value))
    return Decimal(value)


def round2(value: Decimal) -> Decimal:
    """Round half away from zero to two decimal places."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class InvoiceTotals:
    line_totals: Tuple[Decimal, ...]
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def compute_line_total(quantity: Number, price: Number) -> Decimal:
    """quantity * price, deliberately not rounded."""
    return to_decimal(quantity) * to_decimal(price)


def compute_totals(items: Iterable[LineLike], tax_rate: Number = 0) -> InvoiceTotals:
    """Compute subtotal, tax and total from line items and a tax percentage."""
    rate = to_decimal(tax_rate)
    line_totals: List[Decimal] = [compute_line_total(item.quantity, item.price) for item in items]

    subtotal_raw = sum(line_totals, Decimal("0"))
    tax_raw = subtotal_raw * rate / HUNDRED

    return InvoiceTotals(
        line_totals=tuple(line_totals),
        subtotal=round2(subtotal_raw),
        tax_rate=rate,
        tax_amount=round2(tax_raw),
        total_amount=round2(subtotal_raw + tax_raw),
    )


def recompute_for_tax_rate(stored_subtotal: Number, tax_rate: Number) -> InvoiceTotals:
    """Recompute tax and total when only the tax rate changed.

    The stored (already rounded) subtotal is the base; items are not re-read.
    """
    subtotal = to_decimal(stored_subtotal)
    rate = to_decimal(tax_rate)
    tax_raw = subtotal * rate / HUNDRED

    return InvoiceTotals(
        line_totals=(),
        subtotal=round2(subtotal),
        tax_rate=rate,
        tax_amount=round2(tax_raw),
        total_amount=round2(subtotal + tax_raw),
    )
