"""Supported currencies and amount formatting."""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Literal, Optional, Union

from .totals import round2, to_decimal

CurrencyCode = Literal["USD", "EUR", "GBP", "CAD", "AUD", "RUB"]

SUPPORTED_CURRENCIES: List[Dict[str, str]] = [
    {"code": "USD", "name": "US Dollar", "symbol": "$"},
    {"code": "EUR", "name": "Euro", "symbol": "€"},
    {"code": "GBP", "name": "British Pound", "symbol": "£"},
    {"code": "CAD", "name": "Canadian Dollar", "symbol": "C$"},
    {"code": "AUD", "name": "Australian Dollar", "symbol": "A$"},
    {"code": "RUB", "name": "Russian Ruble", "symbol": "₽"},
]

CURRENCY_SYMBOLS: Dict[str, str] = {c["code"]: c["symbol"] for c in SUPPORTED_CURRENCIES}

# symbol rendered after the amount
SUFFIX_CURRENCIES = frozenset({"RUB"})


def currency_symbol(code: str) -> str:
    return CURRENCY_SYMBOLS.get(code, code)


def format_amount(amount: Optional[Union[Decimal, int, float, str]]) -> str:
    return f"{round2(to_decimal(amount or 0)):.2f}"


def format_currency(amount: Optional[Union[Decimal, int, float, str]], code: str) -> str:
    symbol = currency_symbol(code)
    formatted = format_amount(amount)
    if code in SUFFIX_CURRENCIES:
        return f"{formatted} {symbol}"
    return f"{symbol}{formatted}"


def format_quantity(value: Optional[Union[Decimal, int, float, str]]) -> str:
    """Plain number without trailing zeros (``2.5000`` -> ``2.5``)."""
    normalized = to_decimal(value or 0).normalize()
    return format(normalized, "f")
