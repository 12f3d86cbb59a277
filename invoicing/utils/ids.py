"""Invoice number helpers ({prefix}{YYYY}{MM}{NNNN})."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Union

SEQUENCE_WIDTH = 4
MAX_SEQUENCE = 10 ** SEQUENCE_WIDTH - 1


def period_key(when: Union[date, datetime]) -> str:
    return f"{when.year:04d}{when.month:02d}"


def number_prefix(prefix: str, when: Union[date, datetime]) -> str:
    return f"{prefix}{period_key(when)}"


def format_invoice_number(prefix: str, when: Union[date, datetime], sequence: int) -> str:
    if sequence < 1 or sequence > MAX_SEQUENCE:
        raise ValueError(f"sequence {sequence} outside 1..{MAX_SEQUENCE}")
    return f"{number_prefix(prefix, when)}{sequence:0{SEQUENCE_WIDTH}d}"


def sequence_from_number(invoice_number: str) -> int:
    """Parse the trailing fixed-width sequence of an invoice number."""
    return int(invoice_number[-SEQUENCE_WIDTH:])


def next_sequence_after(
    existing: Iterable[str], prefix: str, when: Union[date, datetime]
) -> int:
    """Next sequence for the period given the numbers already issued.

    The greatest number is taken lexicographically, which is safe because the
    suffix is fixed-width and zero-padded.
    """
    head = number_prefix(prefix, when)
    latest: Optional[str] = None
    for number in existing:
        if number.startswith(head) and (latest is None or number > latest):
            latest = number
    if latest is None:
        return 1
    return sequence_from_number(latest) + 1
