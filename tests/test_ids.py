from datetime import date, datetime

import pytest

from invoicing.utils.ids import (
    MAX_SEQUENCE,
    format_invoice_number,
    next_sequence_after,
    period_key,
    sequence_from_number,
)


def test_format_pads_sequence():
    assert format_invoice_number("INV", date(2024, 5, 17), 7) == "INV2024050007"
    assert format_invoice_number("ACME-", datetime(2023, 12, 1, 8), 9999) == "ACME-2023129999"


@pytest.mark.parametrize("sequence", [0, MAX_SEQUENCE + 1])
def test_format_rejects_out_of_range(sequence):
    with pytest.raises(ValueError):
        format_invoice_number("INV", date(2024, 5, 1), sequence)


def test_period_key():
    assert period_key(date(2024, 1, 31)) == "202401"


def test_sequence_from_number():
    assert sequence_from_number("INV2024050042") == 42


def test_next_sequence_starts_at_one():
    assert next_sequence_after([], "INV", date(2024, 5, 1)) == 1


def test_next_sequence_ignores_other_periods_and_prefixes():
    existing = ["INV2024040099", "INV2024050003", "INV2024050011", "ABC2024050500", "INV2024060001"]
    assert next_sequence_after(existing, "INV", date(2024, 5, 20)) == 12
