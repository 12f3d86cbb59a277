"""Invoice number generation backed by a per-period counter row.

Numbers look like ``INV2024050007``: prefix, year, month and a 4-digit
sequence that restarts every month. The sequence lives in
``invoice_sequences`` and is advanced with a single atomic UPDATE, so two
concurrent requests can never read the same "latest" value. The counter row
for a new period is seeded from the greatest number already issued in that
period; if two requests race to create it, the primary key rejects one of
them and that request retries.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Union

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.logging import get_logger
from ..db.models import Invoice, InvoiceSequence
from ..utils.ids import MAX_SEQUENCE, format_invoice_number, next_sequence_after, number_prefix, period_key
from .errors import ConflictError, SequenceExhaustedError

logger = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


class InvoiceNumberGenerator:
    def __init__(self, prefix: str = "INV", max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self.prefix = prefix
        self.max_attempts = max_attempts

    def next_number(self, session: Session, when: Union[date, datetime]) -> str:
        """Reserve and return the next invoice number for ``when``'s month.

        Runs inside the caller's transaction; the reservation is committed
        together with the invoice that uses it.
        """
        period = period_key(when)
        for attempt in range(1, self.max_attempts + 1):
            try:
                with session.begin_nested():
                    self._ensure_counter(session, period, when)
                    value = self._increment(session, period)
                    if value > MAX_SEQUENCE:
                        raise SequenceExhaustedError(
                            f"Invoice sequence for {self.prefix}{period} is exhausted",
                            details={"prefix": self.prefix, "period": period, "max": MAX_SEQUENCE},
                        )
            except IntegrityError:
                logger.warning(
                    "invoice_sequence_conflict",
                    prefix=self.prefix,
                    period=period,
                    attempt=attempt,
                )
                continue
            return format_invoice_number(self.prefix, when, value)

        raise ConflictError(
            "Could not reserve an invoice number, please retry",
            details={"prefix": self.prefix, "period": period, "attempts": self.max_attempts},
        )

    def latest_issued_sequence(self, session: Session, when: Union[date, datetime]) -> int:
        """Highest sequence already used by a stored invoice in the period (0 if none)."""
        head = number_prefix(self.prefix, when)
        latest = session.execute(
            select(func.max(Invoice.invoice_number)).where(
                Invoice.invoice_number.startswith(head, autoescape=True)
            )
        ).scalar_one_or_none()
        return next_sequence_after([latest] if latest else [], self.prefix, when) - 1

    def _ensure_counter(self, session: Session, period: str, when: Union[date, datetime]) -> None:
        if session.get(InvoiceSequence, (self.prefix, period)) is not None:
            return
        seed = self.latest_issued_sequence(session, when)
        session.add(InvoiceSequence(prefix=self.prefix, period=period, last_value=seed))
        session.flush()
        logger.info("invoice_sequence_created", prefix=self.prefix, period=period, seed=seed)

    def _increment(self, session: Session, period: str) -> int:
        session.execute(
            update(InvoiceSequence)
            .where(InvoiceSequence.prefix == self.prefix, InvoiceSequence.period == period)
            .values(last_value=InvoiceSequence.last_value + 1)
            .execution_options(synchronize_session=False)
        )
        return session.execute(
            select(InvoiceSequence.last_value).where(
                InvoiceSequence.prefix == self.prefix, InvoiceSequence.period == period
            )
        ).scalar_one()
