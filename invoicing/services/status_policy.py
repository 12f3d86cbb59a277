"""Invoice status transitions and the paid lock.

``draft -> sent -> paid``; ``overdue`` and ``cancelled`` are reachable from
any unpaid state. Rules:

* entering ``paid`` stamps ``paid_date`` (supplied value or now),
* leaving ``paid`` clears ``paid_date``,
* a paid invoice cannot be edited or deleted through the general paths,
* :func:`mark_paid` refuses an invoice that is already paid.

:func:`change_status` and :func:`mark_paid` are the administrative override
path: they are allowed on paid invoices, and moving an invoice out of
``paid`` through them is logged as ``paid_lock_override``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional

from ..core.logging import get_logger
from ..utils.clock import utcnow
from .errors import AlreadyPaidError, PaidInvoiceLockedError

logger = get_logger(__name__)

DRAFT = "draft"
SENT = "sent"
PAID = "paid"
OVERDUE = "overdue"
CANCELLED = "cancelled"

STATUSES = (DRAFT, SENT, PAID, OVERDUE, CANCELLED)

Clock = Callable[[], datetime]


def is_locked(invoice: Any) -> bool:
    return invoice.status == PAID


def ensure_editable(invoice: Any) -> None:
    if is_locked(invoice):
        raise PaidInvoiceLockedError(
            "Cannot update a paid invoice",
            details={"invoice_number": invoice.invoice_number},
        )


def ensure_deletable(invoice: Any) -> None:
    if is_locked(invoice):
        raise PaidInvoiceLockedError(
            "Cannot delete a paid invoice",
            details={"invoice_number": invoice.invoice_number},
        )


def apply_status(
    invoice: Any,
    status: str,
    paid_date: Optional[datetime] = None,
    clock: Clock = utcnow,
) -> str:
    """Set ``status`` and keep ``paid_date`` consistent with it.

    Returns the previous status.
    """
    if status not in STATUSES:
        raise ValueError(f"Unknown invoice status: {status}")

    previous = invoice.status
    invoice.status = status
    if status == PAID:
        invoice.paid_date = paid_date or clock()
    elif invoice.paid_date is not None:
        invoice.paid_date = None
    return previous


def change_status(
    invoice: Any,
    status: str,
    paid_date: Optional[datetime] = None,
    clock: Clock = utcnow,
) -> str:
    """Dedicated status change; exempt from the paid lock."""
    previous = apply_status(invoice, status, paid_date=paid_date, clock=clock)
    if previous == PAID and status != PAID:
        logger.warning(
            "paid_lock_override",
            invoice_number=invoice.invoice_number,
            new_status=status,
        )
    return previous


def mark_paid(invoice: Any, clock: Clock = utcnow) -> None:
    if invoice.status == PAID:
        raise AlreadyPaidError()
    apply_status(invoice, PAID, clock=clock)


def record_email_sent(invoice: Any, clock: Clock = utcnow) -> None:
    """Stamp a successful delivery; a draft moves to sent."""
    invoice.email_sent = True
    invoice.email_sent_date = clock()
    if invoice.status == DRAFT:
        invoice.status = SENT
