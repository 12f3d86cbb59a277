"""Invoice lifecycle: create, update, status changes, delivery, export and stats."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import case, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..core.config import Settings
from ..core.logging import get_logger
from ..db.models import Client, Invoice, InvoiceItem
from ..models.invoice import InvoiceCreate, InvoiceItemIn, InvoiceUpdate, StatusUpdate
from ..utils.clock import utcnow
from . import status_policy
from .errors import ConflictError, NotFoundError
from .export import export_filename, render_invoice_text
from .notifications import Mailer
from .numbering import InvoiceNumberGenerator
from .totals import InvoiceTotals, compute_totals, recompute_for_tax_rate

logger = get_logger(__name__)

RECENT_LIMIT = 5
REVENUE_MONTHS = 12


def _build_items(items: Sequence[InvoiceItemIn], totals: InvoiceTotals) -> List[InvoiceItem]:
    return [
        InvoiceItem(
            position=index,
            description=item.description,
            quantity=item.quantity,
            price=item.price,
            total=line_total,
        )
        for index, (item, line_total) in enumerate(zip(items, totals.line_totals))
    ]


def _apply_totals(invoice: Invoice, totals: InvoiceTotals) -> None:
    invoice.subtotal = totals.subtotal
    invoice.tax_rate = totals.tax_rate
    invoice.tax_amount = totals.tax_amount
    invoice.total_amount = totals.total_amount


def _revenue_window_start(now: datetime) -> datetime:
    year, month = now.year, now.month - (REVENUE_MONTHS - 1)
    while month <= 0:
        month += 12
        year -= 1
    return datetime(year, month, 1)


def _as_decimal(value) -> Decimal:
    return Decimal(str(value or 0))


class InvoiceService:
    """Runs the numbering, totals and status components around persistence."""

    def __init__(
        self,
        settings: Settings,
        numbering: InvoiceNumberGenerator,
        mailer: Mailer,
        clock=utcnow,
    ) -> None:
        self.settings = settings
        self.numbering = numbering
        self.mailer = mailer
        self.clock = clock

    # ----------- queries -----------
    def get_invoice(self, session: Session, invoice_id: int) -> Invoice:
        invoice = session.execute(
            select(Invoice)
            .options(selectinload(Invoice.items), selectinload(Invoice.client))
            .where(Invoice.id == invoice_id)
        ).scalar_one_or_none()
        if invoice is None:
            raise NotFoundError("Invoice not found", details={"invoice_id": invoice_id})
        return invoice

    def list_invoices(
        self,
        session: Session,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        client_id: Optional[int] = None,
        search: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Tuple[List[Invoice], int, Dict[str, Decimal]]:
        conditions = []
        if status:
            conditions.append(Invoice.status == status)
        if client_id is not None:
            conditions.append(Invoice.client_id == client_id)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            matching_clients = select(Client.id).where(
                or_(Client.name.ilike(pattern), Client.company.ilike(pattern), Client.email.ilike(pattern))
            )
            conditions.append(
                or_(
                    Invoice.invoice_number.ilike(pattern),
                    Invoice.notes.ilike(pattern),
                    Invoice.client_id.in_(matching_clients),
                )
            )
        if start_date is not None:
            conditions.append(Invoice.created_at >= datetime.combine(start_date, datetime.min.time()))
        if end_date is not None:
            conditions.append(Invoice.created_at <= datetime.combine(end_date, datetime.max.time()))

        total = session.execute(select(func.count(Invoice.id)).where(*conditions)).scalar_one()
        rows = session.execute(
            select(Invoice)
            .options(selectinload(Invoice.items), selectinload(Invoice.client))
            .where(*conditions)
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars().all()

        paid = case((Invoice.status == status_policy.PAID, Invoice.total_amount), else_=0)
        pending = case((Invoice.status != status_policy.PAID, Invoice.total_amount), else_=0)
        total_amount, paid_amount, pending_amount = session.execute(
            select(
                func.coalesce(func.sum(Invoice.total_amount), 0),
                func.coalesce(func.sum(paid), 0),
                func.coalesce(func.sum(pending), 0),
            ).where(*conditions)
        ).one()
        summary = {
            "total_amount": _as_decimal(total_amount),
            "paid_amount": _as_decimal(paid_amount),
            "pending_amount": _as_decimal(pending_amount),
        }
        return list(rows), total, summary

    # ----------- create / update -----------
    def create_invoice(self, session: Session, data: InvoiceCreate) -> Invoice:
        client = session.get(Client, data.client_id)
        if client is None:
            raise NotFoundError("Client not found", details={"client_id": data.client_id})

        now = self.clock()
        totals = compute_totals(data.items, data.tax_rate)
        number = self.numbering.next_number(session, now)

        invoice = Invoice(
            invoice_number=number,
            client=client,
            items=_build_items(data.items, totals),
            status=status_policy.DRAFT,
            due_date=data.due_date,
            notes=data.notes,
            currency=data.currency,
            email_sent=False,
            created_at=now,
            updated_at=now,
        )
        _apply_totals(invoice, totals)
        status_policy.apply_status(invoice, data.status, paid_date=data.paid_date, clock=self.clock)

        session.add(invoice)
        self._commit(session, number)
        logger.info(
            "invoice_created",
            invoice_number=number,
            client_id=client.id,
            total_amount=str(invoice.total_amount),
            status=invoice.status,
        )
        return invoice

    def update_invoice(self, session: Session, invoice_id: int, data: InvoiceUpdate) -> Invoice:
        invoice = self.get_invoice(session, invoice_id)
        status_policy.ensure_editable(invoice)

        if data.client_id is not None and data.client_id != invoice.client_id:
            client = session.get(Client, data.client_id)
            if client is None:
                raise NotFoundError("Client not found", details={"client_id": data.client_id})
            invoice.client = client

        if data.items is not None:
            rate = data.tax_rate if data.tax_rate is not None else invoice.tax_rate
            totals = compute_totals(data.items, rate)
            invoice.items = _build_items(data.items, totals)
            _apply_totals(invoice, totals)
        elif data.tax_rate is not None:
            _apply_totals(invoice, recompute_for_tax_rate(invoice.subtotal, data.tax_rate))

        if data.due_date is not None:
            invoice.due_date = data.due_date
        if "notes" in data.model_fields_set:
            invoice.notes = data.notes
        if data.currency is not None:
            invoice.currency = data.currency
        if data.status is not None:
            status_policy.apply_status(invoice, data.status, clock=self.clock)

        invoice.updated_at = self.clock()
        session.commit()
        logger.info("invoice_updated", invoice_number=invoice.invoice_number, status=invoice.status)
        return invoice

    # ----------- status -----------
    def update_status(self, session: Session, invoice_id: int, data: StatusUpdate) -> Invoice:
        invoice = self.get_invoice(session, invoice_id)
        previous = status_policy.change_status(invoice, data.status, paid_date=data.paid_date, clock=self.clock)
        invoice.updated_at = self.clock()
        session.commit()
        logger.info(
            "invoice_status_changed",
            invoice_number=invoice.invoice_number,
            previous=previous,
            status=invoice.status,
        )
        return invoice

    def mark_paid(self, session: Session, invoice_id: int) -> Invoice:
        invoice = self.get_invoice(session, invoice_id)
        previous = invoice.status
        status_policy.mark_paid(invoice, clock=self.clock)
        invoice.updated_at = self.clock()
        session.commit()
        logger.info(
            "invoice_status_changed",
            invoice_number=invoice.invoice_number,
            previous=previous,
            status=invoice.status,
        )
        return invoice

    # ----------- delivery / export -----------
    def send_invoice(self, session: Session, invoice_id: int) -> Tuple[Invoice, bool]:
        """E-mail the invoice; state is only stamped when delivery succeeded."""
        invoice = self.get_invoice(session, invoice_id)
        sent = self.mailer.send_invoice(invoice, invoice.client)
        if not sent:
            logger.warning("invoice_email_failed", invoice_number=invoice.invoice_number)
            return invoice, False

        status_policy.record_email_sent(invoice, clock=self.clock)
        invoice.updated_at = self.clock()
        session.commit()
        logger.info("invoice_email_sent", invoice_number=invoice.invoice_number, status=invoice.status)
        return invoice, True

    def export_invoice(self, session: Session, invoice_id: int) -> Tuple[str, bytes]:
        invoice = self.get_invoice(session, invoice_id)
        return export_filename(invoice), render_invoice_text(invoice, invoice.client, self.settings)

    def delete_invoice(self, session: Session, invoice_id: int) -> None:
        invoice = self.get_invoice(session, invoice_id)
        status_policy.ensure_deletable(invoice)
        number = invoice.invoice_number
        session.delete(invoice)
        session.commit()
        logger.info("invoice_deleted", invoice_number=number)

    # ----------- stats -----------
    def dashboard(self, session: Session) -> Dict[str, object]:
        buckets = session.execute(
            select(
                Invoice.status,
                func.count(Invoice.id),
                func.coalesce(func.sum(Invoice.total_amount), 0),
            ).group_by(Invoice.status)
        ).all()

        total_clients = session.execute(
            select(func.count(Client.id)).where(Client.is_active.is_(True))
        ).scalar_one()
        total_invoices = session.execute(select(func.count(Invoice.id))).scalar_one()

        recent = session.execute(
            select(Invoice)
            .options(selectinload(Invoice.items), selectinload(Invoice.client))
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
            .limit(RECENT_LIMIT)
        ).scalars().all()

        window_start = _revenue_window_start(self.clock())
        paid_rows = session.execute(
            select(Invoice.paid_date, Invoice.total_amount).where(
                Invoice.status == status_policy.PAID,
                Invoice.paid_date >= window_start,
            )
        ).all()
        revenue: Dict[Tuple[int, int], Decimal] = defaultdict(Decimal)
        for paid_date, amount in paid_rows:
            revenue[(paid_date.year, paid_date.month)] += _as_decimal(amount)

        return {
            "invoice_stats": [
                {"status": status, "count": count, "total_amount": _as_decimal(amount)}
                for status, count, amount in buckets
            ],
            "total_clients": total_clients,
            "total_invoices": total_invoices,
            "recent_invoices": list(recent),
            "monthly_revenue": [
                {"year": year, "month": month, "revenue": amount}
                for (year, month), amount in sorted(revenue.items())
            ],
        }

    def _commit(self, session: Session, number: str) -> None:
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise ConflictError(
                "Invoice number already exists",
                details={"invoice_number": number},
            ) from exc
