"""Invoice endpoints."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from ...api.deps import get_current_admin, get_invoice_service, get_session
from ...api.errors import APIError
from ...core.logging import get_logger
from ...models.common import MessageResponse, Pagination
from ...models.invoice import (
    DashboardStats,
    InvoiceCreate,
    InvoiceEnvelope,
    InvoiceList,
    InvoiceOut,
    InvoiceStatus,
    InvoiceTotalsSummary,
    InvoiceUpdate,
    StatusUpdate,
)
from ...services.invoice_service import InvoiceService

router = APIRouter(prefix="/invoices", dependencies=[Depends(get_current_admin)])
logger = get_logger(__name__)


@router.get("/stats/dashboard", response_model=DashboardStats)
def dashboard_stats(
    session: Session = Depends(get_session),
    invoice_service: InvoiceService = Depends(get_invoice_service),
) -> DashboardStats:
    stats = invoice_service.dashboard(session)
    stats["recent_invoices"] = [InvoiceOut.from_row(row) for row in stats["recent_invoices"]]
    return DashboardStats(**stats)


@router.get("", response_model=InvoiceList)
def list_invoices(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    client_id: Optional[int] = None,
    search: Optional[str] = Query(None, max_length=100),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    session: Session = Depends(get_session),
    invoice_service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceList:
    rows, total, summary = invoice_service.list_invoices(
        session,
        page=page,
        limit=limit,
        status=status_filter,
        client_id=client_id,
        search=search,
        start_date=start_date,
        end_date=end_date,
    )
    return InvoiceList(
        invoices=[InvoiceOut.from_row(row) for row in rows],
        pagination=Pagination.build(page, limit, total),
        stats=InvoiceTotalsSummary(**summary),
    )


@router.get("/{invoice_id}", response_model=InvoiceOut)
def get_invoice(
    invoice_id: int,
    session: Session = Depends(get_session),
    invoice_service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceOut:
    return InvoiceOut.from_row(invoice_service.get_invoice(session, invoice_id))


@router.post("", response_model=InvoiceEnvelope, status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: InvoiceCreate,
    session: Session = Depends(get_session),
    invoice_service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceEnvelope:
    invoice = invoice_service.create_invoice(session, payload)
    return InvoiceEnvelope(message="Invoice created successfully", invoice=InvoiceOut.from_row(invoice))


@router.put("/{invoice_id}", response_model=InvoiceEnvelope)
def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    session: Session = Depends(get_session),
    invoice_service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceEnvelope:
    invoice = invoice_service.update_invoice(session, invoice_id, payload)
    return InvoiceEnvelope(message="Invoice updated successfully", invoice=InvoiceOut.from_row(invoice))


@router.patch("/{invoice_id}/status", response_model=InvoiceEnvelope)
def update_invoice_status(
    invoice_id: int,
    payload: StatusUpdate,
    session: Session = Depends(get_session),
    invoice_service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceEnvelope:
    invoice = invoice_service.update_status(session, invoice_id, payload)
    return InvoiceEnvelope(
        message=f"Invoice status updated to {invoice.status} successfully",
        invoice=InvoiceOut.from_row(invoice),
    )


@router.patch("/{invoice_id}/mark-paid", response_model=InvoiceEnvelope)
def mark_invoice_paid(
    invoice_id: int,
    session: Session = Depends(get_session),
    invoice_service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceEnvelope:
    invoice = invoice_service.mark_paid(session, invoice_id)
    return InvoiceEnvelope(message="Invoice marked as paid successfully", invoice=InvoiceOut.from_row(invoice))


@router.get("/{invoice_id}/download")
def download_invoice(
    invoice_id: int,
    session: Session = Depends(get_session),
    invoice_service: InvoiceService = Depends(get_invoice_service),
) -> Response:
    filename, content = invoice_service.export_invoice(session, invoice_id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/{invoice_id}/send-email", response_model=InvoiceEnvelope)
def send_invoice(
    invoice_id: int,
    request: Request,
    session: Session = Depends(get_session),
    invoice_service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceEnvelope:
    invoice, sent = invoice_service.send_invoice(session, invoice_id)
    if not sent:
        raise APIError(
            code="EMAIL_DELIVERY_FAILED",
            message="Failed to send invoice email",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={"invoice_number": invoice.invoice_number},
        )
    logger.info(
        "invoice_sent",
        invoice_number=invoice.invoice_number,
        request_id=getattr(request.state, "request_id", "unknown"),
    )
    return InvoiceEnvelope(message="Invoice sent successfully", invoice=InvoiceOut.from_row(invoice))


@router.delete("/{invoice_id}", response_model=MessageResponse)
def delete_invoice(
    invoice_id: int,
    session: Session = Depends(get_session),
    invoice_service: InvoiceService = Depends(get_invoice_service),
) -> MessageResponse:
    invoice_service.delete_invoice(session, invoice_id)
    return MessageResponse(message="Invoice deleted successfully")
