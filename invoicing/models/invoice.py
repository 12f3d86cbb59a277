"""Invoice request/response models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..services.currency import CurrencyCode
from .client import Address
from .common import Money, Pagination

InvoiceStatus = Literal["draft", "sent", "paid", "overdue", "cancelled"]


class InvoiceItemIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(min_length=1, max_length=200)
    quantity: Decimal = Field(ge=Decimal("0.01"), le=Decimal("999999"), decimal_places=4)
    price: Decimal = Field(ge=Decimal("0"), le=Decimal("999999.99"), decimal_places=4)


class InvoiceCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    client_id: int
    items: List[InvoiceItemIn] = Field(min_length=1)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100, decimal_places=4)
    due_date: date
    notes: Optional[str] = Field(default=None, max_length=500)
    currency: CurrencyCode = "USD"
    status: InvoiceStatus = "draft"
    paid_date: Optional[datetime] = None


class InvoiceUpdate(BaseModel):
    """General update; only the supplied fields change."""

    model_config = ConfigDict(str_strip_whitespace=True)

    client_id: Optional[int] = None
    items: Optional[List[InvoiceItemIn]] = Field(default=None, min_length=1)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=100, decimal_places=4)
    due_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=500)
    currency: Optional[CurrencyCode] = None
    status: Optional[InvoiceStatus] = None


class StatusUpdate(BaseModel):
    status: InvoiceStatus
    paid_date: Optional[datetime] = None


class InvoiceItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    description: str
    quantity: Money
    price: Money
    total: Money


class ClientSummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Address] = None

    @classmethod
    def from_row(cls, client) -> "ClientSummary":
        return cls(
            id=client.id,
            name=client.name,
            email=client.email,
            company=client.company,
            phone=client.phone,
            address=Address(
                street=client.street,
                city=client.city,
                state=client.state,
                zip_code=client.zip_code,
                country=client.country,
            ),
        )


class InvoiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_number: str
    client_id: int
    client: Optional[ClientSummary] = None
    items: List[InvoiceItemOut]
    subtotal: Money
    tax_rate: Money
    tax_amount: Money
    total_amount: Money
    status: InvoiceStatus
    due_date: date
    paid_date: Optional[datetime] = None
    notes: Optional[str] = None
    currency: CurrencyCode
    email_sent: bool
    email_sent_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, invoice) -> "InvoiceOut":
        return cls(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            client_id=invoice.client_id,
            client=ClientSummary.from_row(invoice.client) if invoice.client is not None else None,
            items=[InvoiceItemOut.model_validate(item) for item in invoice.items],
            subtotal=invoice.subtotal,
            tax_rate=invoice.tax_rate,
            tax_amount=invoice.tax_amount,
            total_amount=invoice.total_amount,
            status=invoice.status,
            due_date=invoice.due_date,
            paid_date=invoice.paid_date,
            notes=invoice.notes,
            currency=invoice.currency,
            email_sent=invoice.email_sent,
            email_sent_date=invoice.email_sent_date,
            created_at=invoice.created_at,
            updated_at=invoice.updated_at,
        )


class InvoiceEnvelope(BaseModel):
    message: str
    invoice: InvoiceOut


class InvoiceTotalsSummary(BaseModel):
    total_amount: Money = Decimal("0")
    paid_amount: Money = Decimal("0")
    pending_amount: Money = Decimal("0")


class InvoiceList(BaseModel):
    invoices: List[InvoiceOut]
    pagination: Pagination
    stats: InvoiceTotalsSummary


class StatusBucket(BaseModel):
    status: InvoiceStatus
    count: int
    total_amount: Money


class MonthlyRevenue(BaseModel):
    year: int
    month: int
    revenue: Money


class DashboardStats(BaseModel):
    invoice_stats: List[StatusBucket]
    total_clients: int
    total_invoices: int
    recent_invoices: List[InvoiceOut]
    monthly_revenue: List[MonthlyRevenue]
