"""Client request/response models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .common import Money, Pagination


class Address(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    street: Optional[str] = Field(default=None, max_length=100)
    city: Optional[str] = Field(default=None, max_length=50)
    state: Optional[str] = Field(default=None, max_length=50)
    zip_code: Optional[str] = Field(default=None, max_length=20)
    country: Optional[str] = Field(default="USA", max_length=50)


class ClientIn(BaseModel):
    """Body of client create and update (PUT replaces the editable fields)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    company: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[Address] = None
    notes: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None

    @field_validator("email", mode="before")
    @classmethod
    def _normalise_email(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value


class ClientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    address: Address
    is_active: bool
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, client) -> "ClientOut":
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
            is_active=client.is_active,
            notes=client.notes,
            created_at=client.created_at,
            updated_at=client.updated_at,
        )


class ClientStats(BaseModel):
    total_invoices: int = 0
    total_amount: Money = Decimal("0")
    paid_amount: Money = Decimal("0")
    pending_amount: Money = Decimal("0")


class ClientDetail(BaseModel):
    client: ClientOut
    stats: ClientStats


class ClientList(BaseModel):
    clients: List[ClientOut]
    pagination: Pagination
