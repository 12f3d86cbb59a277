"""Client management."""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import case, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.logging import get_logger
from ..db.models import Client, Invoice
from ..models.client import ClientIn
from .errors import ClientHasInvoicesError, ConflictError, NotFoundError
from .status_policy import PAID

logger = get_logger(__name__)


def _search_filter(term: str):
    pattern = f"%{term}%"
    return or_(
        Client.name.ilike(pattern),
        Client.company.ilike(pattern),
        Client.email.ilike(pattern),
    )


class ClientService:
    """CRUD over clients plus their invoice statistics."""

    def list_clients(
        self,
        session: Session,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> Tuple[List[Client], int]:
        conditions = []
        if search and search.strip():
            conditions.append(_search_filter(search.strip()))
        if active is not None:
            conditions.append(Client.is_active.is_(active))

        total = session.execute(
            select(func.count(Client.id)).where(*conditions)
        ).scalar_one()
        rows = session.execute(
            select(Client)
            .where(*conditions)
            .order_by(Client.created_at.desc(), Client.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars().all()
        return list(rows), total

    def get_client(self, session: Session, client_id: int) -> Client:
        client = session.get(Client, client_id)
        if client is None:
            raise NotFoundError("Client not found", details={"client_id": client_id})
        return client

    def client_stats(self, session: Session, client_id: int) -> Dict[str, object]:
        paid = case((Invoice.status == PAID, Invoice.total_amount), else_=0)
        pending = case((Invoice.status != PAID, Invoice.total_amount), else_=0)
        count, total, paid_sum, pending_sum = session.execute(
            select(
                func.count(Invoice.id),
                func.coalesce(func.sum(Invoice.total_amount), 0),
                func.coalesce(func.sum(paid), 0),
                func.coalesce(func.sum(pending), 0),
            ).where(Invoice.client_id == client_id)
        ).one()
        return {
            "total_invoices": count,
            "total_amount": Decimal(str(total)),
            "paid_amount": Decimal(str(paid_sum)),
            "pending_amount": Decimal(str(pending_sum)),
        }

    def create_client(self, session: Session, data: ClientIn) -> Client:
        if data.email:
            self._ensure_email_free(session, data.email, message="Client with this email already exists")

        client = Client(is_active=True if data.is_active is None else data.is_active)
        self._apply(client, data)
        session.add(client)
        self._commit(session, data.email, message="Client with this email already exists")
        logger.info("client_created", client_id=client.id)
        return client

    def update_client(self, session: Session, client_id: int, data: ClientIn) -> Client:
        client = self.get_client(session, client_id)
        if data.email and data.email != client.email:
            self._ensure_email_free(
                session, data.email, exclude_id=client.id, message="Email is already in use by another client"
            )

        self._apply(client, data)
        if data.is_active is not None:
            client.is_active = data.is_active
        self._commit(session, data.email, message="Email is already in use by another client")
        logger.info("client_updated", client_id=client.id)
        return client

    def delete_client(self, session: Session, client_id: int) -> None:
        client = self.get_client(session, client_id)
        invoice_count = session.execute(
            select(func.count(Invoice.id)).where(Invoice.client_id == client.id)
        ).scalar_one()
        if invoice_count > 0:
            raise ClientHasInvoicesError(invoice_count)

        session.delete(client)
        session.commit()
        logger.info("client_deleted", client_id=client_id)

    def _ensure_email_free(
        self, session: Session, email: str, message: str, exclude_id: Optional[int] = None
    ) -> None:
        query = select(Client.id).where(Client.email == email)
        if exclude_id is not None:
            query = query.where(Client.id != exclude_id)
        if session.execute(query).first() is not None:
            raise ConflictError(message, details={"email": email})

    @staticmethod
    def _commit(session: Session, email: Optional[str], message: str) -> None:
        # a concurrent insert can win the race past _ensure_email_free
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise ConflictError(message, details={"email": email}) from exc

    @staticmethod
    def _apply(client: Client, data: ClientIn) -> None:
        client.name = data.name
        client.email = data.email
        client.company = data.company
        client.phone = data.phone
        client.notes = data.notes
        address = data.address
        client.street = address.street if address else None
        client.city = address.city if address else None
        client.state = address.state if address else None
        client.zip_code = address.zip_code if address else None
        client.country = address.country if address else None
