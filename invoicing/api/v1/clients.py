"""Client endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...api.deps import get_client_service, get_current_admin, get_session
from ...models.client import ClientDetail, ClientIn, ClientList, ClientOut, ClientStats
from ...models.common import MessageResponse, Pagination
from ...services.client_service import ClientService

router = APIRouter(prefix="/clients", dependencies=[Depends(get_current_admin)])


class ClientEnvelope(BaseModel):
    message: str
    client: ClientOut


@router.get("", response_model=ClientList)
def list_clients(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=100),
    active: Optional[bool] = None,
    session: Session = Depends(get_session),
    client_service: ClientService = Depends(get_client_service),
) -> ClientList:
    rows, total = client_service.list_clients(session, page=page, limit=limit, search=search, active=active)
    return ClientList(
        clients=[ClientOut.from_row(row) for row in rows],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{client_id}", response_model=ClientDetail)
def get_client(
    client_id: int,
    session: Session = Depends(get_session),
    client_service: ClientService = Depends(get_client_service),
) -> ClientDetail:
    client = client_service.get_client(session, client_id)
    stats = client_service.client_stats(session, client.id)
    return ClientDetail(client=ClientOut.from_row(client), stats=ClientStats(**stats))


@router.post("", response_model=ClientEnvelope, status_code=status.HTTP_201_CREATED)
def create_client(
    payload: ClientIn,
    session: Session = Depends(get_session),
    client_service: ClientService = Depends(get_client_service),
) -> ClientEnvelope:
    client = client_service.create_client(session, payload)
    return ClientEnvelope(message="Client created successfully", client=ClientOut.from_row(client))


@router.put("/{client_id}", response_model=ClientEnvelope)
def update_client(
    client_id: int,
    payload: ClientIn,
    session: Session = Depends(get_session),
    client_service: ClientService = Depends(get_client_service),
) -> ClientEnvelope:
    client = client_service.update_client(session, client_id, payload)
    return ClientEnvelope(message="Client updated successfully", client=ClientOut.from_row(client))


@router.delete("/{client_id}", response_model=MessageResponse)
def delete_client(
    client_id: int,
    session: Session = Depends(get_session),
    client_service: ClientService = Depends(get_client_service),
) -> MessageResponse:
    client_service.delete_client(session, client_id)
    return MessageResponse(message="Client deleted successfully")
