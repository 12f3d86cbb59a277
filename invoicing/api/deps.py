"""Request-scoped dependencies"""
from typing import Iterator, Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..db.models import Admin
from ..services.auth_service import AuthService
from ..services.client_service import ClientService
from ..services.invoice_service import InvoiceService

bearer_scheme = HTTPBearer(auto_error=False)


def get_session(request: Request) -> Iterator[Session]:
    """One session per request, closed (and rolled back if uncommitted) afterwards"""
    with request.app.state.session_factory() as session:
        yield session


def get_client_service(request: Request) -> ClientService:
    """Get client service from app state"""
    return request.app.state.client_service


def get_invoice_service(request: Request) -> InvoiceService:
    """Get invoice service from app state"""
    return request.app.state.invoice_service


def get_auth_service(request: Request) -> AuthService:
    """Get auth service from app state"""
    return request.app.state.auth_service


def get_current_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    session: Session = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> Admin:
    """Resolve the bearer token to an active admin"""
    token = credentials.credentials if credentials else None
    admin = auth_service.authenticate_token(session, token)
    request.state.admin_id = admin.id
    return admin
