"""Admin registration, login and profile."""

from __future__ import annotations

from typing import Optional

import jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import Settings
from ..core.logging import get_logger
from ..core.security import create_access_token, decode_access_token, hash_password, verify_password
from ..db.models import Admin
from ..models.auth import LoginRequest, ProfileUpdate, RegisterRequest
from ..utils.clock import utcnow
from .errors import AuthenticationError, ConflictError, PolicyViolationError

logger = get_logger(__name__)


class AuthService:
    def __init__(self, settings: Settings, clock=utcnow) -> None:
        self.settings = settings
        self.clock = clock

    def register(self, session: Session, data: RegisterRequest, role: str = "admin") -> Admin:
        if not self.settings.allow_registration:
            raise PolicyViolationError("Admin registration is disabled")
        if self._find_by_email(session, data.email) is not None:
            raise ConflictError("Admin with this email already exists", details={"email": data.email})

        admin = Admin(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            is_active=True,
            role=role,
        )
        session.add(admin)
        self._commit(session, data.email, "Admin with this email already exists")
        logger.info("admin_registered", admin_id=admin.id)
        return admin

    def login(self, session: Session, data: LoginRequest) -> Admin:
        admin = self._find_by_email(session, data.email)
        if admin is None or not verify_password(data.password, admin.password_hash):
            logger.warning("admin_login_failed", email=data.email)
            raise AuthenticationError("Invalid email or password")
        if not admin.is_active:
            raise AuthenticationError("Admin account is deactivated")

        admin.last_login = self.clock()
        session.commit()
        logger.info("admin_logged_in", admin_id=admin.id)
        return admin

    def issue_token(self, admin: Admin) -> str:
        return create_access_token(admin.id, self.settings)

    def authenticate_token(self, session: Session, token: Optional[str]) -> Admin:
        if not token:
            raise AuthenticationError("Access token is required", details={"reason": "MISSING_TOKEN"})
        try:
            payload = decode_access_token(token, self.settings)
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token has expired", details={"reason": "TOKEN_EXPIRED"}) from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError("Invalid token", details={"reason": "INVALID_TOKEN"}) from exc

        try:
            admin_id = int(payload.get("sub"))
        except (TypeError, ValueError) as exc:
            raise AuthenticationError("Invalid token", details={"reason": "INVALID_TOKEN"}) from exc

        admin = session.get(Admin, admin_id)
        if admin is None or not admin.is_active:
            raise AuthenticationError(
                "Invalid token or admin account is inactive", details={"reason": "INVALID_TOKEN"}
            )
        return admin

    def update_profile(self, session: Session, admin: Admin, data: ProfileUpdate) -> Admin:
        if data.email != admin.email:
            existing = self._find_by_email(session, data.email)
            if existing is not None and existing.id != admin.id:
                raise ConflictError("Email is already in use", details={"email": data.email})
        admin.name = data.name
        admin.email = data.email
        self._commit(session, data.email, "Email is already in use")
        logger.info("admin_profile_updated", admin_id=admin.id)
        return admin

    @staticmethod
    def _commit(session: Session, email: str, message: str) -> None:
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise ConflictError(message, details={"email": email}) from exc

    @staticmethod
    def _find_by_email(session: Session, email: str) -> Optional[Admin]:
        return session.execute(select(Admin).where(Admin.email == email)).scalar_one_or_none()
