"""Admin authentication endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...api.deps import get_auth_service, get_current_admin, get_session
from ...db.models import Admin
from ...models.auth import (
    AdminOut,
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    ProfileUpdate,
    RegisterRequest,
)
from ...services.auth_service import AuthService

router = APIRouter(prefix="/auth")


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    admin = auth_service.register(session, payload)
    return AuthResponse(
        message="Admin registered successfully",
        admin=AdminOut.model_validate(admin),
        token=auth_service.issue_token(admin),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    admin = auth_service.login(session, payload)
    return AuthResponse(
        message="Login successful",
        admin=AdminOut.model_validate(admin),
        token=auth_service.issue_token(admin),
    )


@router.get("/profile", response_model=ProfileResponse)
def get_profile(admin: Admin = Depends(get_current_admin)) -> ProfileResponse:
    return ProfileResponse(message="Profile retrieved successfully", admin=AdminOut.model_validate(admin))


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdate,
    admin: Admin = Depends(get_current_admin),
    session: Session = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> ProfileResponse:
    admin = auth_service.update_profile(session, admin, payload)
    return ProfileResponse(message="Profile updated successfully", admin=AdminOut.model_validate(admin))
