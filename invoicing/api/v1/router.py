"""Versioned API router registration."""

from fastapi import APIRouter

from .auth import router as auth_router
from .clients import router as clients_router
from .health import router as health_router
from .invoices import router as invoices_router


def create_v1_router() -> APIRouter:
    """Create and configure v1 API router"""
    router = APIRouter(prefix="/v1")

    router.include_router(health_router, tags=["health"])
    router.include_router(auth_router, tags=["auth"])
    router.include_router(clients_router, tags=["clients"])
    router.include_router(invoices_router, tags=["invoices"])

    return router
