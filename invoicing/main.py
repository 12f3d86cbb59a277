"""FastAPI application factory."""

from __future__ import annotations

from typing import Iterable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.errors import (
    APIError,
    api_error_handler,
    database_error_handler,
    domain_error_handler,
    general_exception_handler,
    http_exception_handler,
    validation_error_handler,
)
from .api.middleware import LoggingMiddleware, RequestIDMiddleware
from .api.v1.router import create_v1_router
from .core.config import get_settings
from .core.logging import setup_logging
from .lifecycles import lifespan
from .services.errors import DomainError


def _build_links(base_url: str) -> Iterable[tuple[str, str]]:
    """Return the curated list of root endpoint links."""
    entries = (
        ("docs", "docs"),
        ("redoc", "redoc"),
        ("health", "v1/healthz"),
        ("version", "v1/version"),
        ("invoices", "v1/invoices"),
        ("clients", "v1/clients"),
    )
    return tuple((key, f"{base_url}{path}") for key, path in entries)


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json, environment=settings.app_env)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # last added runs first: request ids are bound before the access log
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> JSONResponse:
        base_url = str(request.base_url)
        if not base_url.endswith("/"):
            base_url = f"{base_url}/"

        return JSONResponse(
            {
                "status": "available",
                "service": settings.app_name,
                "version": settings.app_version,
                "links": dict(_build_links(base_url)),
            }
        )

    app.include_router(create_v1_router())
    return app
