"""Error envelope and exception handlers"""
from typing import Any, Dict, Optional
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from ..services.errors import DomainError


logger = structlog.get_logger(__name__)


class APIError(Exception):
    """Transport-level error raised directly by routes"""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def create_error_response(
    code: str,
    message: str,
    request_id: str,
    details: Optional[Dict[str, Any]] = None,
    status_code: int = 400
) -> JSONResponse:
    """Create standardized error response"""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "request_id": request_id,
                "details": jsonable_encoder(details or {})
            }
        }
    )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions"""
    request_id = _request_id(request)

    logger.error(
        "api_error",
        code=exc.code,
        message=exc.message,
        request_id=request_id,
        path=request.url.path
    )

    return create_error_response(
        code=exc.code,
        message=exc.message,
        request_id=request_id,
        details=exc.details,
        status_code=exc.status_code
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Not-found, conflict, policy and auth errors raised by the services"""
    request_id = _request_id(request)

    logger.warning(
        "domain_error",
        code=exc.code,
        message=exc.message,
        request_id=request_id,
        path=request.url.path
    )

    return create_error_response(
        code=exc.code,
        message=exc.message,
        request_id=request_id,
        details=exc.details,
        status_code=exc.status_code
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors"""
    request_id = _request_id(request)
    errors = jsonable_encoder(exc.errors())

    logger.warning(
        "validation_error",
        errors=errors,
        request_id=request_id,
        path=request.url.path
    )

    return create_error_response(
        code="VALIDATION_ERROR",
        message="Validation failed",
        request_id=request_id,
        details={"errors": errors},
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions"""
    request_id = _request_id(request)

    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        request_id=request_id,
        path=request.url.path
    )

    return create_error_response(
        code="HTTP_ERROR",
        message=str(exc.detail),
        request_id=request_id,
        status_code=exc.status_code
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Datastore failures; internals stay in the log"""
    request_id = _request_id(request)

    logger.error(
        "database_error",
        exc_info=exc,
        request_id=request_id,
        path=request.url.path
    )

    return create_error_response(
        code="DATABASE_ERROR",
        message="The datastore is unavailable",
        request_id=request_id,
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions"""
    request_id = _request_id(request)

    logger.error(
        "unhandled_exception",
        exc_info=exc,
        request_id=request_id,
        path=request.url.path
    )

    return create_error_response(
        code="INTERNAL_ERROR",
        message="An internal error occurred",
        request_id=request_id,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
