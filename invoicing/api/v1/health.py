"""Health and version endpoints"""
from fastapi import APIRouter, Depends, Request
from ...core.config import Settings, get_settings
from ...db.base import db_ok


router = APIRouter()


@router.get("/healthz")
def health(request: Request, settings: Settings = Depends(get_settings)):
    """Liveness check including the datastore"""
    database = db_ok(request.app.state.engine)
    return {"ok": database, "version": settings.app_version, "database": database}


@router.get("/version")
async def version(settings: Settings = Depends(get_settings)):
    """Service name, version and invoice numbering prefix"""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.app_env,
        "invoice_prefix": settings.invoice_prefix,
    }
