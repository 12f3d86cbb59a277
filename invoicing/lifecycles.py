"""Startup/shutdown lifecycle hooks"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from .core.config import get_settings
from .core.logging import get_logger
from .db.base import create_db_engine, create_session_factory, init_db
from .services.auth_service import AuthService
from .services.client_service import ClientService
from .services.invoice_service import InvoiceService
from .services.notifications import Mailer
from .services.numbering import InvoiceNumberGenerator


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown"""

    # Startup
    logger.info("application_starting")

    settings = get_settings()

    engine = create_db_engine(settings.database_url)
    init_db(engine)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # Initialize services
    app.state.client_service = ClientService()
    app.state.invoice_service = InvoiceService(
        settings,
        numbering=InvoiceNumberGenerator(prefix=settings.invoice_prefix),
        mailer=Mailer(settings),
    )
    app.state.auth_service = AuthService(settings)

    logger.info(
        "application_started",
        database=engine.url.get_backend_name(),
        email_configured=settings.email_configured,
    )

    yield

    # Shutdown
    logger.info("application_shutting_down")

    engine.dispose()

    logger.info("application_shutdown_complete")
