"""Create the initial super administrator.

Usage: python scripts/seed_admin.py [email] [password]
"""

from __future__ import annotations

import sys

from sqlalchemy import select

from invoicing.core.config import get_settings
from invoicing.core.logging import get_logger, setup_logging
from invoicing.db.base import create_db_engine, create_session_factory, init_db
from invoicing.db.models import Admin
from invoicing.models.auth import RegisterRequest
from invoicing.services.auth_service import AuthService

DEFAULT_EMAIL = "admin@example.com"
DEFAULT_PASSWORD = "Admin123"

logger = get_logger(__name__)


def seed(email: str, password: str) -> int:
    settings = get_settings()
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    session_factory = create_session_factory(engine)

    try:
        with session_factory() as session:
            existing = session.execute(select(Admin).where(Admin.email == email.lower())).scalar_one_or_none()
            if existing is not None:
                print(f"Admin {existing.email} already exists (role: {existing.role}).")
                return 0

            data = RegisterRequest(name="Super Admin", email=email, password=password)
            # seeding works even when public registration is switched off
            service = AuthService(settings.model_copy(update={"allow_registration": True}))
            admin = service.register(session, data, role="super_admin")
            logger.info("admin_seeded", admin_id=admin.id)
            print(f"Created {admin.email} with role {admin.role}.")
            return 0
    finally:
        engine.dispose()


def main(argv: list[str]) -> int:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json, environment=settings.app_env)
    email = argv[1] if len(argv) > 1 else DEFAULT_EMAIL
    password = argv[2] if len(argv) > 2 else DEFAULT_PASSWORD
    return seed(email, password)


if __name__ == "__main__":
    sys.exit(main(sys.argv))
