from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient

from invoicing.core.config import get_settings
from invoicing.db.base import create_db_engine, create_session_factory, init_db
from invoicing.db.models import Client, Invoice
from invoicing.main import create_app

ADMIN_PASSWORD = "Secret123"


@pytest.fixture()
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'invoicing.db'}"


@pytest.fixture()
def session_factory(db_url):
    engine = create_db_engine(db_url)
    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def session(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture()
def client(db_url, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("INVOICE_PREFIX", "INV")
    monkeypatch.setenv("JWT_SECRET", "test-secret-with-enough-bytes-for-hs256")
    monkeypatch.setenv("EMAIL_HOST", "")
    monkeypatch.setenv("EMAIL_USER", "")
    monkeypatch.setenv("EMAIL_PASS", "")
    monkeypatch.setenv("ALLOW_REGISTRATION", "true")
    monkeypatch.setenv("LOG_JSON", "false")
    get_settings.cache_clear()

    app = create_app()
    with TestClient(app) as client:
        yield client

    get_settings.cache_clear()


@pytest.fixture()
def auth_headers(client):
    response = client.post(
        "/v1/auth/register",
        json={"name": "Ada Admin", "email": "ada@example.com", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture()
def customer(client, auth_headers):
    response = client.post(
        "/v1/clients",
        json={
            "name": "Globex",
            "email": "billing@globex.com",
            "company": "Globex Corporation",
            "address": {"street": "1 Main St", "city": "Springfield", "state": "IL", "zip_code": "62701"},
        },
        headers=auth_headers,
    )
    assert response.status_code == 201
    return response.json()["client"]


@pytest.fixture()
def create_invoice(client, auth_headers, customer):
    def _create(**overrides):
        payload = {
            "client_id": customer["id"],
            "items": [{"description": "Consulting", "quantity": 2, "price": "50.005"}],
            "tax_rate": 10,
            "due_date": "2030-01-31",
        }
        payload.update(overrides)
        response = client.post("/v1/invoices", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["invoice"]

    return _create


@pytest.fixture()
def stored_client(session):
    row = Client(name="Initech", email="ap@initech.com", company="Initech")
    session.add(row)
    session.commit()
    return row


@pytest.fixture()
def add_legacy_invoice(session, stored_client):
    """Insert an invoice row directly, bypassing the number generator."""

    def _add(number):
        session.add(
            Invoice(
                invoice_number=number,
                client_id=stored_client.id,
                due_date=date(2024, 6, 30),
                created_at=datetime(2024, 5, 1),
                updated_at=datetime(2024, 5, 1),
            )
        )
        session.commit()

    return _add
