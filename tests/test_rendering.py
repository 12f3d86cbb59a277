import smtplib
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from invoicing.core.config import Settings
from invoicing.services.export import export_filename, render_invoice_text
from invoicing.services.notifications import Mailer, invoice_subject, render_invoice_html


@pytest.fixture()
def client_row():
    return SimpleNamespace(
        id=3,
        name="Hank Scorpio",
        company="Globex Corporation",
        email="hank@globex.com",
        phone="555-0100",
        street="1 Cypress Creek",
        city="Springfield",
        state="OR",
        zip_code="97477",
        country="USA",
    )


@pytest.fixture()
def invoice_row():
    return SimpleNamespace(
        invoice_number="INV2024050007",
        created_at=datetime(2024, 5, 14, 10, 30),
        due_date=date(2024, 6, 13),
        paid_date=None,
        status="sent",
        currency="RUB",
        items=[
            SimpleNamespace(
                description="Hammock installation",
                quantity=Decimal("2.0000"),
                price=Decimal("50.005"),
                total=Decimal("100.010"),
            )
        ],
        subtotal=Decimal("100.01"),
        tax_rate=Decimal("10.0000"),
        tax_amount=Decimal("10.00"),
        total_amount=Decimal("110.01"),
        notes="Net 30 <please>",
    )


@pytest.fixture()
def settings():
    return Settings(
        _env_file=None,
        company_name="Acme Billing",
        company_address="42 Main St",
        email_host=None,
        email_user=None,
        email_pass=None,
    )


def test_render_text_export(invoice_row, client_row, settings):
    text = render_invoice_text(invoice_row, client_row, settings).decode("utf-8")
    lines = text.splitlines()

    assert "ACME BILLING" in text
    assert "Invoice Number: INV2024050007" in lines
    assert "Status: SENT" in lines
    assert "Currency: RUB (₽)" in lines
    assert "Tax (10%): ₽10.00" in lines
    assert "TOTAL: ₽110.01" in lines
    assert "Paid Date" not in text
    assert all(len(line) <= 80 for line in lines)


def test_render_text_export_paid(invoice_row, client_row, settings):
    invoice_row.status = "paid"
    invoice_row.paid_date = datetime(2024, 5, 20, 8, 0)
    text = render_invoice_text(invoice_row, client_row, settings).decode("utf-8")
    assert "Paid Date: Mon May 20 2024" in text


def test_export_filename(invoice_row):
    assert export_filename(invoice_row) == "invoice-INV2024050007.pdf"


def test_render_html(invoice_row, client_row):
    html = render_invoice_html(invoice_row, client_row)
    assert "Invoice INV2024050007" in html
    assert "Globex Corporation" in html
    assert "110.01 ₽" in html
    assert "05/14/2024" in html
    assert "<please>" not in html


def test_subject_prefers_client_company(invoice_row, client_row, settings):
    assert invoice_subject(invoice_row, client_row, settings) == "Invoice INV2024050007 from Globex Corporation"
    client_row.company = None
    assert invoice_subject(invoice_row, client_row, settings) == "Invoice INV2024050007 from Acme Billing"


def test_mailer_without_configuration_returns_false(invoice_row, client_row, settings):
    assert Mailer(settings).send_invoice(invoice_row, client_row) is False


def test_mailer_without_recipient_returns_false(invoice_row, client_row, settings):
    configured = settings.model_copy(update={"email_host": "smtp.test", "email_user": "u", "email_pass": "p"})
    client_row.email = None
    assert Mailer(configured).send_invoice(invoice_row, client_row) is False


def test_mailer_smtp_failure_returns_false(invoice_row, client_row, settings, monkeypatch):
    configured = settings.model_copy(update={"email_host": "smtp.test", "email_user": "u", "email_pass": "p"})
    mailer = Mailer(configured)

    def refuse(message):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    monkeypatch.setattr(mailer, "_deliver", refuse)
    assert mailer.send_invoice(invoice_row, client_row) is False


def test_mailer_success(invoice_row, client_row, settings, monkeypatch):
    configured = settings.model_copy(update={"email_host": "smtp.test", "email_user": "u", "email_pass": "p"})
    mailer = Mailer(configured)
    delivered = []
    monkeypatch.setattr(mailer, "_deliver", delivered.append)

    assert mailer.send_invoice(invoice_row, client_row) is True
    message = delivered[0]
    assert message["To"] == "hank@globex.com"
    assert message["From"] == "u"
    assert message["Subject"] == "Invoice INV2024050007 from Globex Corporation"


def test_render_text_skips_missing_contact_fields(invoice_row, settings):
    sparse = SimpleNamespace(
        id=4, name="Walk-in", company=None, email=None, phone="",
        street=None, city="Shelbyville", state=None, zip_code="97478", country="USA",
    )
    lines = render_invoice_text(invoice_row, sparse, settings).decode("utf-8").splitlines()
    start = lines.index("BILL TO:")
    assert lines[start + 1:start + 5] == ["Walk-in", "Shelbyville, 97478", "USA", ""]
