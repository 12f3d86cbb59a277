"""Invoice e-mail rendering and delivery."""

from __future__ import annotations

import smtplib
from datetime import date, datetime
from email.message import EmailMessage
from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.config import Settings
from ..core.logging import get_logger
from .currency import format_currency, format_quantity

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


def _format_date(value: Optional[Union[date, datetime]]) -> str:
    if value is None:
        return ""
    return value.strftime("%m/%d/%Y")


def build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    env.filters["money"] = format_currency
    env.filters["qty"] = format_quantity
    env.filters["datefmt"] = _format_date
    return env


_env = build_environment()


def render_invoice_html(invoice: Any, client: Any) -> str:
    """Render the invoice e-mail body. Pure: no I/O besides the template read."""
    return _env.get_template("invoice_email.html").render(invoice=invoice, client=client)


def invoice_subject(invoice: Any, client: Any, settings: Settings) -> str:
    sender = client.company or settings.company_name
    return f"Invoice {invoice.invoice_number} from {sender}"


class Mailer:
    """SMTP delivery of rendered invoices.

    Delivery never raises: a missing configuration, a client without an
    address or any SMTP failure is logged and reported as ``False`` so the
    caller's persisted state is unaffected.
    """

    def __init__(self, settings: Settings, timeout: float = 30.0) -> None:
        self.settings = settings
        self.timeout = timeout

    def send_invoice(self, invoice: Any, client: Any) -> bool:
        if not self.settings.email_configured:
            logger.info("email_not_configured", invoice_number=invoice.invoice_number)
            return False
        if not client.email:
            logger.warning("email_missing_recipient", invoice_number=invoice.invoice_number, client_id=client.id)
            return False

        message = EmailMessage()
        message["From"] = self.settings.email_sender
        message["To"] = client.email
        message["Subject"] = invoice_subject(invoice, client, self.settings)
        message.set_content(f"Invoice {invoice.invoice_number} is attached as HTML.")
        message.add_alternative(render_invoice_html(invoice, client), subtype="html")

        try:
            self._deliver(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(
                "email_send_failed",
                invoice_number=invoice.invoice_number,
                error=str(exc),
            )
            return False

        logger.info("email_sent", invoice_number=invoice.invoice_number, to=client.email)
        return True

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.settings.email_host, self.settings.email_port, timeout=self.timeout) as smtp:
            if self.settings.email_use_tls:
                smtp.starttls()
            smtp.login(self.settings.email_user, self.settings.email_pass)
            smtp.send_message(message)
