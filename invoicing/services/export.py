"""Fixed-width plain-text rendering of an invoice for download."""

from __future__ import annotations

from typing import Any, List

from ..core.config import Settings
from .currency import currency_symbol, format_amount, format_quantity

WIDTH = 80
RULE = "=" * WIDTH


def _date(value) -> str:
    return value.strftime("%a %b %d %Y") if value else "N/A"


def _bill_to(client: Any) -> List[str]:
    region = " ".join(part for part in (client.state, client.zip_code) if part)
    city_line = ", ".join(part for part in (client.city, region) if part)
    lines = [client.name, client.company, client.email, client.phone, client.street, city_line, client.country]
    return [line for line in lines if line]


def _item_line(item: Any, symbol: str) -> str:
    price = f"{symbol}{format_amount(item.price)}"
    total = f"{symbol}{format_amount(item.total)}"
    return f"{item.description[:35]:<35} {format_quantity(item.quantity):<8} {price:<15} {total}"


def render_invoice_text(invoice: Any, client: Any, settings: Settings) -> bytes:
    """Render ``invoice`` as a UTF-8 text block laid out on an 80-column grid."""
    symbol = currency_symbol(invoice.currency)

    lines: List[str] = [
        RULE,
        settings.company_name.upper().center(WIDTH).rstrip(),
        settings.company_address.center(WIDTH).rstrip(),
        f"Email: {settings.company_email}".center(WIDTH).rstrip(),
        f"Phone: {settings.company_phone}".center(WIDTH).rstrip(),
        RULE,
        "",
        "INVOICE".center(WIDTH).rstrip(),
        "",
        f"Invoice Number: {invoice.invoice_number}",
        f"Invoice Date: {_date(invoice.created_at)}",
        f"Due Date: {_date(invoice.due_date)}",
        f"Status: {invoice.status.upper()}",
        f"Currency: {invoice.currency} ({symbol})",
        "",
        "BILL TO:",
        *_bill_to(client),
        "",
        "ITEMS:",
        RULE,
        f"{'DESCRIPTION':<35} {'QTY':<8} {'PRICE':<15} {'TOTAL':<15}".rstrip(),
        RULE,
        *(_item_line(item, symbol) for item in invoice.items),
        RULE,
        "",
        f"Subtotal: {symbol}{format_amount(invoice.subtotal)}",
        f"Tax ({format_quantity(invoice.tax_rate)}%): {symbol}{format_amount(invoice.tax_amount)}",
        f"TOTAL: {symbol}{format_amount(invoice.total_amount)}",
    ]

    if invoice.status == "paid":
        lines.extend(["", f"Paid Date: {_date(invoice.paid_date)}"])
    if invoice.notes:
        lines.extend(["", "Notes:", invoice.notes])

    lines.extend(["", RULE, "Thank you for your business!", RULE])
    return "\n".join(lines).encode("utf-8")


def export_filename(invoice: Any) -> str:
    return f"invoice-{invoice.invoice_number}.pdf"
