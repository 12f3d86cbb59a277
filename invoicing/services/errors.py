"""Domain errors raised by the services and mapped onto the API error envelope."""

from typing import Any, Dict, Optional


class DomainError(Exception):
    code = "DOMAIN_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    status_code = 404


class ConflictError(DomainError):
    code = "CONFLICT"
    status_code = 409


class ClientHasInvoicesError(ConflictError):
    code = "CLIENT_HAS_INVOICES"

    def __init__(self, invoice_count: int):
        super().__init__(
            "Cannot delete client with existing invoices. Please archive the client instead.",
            details={"invoice_count": invoice_count},
        )
        self.invoice_count = invoice_count


class SequenceExhaustedError(ConflictError):
    code = "SEQUENCE_EXHAUSTED"


class PolicyViolationError(DomainError):
    code = "POLICY_VIOLATION"
    status_code = 400


class PaidInvoiceLockedError(PolicyViolationError):
    code = "INVOICE_LOCKED"


class AlreadyPaidError(PolicyViolationError):
    code = "ALREADY_PAID"

    def __init__(self) -> None:
        super().__init__("Invoice is already marked as paid")


class AuthenticationError(DomainError):
    code = "UNAUTHORIZED"
    status_code = 401
