"""Small-business invoicing API."""

__version__ = "1.0.0"
