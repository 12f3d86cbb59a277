"""Application configuration via pydantic settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "invoicing-backend"
    app_version: str = "1.0.0"
    app_env: str = "development"

    database_url: str = "sqlite:///./invoicing.db"

    invoice_prefix: str = "INV"

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24 * 7
    allow_registration: bool = True

    email_host: Optional[str] = None
    email_port: int = 587
    email_user: Optional[str] = None
    email_pass: Optional[str] = None
    email_from: Optional[str] = None
    email_use_tls: bool = True

    company_name: str = "Your Company Name"
    company_address: str = "Your Company Address"
    company_email: str = "contact@yourcompany.com"
    company_phone: str = "+1 (555) 123-4567"

    log_level: str = "INFO"
    log_json: bool = True

    @property
    def email_configured(self) -> bool:
        return bool(self.email_host and self.email_user and self.email_pass)

    @property
    def email_sender(self) -> Optional[str]:
        return self.email_from or self.email_user


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
