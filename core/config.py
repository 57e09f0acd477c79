from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings


load_dotenv()


class AppSettings(BaseSettings):
    # Outbound mail transport: "resend" (HTTP send API) or "smtp"
    mail_transport: Literal["resend", "smtp"] = Field(default="resend", alias="MAIL_TRANSPORT")
    resend_api_key: Optional[str] = Field(default=None, alias="RESEND_API_KEY")
    resend_api_url: str = Field(default="https://api.resend.com/emails", alias="RESEND_API_URL")

    smtp_host: str = Field(default="smtp.gmail.com", alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SMTP_USERNAME", "EMAIL_USER")
    )
    smtp_password: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SMTP_PASSWORD", "EMAIL_PASS")
    )

    # Sender + recipients
    from_email: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("FROM_EMAIL", "EMAIL_FROM_ADDRESS")
    )
    from_name: str = Field(default="Altura Booking System", alias="FROM_NAME")
    admin_email: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ADMIN_EMAIL", "RECEIVER_EMAIL")
    )
    contact_email: Optional[str] = Field(default=None, alias="CONTACT_EMAIL")
    company_name: str = Field(default="Altura Health Strategies", alias="COMPANY_NAME")

    port: int = Field(default=5000, alias="PORT")
    environment: Literal["development", "production", "test"] = Field(
        default="development", validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV")
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Gatekeeper
    allowed_origins: str = Field(default="http://localhost:5178", alias="ALLOWED_ORIGINS")
    rate_limit_max_requests: int = Field(default=5, ge=1, alias="RATE_LIMIT_MAX_REQUESTS")
    rate_limit_window_seconds: int = Field(default=15 * 60, ge=1, alias="RATE_LIMIT_WINDOW_SECONDS")
    rate_limit_storage_uri: str = Field(default="memory://", alias="RATE_LIMIT_STORAGE_URI")
    max_body_bytes: int = Field(default=10 * 1024, ge=1, alias="MAX_BODY_BYTES")
    trust_forwarded_for: bool = Field(default=False, alias="TRUST_FORWARDED_FOR")

    mail_send_timeout_seconds: float = Field(default=15.0, gt=0, alias="MAIL_SEND_TIMEOUT_SECONDS")
    mail_verify_on_startup: bool = Field(default=True, alias="MAIL_VERIFY_ON_STARTUP")

    @model_validator(mode="after")
    def _require_mail_settings(self) -> "AppSettings":
        missing: list[str] = []
        if not self.from_email:
            missing.append("FROM_EMAIL")
        if not self.admin_email:
            missing.append("ADMIN_EMAIL")
        if self.mail_transport == "resend" and not self.resend_api_key:
            missing.append("RESEND_API_KEY")
        if self.mail_transport == "smtp" and not (self.smtp_username and self.smtp_password):
            missing.append("SMTP_USERNAME/SMTP_PASSWORD")
        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")
        return self

    @property
    def allowed_origin_list(self) -> list[str]:
        value = self.allowed_origins.strip()
        if value in {"*", '"*"'}:
            return ["*"]
        return [o.strip() for o in value.split(",") if o.strip()]

    @property
    def allow_all_origins(self) -> bool:
        return self.allowed_origin_list == ["*"]

    @property
    def support_email(self) -> str:
        return self.contact_email or self.admin_email or ""


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()
