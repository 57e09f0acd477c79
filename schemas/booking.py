from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError


FIELD_LABELS = {
    "full_name": "Name",
    "email": "Email",
    "phone": "Phone",
    "organization": "Organization",
    "service_type": "Service type",
    "preferred_date": "Preferred date",
    "preferred_time": "Preferred time",
}

# Line breaks and other control characters; these fields end up in mail headers
CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

REQUIRED_MESSAGES = {
    "full_name": "Name is required",
    "service_type": "Service type is required",
    "preferred_date": "Preferred date is required",
    "preferred_time": "Preferred time is required",
}


def _strip(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


class BookingRequest(BaseModel):
    """Consultation booking submitted by the public form.

    Absent fields are treated as empty strings so that required-field
    failures are reported uniformly with a readable message.
    """

    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(default="", alias="fullName", max_length=200, validate_default=True)
    email: str = Field(default="", max_length=254, validate_default=True)
    phone: str = Field(default="", max_length=50)
    organization: str = Field(default="", max_length=200)
    service_type: str = Field(default="", alias="serviceType", max_length=200, validate_default=True)
    preferred_date: str = Field(default="", alias="preferredDate", max_length=100, validate_default=True)
    preferred_time: str = Field(default="", alias="preferredTime", max_length=100, validate_default=True)
    notes: str = Field(default="", max_length=5000)

    @field_validator("*", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator(*FIELD_LABELS)
    @classmethod
    def _single_line(cls, value: str, info) -> str:
        if CONTROL_CHARS.search(value):
            raise ValueError(f"{FIELD_LABELS[info.field_name]} must be a single line of text")
        return value

    @field_validator("full_name", "service_type", "preferred_date", "preferred_time")
    @classmethod
    def _require_text(cls, value: str, info) -> str:
        if not value:
            raise ValueError(REQUIRED_MESSAGES[info.field_name])
        return value

    @field_validator("email")
    @classmethod
    def _require_email(cls, value: str) -> str:
        if not value:
            raise ValueError("Email is required")
        try:
            _, address = validate_email(value)
        except PydanticCustomError:
            raise ValueError("Valid email is required")
        return address.lower()

    @property
    def organization_label(self) -> str:
        return self.organization or "Individual"


class BookingResponse(BaseModel):
    message: str
    id: Optional[str] = None
    status: str = "confirmed"


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[list[FieldError]] = None
    retryAfter: Optional[int] = None


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    port: Optional[int] = None
    environment: Optional[str] = None
