"""Customer details attached to every booking of a reservation."""

import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def normalize_phone(value: str) -> str:
    """Strip everything except digits and a leading +.

    Examples:
        >>> normalize_phone("(11) 99999-9999")
        '11999999999'
        >>> normalize_phone("+55 11 99999 9999")
        '+5511999999999'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


class CustomerInfo(BaseModel):
    """Client contact information copied onto each booking row."""
    name: str = Field(min_length=2, max_length=255)
    phone: str = Field(min_length=10, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("name must be at least 2 characters")
        return value

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, value: str) -> str:
        return normalize_phone(value)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", value):
            raise ValueError("email is not a valid address")
        return value
