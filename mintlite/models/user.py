"""
User Model

Created on login or registration, changed only through settings
operations, and dropped on logout.
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from mintlite.errors import ValidationCode
from mintlite.models.base import Entity, UtcDatetime, invalid, require_text
from mintlite.models.finance import CURRENCY_PATTERN
from mintlite.utils.dates import utc_now

EMAIL_PATTERN = re.compile(r"^[A-Z0-9a-z._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,64}$")
MIN_PASSWORD_LENGTH = 8


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email.strip()))


def is_valid_password(password: str) -> bool:
    return len(password) >= MIN_PASSWORD_LENGTH


class User(Entity):
    id: str
    email: str
    first_name: str
    last_name: str
    preferred_currency: str = "USD"
    email_verified: bool = False
    biometric_enabled: bool = False
    notifications_enabled: bool = True
    profile_image_url: Optional[str] = None
    last_login_at: UtcDatetime = Field(default_factory=utc_now)
    created_at: UtcDatetime = Field(default_factory=utc_now)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return require_text(v, ValidationCode.ID_INVALID, "User ID")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not is_valid_email(v):
            raise invalid(ValidationCode.EMAIL_INVALID, f"Invalid email address: {v!r}")
        return v

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, v: str) -> str:
        return require_text(v, ValidationCode.NAME_INVALID, "Name")

    @field_validator("preferred_currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        code = v.upper()
        if not CURRENCY_PATTERN.match(code):
            raise invalid(
                ValidationCode.CURRENCY_INVALID,
                f"Currency must be a 3-letter code, got {v!r}",
            )
        return code

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def with_login(self, at: Optional[datetime] = None) -> "User":
        return self.replace(last_login_at=at or utc_now())

    def with_preferences(
        self,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        preferred_currency: Optional[str] = None,
        biometric_enabled: Optional[bool] = None,
        notifications_enabled: Optional[bool] = None,
        profile_image_url: Optional[str] = None,
    ) -> "User":
        """
        Copy with the given settings applied; None leaves a field as is.

        A new email address starts out unverified.
        """
        changes = {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "preferred_currency": preferred_currency,
            "biometric_enabled": biometric_enabled,
            "notifications_enabled": notifications_enabled,
            "profile_image_url": profile_image_url,
        }
        if email is not None and email.strip() != self.email:
            changes["email_verified"] = False
        return self.replace(**{k: v for k, v in changes.items() if v is not None})
