"""
Notification Models

Notifications are pushed by the provider (seeded, simulated or injected).
`is_read` is the only field that ever changes after creation.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mintlite.errors import ValidationCode
from mintlite.models.base import Entity, UtcDatetime, require_text
from mintlite.utils.dates import format_for_display, utc_now


class NotificationType(str, Enum):
    BUDGET_ALERT = "budget_alert"
    TRANSACTION_ALERT = "transaction_alert"
    INVESTMENT_UPDATE = "investment_update"
    GOAL_PROGRESS = "goal_progress"
    ACCOUNT_SYNC = "account_sync"
    SECURITY_ALERT = "security_alert"


class NotificationPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class NotificationData(BaseModel):
    """Type-specific payload; every field is optional."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    budget_id: Optional[str] = None
    transaction_id: Optional[str] = None
    goal_id: Optional[str] = None
    account_id: Optional[str] = None
    amount: Optional[Decimal] = None
    percentage: Optional[float] = None


class Notification(Entity):
    """A single user-facing alert."""

    id: str
    type: NotificationType
    title: str
    message: str
    timestamp: UtcDatetime = Field(default_factory=utc_now)
    priority: NotificationPriority = NotificationPriority.MEDIUM
    data: NotificationData = Field(default_factory=NotificationData)
    is_read: bool = False

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return require_text(v, ValidationCode.ID_INVALID, "Notification ID")

    def mark_as_read(self) -> "Notification":
        if self.is_read:
            return self
        return self.replace(is_read=True)

    def formatted_timestamp(self) -> str:
        return format_for_display(self.timestamp)
