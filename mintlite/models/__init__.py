"""
Data Models Package

This package contains all Pydantic models used by Mint Lite.
Every entity a provider owns or a controller displays conforms to these
schemas.
"""

from mintlite.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from mintlite.models.base import Entity
from mintlite.models.finance import (
    Account,
    AccountType,
    AssetClass,
    Budget,
    BudgetPeriod,
    Goal,
    GoalCategory,
    Investment,
    Transaction,
)
from mintlite.models.notification import (
    Notification,
    NotificationData,
    NotificationPriority,
    NotificationType,
)
from mintlite.models.user import User, is_valid_email, is_valid_password

__all__ = [
    # Base
    "Entity",
    # Finance models
    "Account",
    "AccountType",
    "AssetClass",
    "Budget",
    "BudgetPeriod",
    "Goal",
    "GoalCategory",
    "Investment",
    "Transaction",
    # Notifications
    "Notification",
    "NotificationData",
    "NotificationPriority",
    "NotificationType",
    # Users
    "User",
    "is_valid_email",
    "is_valid_password",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
