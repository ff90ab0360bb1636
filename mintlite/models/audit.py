"""
Audit Models for Mint Lite

Every provider write, failed operation and controller lifecycle step is
recorded as an audit event. This provides:
1. Traceability of which mutation reached which controller
2. Debugging information when a stale result is dropped
3. A history the settings screen can show after logout

DESIGN DECISION: Audit events are append-only. The in-memory trail is
bounded, but events are never modified once recorded.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from mintlite.utils.dates import utc_now


class AuditEventType(str, Enum):
    """
    Events recorded by providers and controllers.
    """
    # Provider writes
    ENTITY_CREATED = "entity_created"
    ENTITY_UPDATED = "entity_updated"
    ENTITY_DELETED = "entity_deleted"
    OPERATION_FAILED = "operation_failed"
    PROVIDER_CLOSED = "provider_closed"

    # Controller lifecycle
    CONTROLLER_INITIALIZED = "controller_initialized"
    CONTROLLER_DISPOSED = "controller_disposed"
    STALE_RESULT_DROPPED = "stale_result_dropped"
    SEARCH_ISSUED = "search_issued"

    # Session
    USER_LOGGED_IN = "user_logged_in"
    USER_LOGGED_OUT = "user_logged_out"


class AuditSeverity(str, Enum):
    """Maps onto the stdlib log level used when the event is written."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    One entry in the bounded in-memory trail and in the structured log.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'budget', 'controller')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - e.g. every event of one controller instance
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """
        Flatten into keyword arguments for the structlog call.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


_MUTATION_EVENT_TYPES = {
    "created": AuditEventType.ENTITY_CREATED,
    "updated": AuditEventType.ENTITY_UPDATED,
    "deleted": AuditEventType.ENTITY_DELETED,
}


class AuditEventBuilder:
    """
    Factory methods for the events providers and controllers emit.

    Usage:
        event = AuditEventBuilder.entity_mutated("created", "budget", budget.id)
        event = AuditEventBuilder.controller_disposed("BudgetController", correlation_id)
    """

    @staticmethod
    def entity_mutated(
        kind: str,
        entity_type: str,
        entity_id: str,
        provider: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=_MUTATION_EVENT_TYPES[kind],
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} {kind}: {entity_id}",
            details={"provider": provider} if provider else {},
        )

    @staticmethod
    def operation_failed(
        operation: str,
        error: Exception,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        code = getattr(error, "code", None)
        return AuditEvent(
            event_type=AuditEventType.OPERATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Operation failed: {operation}",
            details={"operation": operation},
            error_code=getattr(code, "value", code) or type(error).__name__,
            error_message=str(error),
        )

    @staticmethod
    def provider_closed(provider: str, pending: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROVIDER_CLOSED,
            entity_type="provider",
            entity_id=provider,
            description=f"Provider closed: {provider}",
            details={"pending_operations": pending},
        )

    @staticmethod
    def controller_initialized(
        controller: str,
        correlation_id: UUID,
        channels: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONTROLLER_INITIALIZED,
            entity_type="controller",
            entity_id=controller,
            correlation_id=correlation_id,
            description=f"{controller} initialized",
            details={"subscriptions": channels},
        )

    @staticmethod
    def controller_disposed(controller: str, correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONTROLLER_DISPOSED,
            entity_type="controller",
            entity_id=controller,
            correlation_id=correlation_id,
            description=f"{controller} disposed",
        )

    @staticmethod
    def stale_result_dropped(
        controller: str,
        operation: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STALE_RESULT_DROPPED,
            severity=AuditSeverity.DEBUG,
            entity_type="controller",
            entity_id=controller,
            correlation_id=correlation_id,
            description=f"Stale result dropped: {operation}",
            details={"operation": operation},
        )

    @staticmethod
    def search_issued(
        controller: str,
        query: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SEARCH_ISSUED,
            entity_type="controller",
            entity_id=controller,
            correlation_id=correlation_id,
            description="Search issued" if query else "Search cleared",
            details={"query": query},
            is_user_action=True,
        )

    @staticmethod
    def user_logged_in(user_id: str, method: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_IN,
            entity_type="user",
            entity_id=user_id,
            description=f"User logged in via {method}",
            details={"method": method},
            is_user_action=True,
        )

    @staticmethod
    def user_logged_out(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_OUT,
            entity_type="user",
            entity_id=user_id,
            description="User logged out",
            is_user_action=True,
        )
