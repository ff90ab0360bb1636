"""
Audit Logger

DESIGN DECISION: Every provider write, failed operation and controller
lifecycle step is logged.
This provides:
1. Traceability of mutations across channels
2. Debugging capability for stale or dropped results
3. An in-memory history tests and the UI can inspect

The audit logger:
- Is synchronous, because channel delivery is synchronous and events are
  recorded from inside listeners
- Keeps a bounded trail (oldest events fall off first)
- Supports correlation IDs to trace one controller's events
"""

import logging
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from mintlite.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

DEFAULT_TRAIL_SIZE = 500


def configure_logging(json_logs: bool = True, log_level: str = "INFO") -> None:
    """
    Configure structlog over stdlib logging.

    Called once by the composition root. JSON output for machines, console
    output for local development.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger("mintlite").setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Writes audit events to structlog and keeps the recent ones in memory.

    Logs events both to:
    1. Structured local log (for debugging)
    2. A bounded in-memory trail (for inspection)
    """

    def __init__(self, trail_size: int = DEFAULT_TRAIL_SIZE):
        self._trail: deque[AuditEvent] = deque(maxlen=trail_size)
        self._logger = structlog.get_logger("mintlite.audit")

    def log(self, event: AuditEvent) -> AuditEvent:
        """Record an event to the structured log and the trail."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._trail.append(event)
        return event

    # =========================================================================
    # Trail inspection
    # =========================================================================

    def recent_events(self, limit: Optional[int] = None) -> list[AuditEvent]:
        """Newest last."""
        events = list(self._trail)
        if limit is not None:
            return events[-limit:] if limit > 0 else []
        return events

    def events_of_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        return [e for e in self._trail if e.event_type == event_type]

    def events_for_entity(self, entity_id: str) -> list[AuditEvent]:
        return [e for e in self._trail if e.entity_id == entity_id]

    def events_for_correlation(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._trail if e.correlation_id == correlation_id]

    def clear(self) -> None:
        self._trail.clear()

    # =========================================================================
    # Convenience wrappers
    # =========================================================================

    def log_mutation(
        self,
        kind: str,
        entity_type: str,
        entity_id: str,
        provider: Optional[str] = None,
    ) -> None:
        """Log a provider write (created / updated / deleted)."""
        self.log(AuditEventBuilder.entity_mutated(kind, entity_type, entity_id, provider))

    def log_operation_failed(
        self,
        operation: str,
        error: Exception,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.operation_failed(
            operation=operation,
            error=error,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))

    def log_provider_closed(self, provider: str, pending: int) -> None:
        self.log(AuditEventBuilder.provider_closed(provider, pending))

    def log_controller_initialized(
        self,
        controller: str,
        correlation_id: UUID,
        channels: int,
    ) -> None:
        self.log(AuditEventBuilder.controller_initialized(controller, correlation_id, channels))

    def log_controller_disposed(self, controller: str, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.controller_disposed(controller, correlation_id))

    def log_stale_result(
        self,
        controller: str,
        operation: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.stale_result_dropped(controller, operation, correlation_id))

    def log_search_issued(
        self,
        controller: str,
        query: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.search_issued(controller, query, correlation_id))

    def log_user_logged_in(self, user_id: str, method: str) -> None:
        self.log(AuditEventBuilder.user_logged_in(user_id, method))

    def log_user_logged_out(self, user_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.user_logged_out(user_id))


def create_correlation_id() -> UUID:
    """
    New ID tying one controller's events together.

    Each controller instance takes one at construction and tags every
    event it records with it.
    """
    return uuid4()
