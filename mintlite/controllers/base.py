"""
Presentation Controller Base

A controller mediates between providers and the (external) rendering layer.
It holds a private copy of the items it displays and keeps it in sync
through two paths:
1. Direct results of the operations it issues
2. Mutation events from the provider channels it subscribes to

State machine:
    IDLE -> LOADING -> LOADED | ERRORED -> LOADING -> ...

DESIGN DECISION: Staleness is tracked with two counters instead of task
cancellation, because in-flight provider calls are never cancelled.
- `_epoch` is bumped by cleanup(); any result issued in an older epoch is
  dropped without touching state.
- `_list_sequence` is bumped by every list-replacing request (fetch,
  search); only the latest one may replace the list.

A list result is a snapshot taken somewhere during the request, so channel
events delivered while the request was in flight may be newer than it.
The latest such event per entity is replayed on top of the snapshot.
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict

from mintlite.audit.logger import AuditLogger, create_correlation_id
from mintlite.errors import MintLiteError
from mintlite.models.base import Entity
from mintlite.providers.channel import Mutation, MutationChannel, MutationKind, Subscription

logger = structlog.get_logger(__name__)

EntityT = TypeVar("EntityT", bound=Entity)
ResultT = TypeVar("ResultT")

Binding = tuple[MutationChannel, Callable[[Mutation], Any]]


class ControllerState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


class ControllerSnapshot(BaseModel):
    """Published on `changes` after every observable change."""

    model_config = ConfigDict(frozen=True)

    controller: str
    state: ControllerState
    is_loading: bool
    error_message: Optional[str] = None
    item_count: int = 0


class BaseController(Generic[EntityT]):
    """
    Observable list state plus the subscription lifecycle.

    Subclasses provide `_bindings()` (channels to subscribe to) and
    `_load()` (the initial fetch).
    """

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._items: list[EntityT] = []
        self._state = ControllerState.IDLE
        self._error_message: Optional[str] = None
        self._in_flight = 0
        self._epoch = 0
        self._list_sequence = 0
        self._list_requests = 0
        self._missed: dict[tuple[Callable[[Mutation], Any], str], Mutation] = {}
        self._subscriptions: list[Subscription] = []
        self._initialized = False
        self._audit = audit_logger
        self._correlation_id = create_correlation_id()
        self.changes: MutationChannel[ControllerSnapshot] = MutationChannel(
            f"{self.name}.changes"
        )

    # =========================================================================
    # Observable surface
    # =========================================================================

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def items(self) -> list[EntityT]:
        return list(self._items)

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def subscription_count(self) -> int:
        return sum(1 for s in self._subscriptions if s.active)

    def get(self, entity_id: str) -> Optional[EntityT]:
        return next((item for item in self._items if item.id == entity_id), None)

    def snapshot(self) -> ControllerSnapshot:
        return ControllerSnapshot(
            controller=self.name,
            state=self._state,
            is_loading=self.is_loading,
            error_message=self._error_message,
            item_count=len(self._items),
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def _bindings(self) -> list[Binding]:
        return []

    async def _load(self) -> None:
        pass

    async def initialize(self) -> None:
        """Subscribe to provider channels, then issue the initial fetch."""
        if self._initialized:
            return
        self._initialized = True
        for channel, handler in self._bindings():
            self._subscriptions.append(channel.subscribe(self._recording(handler)))
        logger.debug(
            "controller_initialized",
            controller=self.name,
            subscriptions=len(self._subscriptions),
        )
        if self._audit:
            self._audit.log_controller_initialized(
                self.name, self._correlation_id, len(self._subscriptions)
            )
        await self._load()

    def cleanup(self) -> None:
        """
        Unsubscribe everything and clear observable state.

        Safe to call repeatedly. Results of calls issued before cleanup are
        dropped when they arrive.
        """
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions.clear()
        self._on_cleanup()

        self._epoch += 1
        was_initialized = self._initialized
        self._initialized = False
        self._in_flight = 0
        self._list_requests = 0
        self._missed.clear()
        self._items = []
        self._error_message = None
        self._state = ControllerState.IDLE

        if was_initialized:
            logger.debug("controller_disposed", controller=self.name)
            if self._audit:
                self._audit.log_controller_disposed(self.name, self._correlation_id)
            self._emit()

    def _on_cleanup(self) -> None:
        """Hook for subclasses holding extra resources (timers, caches)."""
        pass

    # =========================================================================
    # Operation plumbing
    # =========================================================================

    def _next_list_request(self) -> int:
        self._list_sequence += 1
        return self._list_sequence

    def _begin(self) -> None:
        self._in_flight += 1
        self._error_message = None
        self._state = ControllerState.LOADING
        self._emit()

    def _finish(self, error: Optional[MintLiteError] = None) -> None:
        self._in_flight = max(self._in_flight - 1, 0)
        if error is not None:
            self._error_message = str(error)
        if self._in_flight == 0:
            self._state = (
                ControllerState.ERRORED if self._error_message else ControllerState.LOADED
            )
        self._emit()

    async def _run(
        self,
        operation: str,
        call: Callable[[], Awaitable[ResultT]],
        apply: Optional[Callable[[ResultT], None]] = None,
        sequence: Optional[int] = None,
    ) -> Optional[ResultT]:
        """
        Issue one provider call with loading/error bookkeeping.

        Returns the result, or None when the call failed or its result was
        dropped as stale. Errors never propagate to the caller; they land in
        `error_message` and leave the items untouched.
        """
        epoch = self._epoch
        self._begin()
        if sequence is not None:
            self._list_requests += 1
        error: Optional[MintLiteError] = None
        try:
            result = await call()
        except MintLiteError as e:
            error = e
        except asyncio.CancelledError:
            if epoch == self._epoch:
                self._end_list_request(sequence)
                self._finish()
            raise

        if epoch != self._epoch:
            self._dropped(operation)
            return None
        missed = self._end_list_request(sequence)
        if sequence is not None and sequence != self._list_sequence:
            self._dropped(operation)
            self._finish()
            return None
        if error is not None:
            logger.info(
                "controller_operation_failed",
                controller=self.name,
                operation=operation,
                error=str(error),
            )
            if self._audit:
                self._audit.log_operation_failed(
                    operation, error, correlation_id=self._correlation_id
                )
            self._finish(error)
            return None

        if apply is not None:
            apply(result)
            for handler, mutation in missed:
                handler(mutation)
        self._finish()
        return result

    def _recording(self, handler: Callable[[Mutation], Any]) -> Callable[[Mutation], None]:
        """Wrap a channel handler so events seen during a list request can be replayed."""

        def listener(mutation: Mutation) -> None:
            if self._list_requests:
                self._missed[(handler, mutation.entity.id)] = mutation
            handler(mutation)

        return listener

    def _end_list_request(
        self,
        sequence: Optional[int],
    ) -> list[tuple[Callable[[Mutation], Any], Mutation]]:
        """Close one list request; returns the events to replay over its result."""
        if sequence is None:
            return []
        missed = [(handler, mutation) for (handler, _), mutation in self._missed.items()]
        self._list_requests = max(self._list_requests - 1, 0)
        if self._list_requests == 0:
            self._missed.clear()
        return missed

    def _dropped(self, operation: str) -> None:
        logger.debug("stale_result_dropped", controller=self.name, operation=operation)
        if self._audit:
            self._audit.log_stale_result(self.name, operation, self._correlation_id)

    def _emit(self) -> None:
        self.changes.publish(self.snapshot())

    # =========================================================================
    # List maintenance
    # =========================================================================

    def _replace_items(self, items: list[EntityT]) -> None:
        self._items = list(items)

    def _accepts(self, entity: EntityT) -> bool:
        """Whether an unknown entity from a channel belongs in this list."""
        return True

    def _insert(self, entity: EntityT) -> None:
        self._items.append(entity)

    def _upsert(self, entity: EntityT) -> None:
        for index, existing in enumerate(self._items):
            if existing.id == entity.id:
                self._items[index] = entity
                return
        if self._accepts(entity):
            self._insert(entity)

    def _remove(self, entity_id: str) -> None:
        self._items = [item for item in self._items if item.id != entity_id]

    def _merge(self, entity: EntityT) -> None:
        """Apply a direct operation result the same way a channel event would."""
        self._upsert(entity)

    def _on_mutation(self, mutation: Mutation) -> None:
        if mutation.kind == MutationKind.DELETED:
            self._remove(mutation.entity.id)
        else:
            self._upsert(mutation.entity)
        self._emit()
