"""
Mutation Channel

Each provider owns one channel and publishes every successful write on it.
Controllers subscribe on initialize and unsubscribe on cleanup.

Delivery rules:
- Synchronous, in subscription order, exactly once per listener
- The listener list is snapshotted when `publish` starts, so a listener
  added during delivery only sees later publishes
- A subscription cancelled mid-delivery receives nothing further
- A failing listener is logged and skipped; the error never reaches the
  publishing provider

DESIGN DECISION: Listeners are held by an explicit registry keyed by the
Subscription handle, not by weak references. Nothing is ever unsubscribed
implicitly; whoever subscribed must unsubscribe.
"""

import itertools
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict

from mintlite.models.base import Entity

logger = structlog.get_logger(__name__)

PayloadT = TypeVar("PayloadT")


class MutationKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class Mutation(BaseModel):
    """A post-mutation entity snapshot and what happened to it."""

    model_config = ConfigDict(frozen=True)

    kind: MutationKind
    entity: Entity

    @property
    def entity_id(self) -> str:
        return self.entity.id


class Subscription:
    """Handle returned by `subscribe`; pass it back to unsubscribe."""

    def __init__(self, channel: "MutationChannel", subscription_id: int):
        self._channel = channel
        self.subscription_id = subscription_id
        self.active = True

    def cancel(self) -> None:
        self._channel.unsubscribe(self)

    def __repr__(self) -> str:
        state = "active" if self.active else "cancelled"
        return f"<Subscription {self._channel.name}#{self.subscription_id} {state}>"


class MutationChannel(Generic[PayloadT]):
    """Broadcast stream with deterministic, handle-based unsubscribe."""

    def __init__(self, name: str = "channel"):
        self.name = name
        self._listeners: dict[int, tuple[Subscription, Callable[[PayloadT], Any]]] = {}
        self._ids = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Callable[[PayloadT], Any]) -> Subscription:
        handle = Subscription(self, next(self._ids))
        self._listeners[handle.subscription_id] = (handle, listener)
        return handle

    def unsubscribe(self, handle: Subscription) -> bool:
        """
        Remove a listener. Safe to call more than once.

        Returns True only if the handle was still registered here.
        """
        if handle._channel is not self:
            return False
        handle.active = False
        return self._listeners.pop(handle.subscription_id, None) is not None

    def publish(self, payload: PayloadT) -> int:
        """
        Deliver `payload` to every listener registered right now.

        Returns the number of listeners that received it.
        """
        snapshot = list(self._listeners.values())
        delivered = 0
        for handle, listener in snapshot:
            if not handle.active:
                continue
            try:
                listener(payload)
            except Exception:
                logger.exception(
                    "channel_listener_failed",
                    channel=self.name,
                    subscription_id=handle.subscription_id,
                )
            delivered += 1
        return delivered

    def clear(self) -> None:
        """Cancel every subscription."""
        for handle, _ in list(self._listeners.values()):
            handle.active = False
        self._listeners.clear()
