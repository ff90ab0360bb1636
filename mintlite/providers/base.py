"""
Simulated Provider Base

Every domain provider is an in-memory collection behind a simulated network
round trip. This base class owns the parts they all share:
1. Latency - fixed or bounded-random, sampled from a seeded RNG
2. Failure injection - a configurable probability of TransientError
3. Shutdown - `close()` resolves pending and future calls with
   ServiceUnavailableError instead of leaving them hanging
4. Commit - write the collection first, then audit, then publish

DESIGN DECISION: One seeded `random.Random` per provider drives latency,
failures, new ids and price drift, so a fixed seed reproduces a whole run.
"""

import asyncio
import random
import uuid
from typing import Any, Optional, TypeVar

import structlog

from mintlite.audit.logger import AuditLogger
from mintlite.config.settings import ProviderSettings
from mintlite.errors import (
    NotFoundError,
    ServiceUnavailableError,
    TransientError,
    ValidationCode,
    ValidationError,
)
from mintlite.models.base import Entity
from mintlite.providers.channel import Mutation, MutationChannel, MutationKind
from mintlite.providers.interface import DataProvider, EntityT

logger = structlog.get_logger(__name__)

ProviderT = TypeVar("ProviderT", bound="SimulatedProvider")


class Latency:
    """
    Simulated network delay in seconds.

    `Latency(0.5)` is fixed; `Latency(0.5, 1.5)` is uniform in the range.
    """

    def __init__(self, minimum: float, maximum: Optional[float] = None):
        maximum = minimum if maximum is None else maximum
        if minimum < 0 or maximum < minimum:
            raise ValueError(f"Invalid latency bounds: {minimum}..{maximum}")
        self.minimum = minimum
        self.maximum = maximum

    @classmethod
    def fixed(cls, seconds: float) -> "Latency":
        return cls(seconds)

    @classmethod
    def none(cls) -> "Latency":
        return cls(0.0)

    def sample(self, rng: random.Random) -> float:
        if self.maximum == self.minimum:
            return self.minimum
        return rng.uniform(self.minimum, self.maximum)

    def __repr__(self) -> str:
        if self.maximum == self.minimum:
            return f"Latency({self.minimum})"
        return f"Latency({self.minimum}, {self.maximum})"


class SimulatedProvider(DataProvider[EntityT]):
    """
    In-memory provider with simulated latency and failures.

    Subclasses set `entity_class` and seed `self._items` in their own
    constructor.
    """

    entity_class: type[Entity] = Entity

    def __init__(
        self,
        latency: Optional[Latency] = None,
        failure_probability: float = 0.0,
        seed: Optional[int] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        if not 0.0 <= failure_probability <= 1.0:
            raise ValueError(
                f"failure_probability must be within [0, 1], got {failure_probability}"
            )
        self._latency = latency or Latency.none()
        self._failure_probability = failure_probability
        self._rng = random.Random(seed)
        self._audit = audit_logger
        self._items: dict[str, EntityT] = {}
        self._closed = asyncio.Event()
        self._pending = 0
        self.mutations: MutationChannel[Mutation] = MutationChannel(type(self).__name__)

    @classmethod
    def from_settings(
        cls: type[ProviderT],
        settings: ProviderSettings,
        audit_logger: Optional[AuditLogger] = None,
        **kwargs: Any,
    ) -> ProviderT:
        """Build with latency, failure rate and seed taken from settings."""
        return cls(
            latency=Latency(settings.min_latency_seconds, settings.max_latency_seconds),
            failure_probability=settings.failure_probability,
            seed=settings.seed,
            audit_logger=audit_logger,
            **kwargs,
        )

    @property
    def failure_probability(self) -> float:
        return self._failure_probability

    @failure_probability.setter
    def failure_probability(self, value: float) -> None:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"failure_probability must be within [0, 1], got {value}")
        self._failure_probability = value

    @property
    def latency(self) -> Latency:
        return self._latency

    @latency.setter
    def latency(self, value: Latency) -> None:
        self._latency = value

    @property
    def entity_name(self) -> str:
        return self.entity_class.__name__

    @property
    def is_closed(self) -> bool:
        return self._closed.is_set()

    @property
    def pending_operations(self) -> int:
        return self._pending

    # =========================================================================
    # Simulation
    # =========================================================================

    async def _simulate_network(self, operation: str) -> None:
        """
        Wait out the simulated round trip.

        Raises:
            ServiceUnavailableError: closed before or during the wait
            TransientError: injected failure
        """
        if self.is_closed:
            raise self._unavailable(operation)

        delay = self._latency.sample(self._rng)
        self._pending += 1
        try:
            if delay > 0:
                try:
                    await asyncio.wait_for(self._closed.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
            else:
                await asyncio.sleep(0)
        finally:
            self._pending -= 1

        if self.is_closed:
            raise self._unavailable(operation)

        if self._failure_probability > 0 and self._rng.random() < self._failure_probability:
            raise self._failed(
                operation,
                TransientError(f"Simulated network failure during {operation}"),
            )

    def close(self) -> None:
        """Stop serving. Pending calls wake up and fail immediately."""
        if self.is_closed:
            return
        pending = self._pending
        self._closed.set()
        logger.info("provider_closed", provider=type(self).__name__, pending=pending)
        if self._audit:
            self._audit.log_provider_closed(type(self).__name__, pending)

    def _unavailable(self, operation: str) -> ServiceUnavailableError:
        return ServiceUnavailableError(
            f"{type(self).__name__} is no longer available ({operation})"
        )

    def _failed(
        self,
        operation: str,
        error: Exception,
        entity_id: Optional[str] = None,
    ) -> Exception:
        """Audit a failed operation and hand the error back for raising."""
        if self._audit:
            self._audit.log_operation_failed(
                operation=operation,
                error=error,
                entity_type=self.entity_name.lower(),
                entity_id=entity_id,
            )
        return error

    def _new_id(self) -> str:
        return str(uuid.UUID(int=self._rng.getrandbits(128), version=4))

    # =========================================================================
    # Collection access
    # =========================================================================

    def _require(self, entity_id: str, operation: str) -> EntityT:
        try:
            return self._items[entity_id]
        except KeyError:
            raise self._failed(
                operation,
                NotFoundError(self.entity_name, entity_id),
                entity_id=entity_id,
            ) from None

    def _build(self, operation: str, **fields: Any) -> EntityT:
        try:
            return self.entity_class(**fields)
        except ValidationError as e:
            raise self._failed(operation, e, entity_id=fields.get("id"))

    def _commit(self, kind: MutationKind, entity: EntityT) -> EntityT:
        """Apply a write to the collection, then publish it."""
        if kind == MutationKind.DELETED:
            self._items.pop(entity.id, None)
        else:
            self._items[entity.id] = entity

        if self._audit:
            self._audit.log_mutation(
                kind.value,
                entity.entity_type,
                entity.id,
                provider=type(self).__name__,
            )
        self.mutations.publish(Mutation(kind=kind, entity=entity))
        return entity

    def snapshot(self) -> list[EntityT]:
        """Current collection without a simulated round trip."""
        return list(self._items.values())

    # =========================================================================
    # Generic operations
    # =========================================================================

    async def fetch_all(self) -> list[EntityT]:
        await self._simulate_network("fetch_all")
        return self.snapshot()

    async def get(self, entity_id: str) -> EntityT:
        await self._simulate_network("get")
        return self._require(entity_id, "get")

    async def create(self, fields: dict[str, Any]) -> EntityT:
        await self._simulate_network("create")
        data = dict(fields)
        data.setdefault("id", self._new_id())
        return self._commit(MutationKind.CREATED, self._build("create", **data))

    async def update(self, entity: EntityT) -> EntityT:
        await self._simulate_network("update")
        if not isinstance(entity, self.entity_class):
            raise self._failed(
                "update",
                ValidationError(
                    ValidationCode.FIELD_INVALID,
                    f"Expected {self.entity_name}, got {type(entity).__name__}",
                ),
            )
        self._require(entity.id, "update")
        return self._commit(MutationKind.UPDATED, entity)

    async def delete(self, entity_id: str) -> None:
        await self._simulate_network("delete")
        entity = self._require(entity_id, "delete")
        self._commit(MutationKind.DELETED, entity)
