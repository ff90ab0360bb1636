"""
Abstract Provider Interface

DESIGN DECISION: Controllers depend on this interface, never on a concrete
simulated backend. This allows us to:
1. Inject providers with deterministic latency and seeds in tests
2. Swap the simulation for a real API client later
3. Keep controllers unaware of how data is stored

Every operation is a coroutine that resolves after the (simulated) network
round trip. Every successful write changes the collection first and then
publishes on `mutations`.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from mintlite.models.base import Entity
from mintlite.providers.channel import Mutation, MutationChannel

EntityT = TypeVar("EntityT", bound=Entity)


class DataProvider(ABC, Generic[EntityT]):
    """
    Abstract interface for a per-domain data provider.

    Any implementation (simulated, HTTP, cached) must implement these
    methods and own a mutation channel.
    """

    mutations: MutationChannel[Mutation]

    @abstractmethod
    async def fetch_all(self) -> list[EntityT]:
        """
        Return every entity, in collection order.

        Raises:
            TransientError: simulated network failure
            ServiceUnavailableError: provider has been closed
        """
        pass

    @abstractmethod
    async def create(self, fields: dict[str, Any]) -> EntityT:
        """
        Validate `fields`, add the entity and publish CREATED.

        Raises:
            ValidationError: if the fields violate an invariant
        """
        pass

    @abstractmethod
    async def update(self, entity: EntityT) -> EntityT:
        """
        Replace the stored entity with the same id and publish UPDATED.

        Raises:
            NotFoundError: if no entity has that id
        """
        pass

    @abstractmethod
    async def delete(self, entity_id: str) -> None:
        """
        Remove an entity and publish DELETED.

        Raises:
            NotFoundError: if no entity has that id
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Resolve pending and future operations with ServiceUnavailableError."""
        pass
