"""Goal Provider"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union

from mintlite.errors import ValidationError
from mintlite.models.finance import Goal, GoalCategory
from mintlite.providers.base import SimulatedProvider
from mintlite.providers.channel import MutationKind
from mintlite.providers.fixtures import MockDataGenerator


class GoalProvider(SimulatedProvider[Goal]):
    entity_class = Goal

    def __init__(
        self,
        *args: Any,
        initial_goals: Optional[list[Goal]] = None,
        seed_count: int = 5,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        if initial_goals is None:
            initial_goals = MockDataGenerator(rng=self._rng).goals(seed_count)
        for goal in initial_goals:
            self._items[goal.id] = goal

    async def create_goal(
        self,
        name: str,
        description: str,
        target_amount: Decimal,
        target_date: datetime,
        category: Union[GoalCategory, str] = GoalCategory.OTHER,
    ) -> Goal:
        """New goal starting at zero saved."""
        await self._simulate_network("create_goal")
        goal = self._build(
            "create_goal",
            id=self._new_id(),
            name=name,
            description=description,
            target_amount=target_amount,
            current_amount=Decimal("0"),
            target_date=target_date,
            category=category,
        )
        return self._commit(MutationKind.CREATED, goal)

    async def create(self, fields: dict[str, Any]) -> Goal:
        return await self.create_goal(**fields)

    async def update_progress(self, goal_id: str, amount: Decimal) -> Goal:
        """
        Set the saved amount; completion follows the raw amounts.

        Raises:
            NotFoundError: unknown goal
            ValidationError: negative amount (the stored goal is unchanged)
        """
        await self._simulate_network("update_progress")
        goal = self._require(goal_id, "update_progress")
        try:
            updated = goal.update_progress(amount)
        except ValidationError as e:
            raise self._failed("update_progress", e, entity_id=goal_id)
        return self._commit(MutationKind.UPDATED, updated)
