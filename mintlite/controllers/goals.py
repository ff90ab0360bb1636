"""Goal Controller"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from mintlite.audit.logger import AuditLogger
from mintlite.controllers.base import BaseController, Binding
from mintlite.models.finance import Goal, GoalCategory
from mintlite.providers.goals import GoalProvider


class GoalController(BaseController[Goal]):

    def __init__(
        self,
        provider: GoalProvider,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(audit_logger)
        self._provider = provider

    def _bindings(self) -> list[Binding]:
        return [(self._provider.mutations, self._on_mutation)]

    async def _load(self) -> None:
        await self.fetch_goals()

    @property
    def completed_goals(self) -> list[Goal]:
        return [g for g in self._items if g.is_completed]

    @property
    def active_goals(self) -> list[Goal]:
        return [g for g in self._items if not g.is_completed]

    @property
    def total_saved(self) -> Decimal:
        return sum((g.current_amount for g in self._items), Decimal("0"))

    def overall_progress(self) -> float:
        """Saved / targeted across all goals, clamped to [0, 100]."""
        target = sum((g.target_amount for g in self._items), Decimal("0"))
        if target <= 0:
            return 0.0
        return min(float(self.total_saved / target) * 100, 100.0)

    async def fetch_goals(self) -> Optional[list[Goal]]:
        return await self._run(
            "fetch_goals",
            self._provider.fetch_all,
            self._replace_items,
            sequence=self._next_list_request(),
        )

    async def create_goal(
        self,
        name: str,
        description: str,
        target_amount: Decimal,
        target_date: datetime,
        category: Union[GoalCategory, str] = GoalCategory.OTHER,
    ) -> Optional[Goal]:
        return await self._run(
            "create_goal",
            lambda: self._provider.create_goal(
                name, description, target_amount, target_date, category
            ),
            self._merge,
        )

    async def update_progress(self, goal_id: str, amount: Decimal) -> Optional[Goal]:
        return await self._run(
            "update_progress",
            lambda: self._provider.update_progress(goal_id, amount),
            self._merge,
        )

    async def delete_goal(self, goal_id: str) -> None:
        await self._run(
            "delete_goal",
            lambda: self._provider.delete(goal_id),
            lambda _: self._remove(goal_id),
        )
