"""Budget Controller"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from mintlite.audit.logger import AuditLogger
from mintlite.controllers.base import BaseController, Binding
from mintlite.models.finance import Budget, BudgetPeriod
from mintlite.providers.budgets import BudgetProvider


class BudgetController(BaseController[Budget]):

    def __init__(
        self,
        provider: BudgetProvider,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(audit_logger)
        self._provider = provider

    def _bindings(self) -> list[Binding]:
        return [(self._provider.mutations, self._on_mutation)]

    async def _load(self) -> None:
        await self.fetch_budgets()

    @property
    def active_budgets(self) -> list[Budget]:
        return [b for b in self._items if b.is_active]

    @property
    def over_budget(self) -> list[Budget]:
        return [b for b in self.active_budgets if b.is_over_budget()]

    @property
    def total_budgeted(self) -> Decimal:
        return sum((b.amount for b in self.active_budgets), Decimal("0"))

    @property
    def total_spent(self) -> Decimal:
        return sum((b.spent for b in self.active_budgets), Decimal("0"))

    async def fetch_budgets(self) -> Optional[list[Budget]]:
        return await self._run(
            "fetch_budgets",
            self._provider.fetch_all,
            self._replace_items,
            sequence=self._next_list_request(),
        )

    async def create_budget(
        self,
        name: str,
        amount: Decimal,
        category: str,
        period: Union[BudgetPeriod, str],
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Optional[Budget]:
        return await self._run(
            "create_budget",
            lambda: self._provider.create_budget(
                name, amount, category, period, start_date, end_date
            ),
            self._merge,
        )

    async def update_budget(self, budget: Budget) -> Optional[Budget]:
        return await self._run(
            "update_budget",
            lambda: self._provider.update(budget),
            self._merge,
        )

    async def record_spending(self, budget_id: str, spent: Decimal) -> Optional[Budget]:
        return await self._run(
            "record_spending",
            lambda: self._provider.record_spending(budget_id, spent),
            self._merge,
        )

    async def delete_budget(self, budget_id: str) -> None:
        await self._run(
            "delete_budget",
            lambda: self._provider.delete(budget_id),
            lambda _: self._remove(budget_id),
        )

    async def purge_expired(self, as_of: Optional[datetime] = None) -> Optional[list[Budget]]:
        def apply(expired: list[Budget]) -> None:
            for budget in expired:
                self._remove(budget.id)

        return await self._run(
            "purge_expired",
            lambda: self._provider.purge_expired(as_of),
            apply,
        )
