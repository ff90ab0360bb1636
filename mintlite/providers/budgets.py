"""
Budget Provider

Budget windows are derived from the period at creation time:
- monthly: the calendar month containing the start date
- weekly: Monday 00:00 through Sunday 23:59:59 of that week
- custom: explicit start and end dates

Expired budgets are removed by `purge_expired`, which publishes DELETED for
each one like any other delete.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union

from mintlite.errors import ValidationCode, ValidationError
from mintlite.models.finance import Budget, BudgetPeriod
from mintlite.providers.base import SimulatedProvider
from mintlite.providers.channel import MutationKind
from mintlite.providers.fixtures import MockDataGenerator
from mintlite.utils.dates import period_bounds, utc_now


class BudgetProvider(SimulatedProvider[Budget]):
    entity_class = Budget

    def __init__(
        self,
        *args: Any,
        initial_budgets: Optional[list[Budget]] = None,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        if initial_budgets is None:
            initial_budgets = [MockDataGenerator(rng=self._rng).budget()]
        for budget in initial_budgets:
            self._items[budget.id] = budget

    async def create_budget(
        self,
        name: str,
        amount: Decimal,
        category: str,
        period: Union[BudgetPeriod, str],
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Budget:
        """
        Create an active budget with nothing spent.

        Raises:
            ValidationError: invalid fields, or a custom period whose end is
                missing or not after its start
        """
        await self._simulate_network("create_budget")
        try:
            period = BudgetPeriod(period)
        except ValueError:
            raise self._failed(
                "create_budget",
                ValidationError(
                    ValidationCode.FIELD_INVALID,
                    f"Unknown budget period: {period!r}",
                    field="period",
                ),
            ) from None

        bounds = period_bounds(period.value, start_date or utc_now(), end_date)
        if bounds is None:
            raise self._failed(
                "create_budget",
                ValidationError(
                    ValidationCode.DATE_INVALID,
                    "Custom budgets need an end date after the start date",
                    field="end_date",
                ),
            )

        budget = self._build(
            "create_budget",
            id=self._new_id(),
            name=name,
            amount=amount,
            category=category,
            period=period,
            start_date=bounds[0],
            end_date=bounds[1],
            spent=Decimal("0"),
            is_active=True,
        )
        return self._commit(MutationKind.CREATED, budget)

    async def create(self, fields: dict[str, Any]) -> Budget:
        return await self.create_budget(**fields)

    async def record_spending(self, budget_id: str, spent: Decimal) -> Budget:
        await self._simulate_network("record_spending")
        budget = self._require(budget_id, "record_spending")
        try:
            updated = budget.with_spending(spent)
        except ValidationError as e:
            raise self._failed("record_spending", e, entity_id=budget_id)
        return self._commit(MutationKind.UPDATED, updated)

    async def purge_expired(self, as_of: Optional[datetime] = None) -> list[Budget]:
        """Delete every budget whose window ended before `as_of`."""
        await self._simulate_network("purge_expired")
        cutoff = as_of or utc_now()
        expired = [b for b in self._items.values() if b.is_expired(cutoff)]
        for budget in expired:
            self._commit(MutationKind.DELETED, budget)
        return expired
