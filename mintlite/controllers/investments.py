"""
Investment Controller

Portfolio figures are computed from the holdings currently shown, so they
follow channel updates (price refreshes) without a refetch.
"""

from decimal import Decimal
from typing import Optional, Union

from mintlite.audit.logger import AuditLogger
from mintlite.controllers.base import BaseController, Binding
from mintlite.models.finance import AssetClass, Investment
from mintlite.providers.investments import InvestmentProvider
from mintlite.utils.formatting import format_currency, format_investment_return


class InvestmentController(BaseController[Investment]):

    def __init__(
        self,
        provider: InvestmentProvider,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(audit_logger)
        self._provider = provider

    def _bindings(self) -> list[Binding]:
        return [(self._provider.mutations, self._on_mutation)]

    async def _load(self) -> None:
        await self.fetch_investments()

    # =========================================================================
    # Portfolio figures
    # =========================================================================

    @property
    def portfolio_value(self) -> Decimal:
        return sum((i.get_current_value() for i in self._items), Decimal("0"))

    @property
    def total_cost(self) -> Decimal:
        return sum((i.get_total_cost() for i in self._items), Decimal("0"))

    @property
    def total_return(self) -> Decimal:
        return sum((i.get_return_amount() for i in self._items), Decimal("0"))

    @property
    def return_percentage(self) -> float:
        """Total return as a ratio of total cost; 0.0 with no cost."""
        cost = self.total_cost
        if cost <= 0:
            return 0.0
        return float(self.total_return / cost)

    def asset_allocation(self) -> dict[AssetClass, float]:
        """Share of portfolio value per asset class, in percent."""
        total = self.portfolio_value
        if total <= 0:
            return {}
        allocation: dict[AssetClass, Decimal] = {}
        for investment in self._items:
            allocation[investment.asset_class] = (
                allocation.get(investment.asset_class, Decimal("0"))
                + investment.get_current_value()
            )
        return {
            asset_class: float(value / total) * 100
            for asset_class, value in allocation.items()
        }

    def formatted_portfolio_value(self) -> str:
        return format_currency(self.portfolio_value)

    def formatted_total_return(self) -> str:
        return format_investment_return(self.return_percentage)

    # =========================================================================
    # Operations
    # =========================================================================

    async def fetch_investments(self) -> Optional[list[Investment]]:
        return await self._run(
            "fetch_investments",
            self._provider.fetch_all,
            self._replace_items,
            sequence=self._next_list_request(),
        )

    async def refresh_prices(self) -> Optional[list[Investment]]:
        def apply(investments: list[Investment]) -> None:
            for investment in investments:
                self._merge(investment)

        return await self._run("refresh_prices", self._provider.refresh_prices, apply)

    async def refresh_investment(self, investment_id: str) -> Optional[Investment]:
        return await self._run(
            "refresh_investment",
            lambda: self._provider.refresh_investment(investment_id),
            self._merge,
        )

    async def add_holding(
        self,
        account_id: str,
        symbol: str,
        name: str,
        quantity: Decimal,
        cost_basis: Decimal,
        current_price: Optional[Decimal] = None,
        asset_class: Union[AssetClass, str] = AssetClass.STOCKS,
    ) -> Optional[Investment]:
        return await self._run(
            "add_holding",
            lambda: self._provider.add_holding(
                account_id, symbol, name, quantity, cost_basis, current_price, asset_class
            ),
            self._merge,
        )

    async def remove_holding(self, investment_id: str) -> None:
        await self._run(
            "remove_holding",
            lambda: self._provider.delete(investment_id),
            lambda _: self._remove(investment_id),
        )
