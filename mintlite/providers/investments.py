"""
Investment Provider

Holds the portfolio and simulates market movement. A price refresh is a
bounded random walk applied per holding; each repriced holding is committed
and published as its own UPDATED mutation.
"""

from decimal import Decimal
from typing import Any, Optional, Union

from mintlite.models.finance import AssetClass, Investment
from mintlite.providers.base import SimulatedProvider
from mintlite.providers.channel import MutationKind
from mintlite.providers.fixtures import MockDataGenerator

# Largest fractional price move per refresh
PRICE_DRIFT = 0.03


class InvestmentProvider(SimulatedProvider[Investment]):
    entity_class = Investment

    def __init__(
        self,
        *args: Any,
        initial_investments: Optional[list[Investment]] = None,
        price_drift: float = PRICE_DRIFT,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self._price_drift = price_drift
        if initial_investments is None:
            initial_investments = MockDataGenerator(rng=self._rng).investments()
        for investment in initial_investments:
            self._items[investment.id] = investment

    async def add_holding(
        self,
        account_id: str,
        symbol: str,
        name: str,
        quantity: Decimal,
        cost_basis: Decimal,
        current_price: Optional[Decimal] = None,
        asset_class: Union[AssetClass, str] = AssetClass.STOCKS,
    ) -> Investment:
        await self._simulate_network("add_holding")
        investment = self._build(
            "add_holding",
            id=self._new_id(),
            account_id=account_id,
            symbol=symbol,
            name=name,
            quantity=quantity,
            cost_basis=cost_basis,
            current_price=cost_basis if current_price is None else current_price,
            asset_class=asset_class,
        )
        return self._commit(MutationKind.CREATED, investment)

    async def create(self, fields: dict[str, Any]) -> Investment:
        return await self.add_holding(**fields)

    async def refresh_prices(self) -> list[Investment]:
        """Reprice every holding; returns the new portfolio."""
        await self._simulate_network("refresh_prices")
        return [
            self._commit(MutationKind.UPDATED, self._reprice(investment))
            for investment in list(self._items.values())
        ]

    async def refresh_investment(self, investment_id: str) -> Investment:
        await self._simulate_network("refresh_investment")
        investment = self._require(investment_id, "refresh_investment")
        return self._commit(MutationKind.UPDATED, self._reprice(investment))

    def _reprice(self, investment: Investment) -> Investment:
        move = Decimal(str(round(self._rng.uniform(-self._price_drift, self._price_drift), 4)))
        price = (investment.current_price * (1 + move)).quantize(Decimal("0.01"))
        return investment.with_price(max(price, Decimal("0")))
