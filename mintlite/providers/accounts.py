"""
Account Provider

Linked accounts are never removed from the collection. Unlinking (and the
generic `delete`) deactivates the account and publishes UPDATED, so every
subscriber sees the account flip to inactive rather than disappear.
"""

from decimal import Decimal
from typing import Any, Optional

from mintlite.errors import ValidationError
from mintlite.models.finance import Account, AccountType
from mintlite.providers.base import SimulatedProvider
from mintlite.providers.channel import MutationKind
from mintlite.providers.fixtures import MockDataGenerator, money

# Refresh moves the balance by up to +/-5%
BALANCE_DRIFT = 0.05


class AccountProvider(SimulatedProvider[Account]):
    entity_class = Account

    def __init__(
        self,
        *args: Any,
        initial_accounts: Optional[list[Account]] = None,
        seed_count: int = 5,
        default_currency: str = "USD",
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self._default_currency = default_currency
        if initial_accounts is None:
            initial_accounts = MockDataGenerator(rng=self._rng).accounts(seed_count)
        for account in initial_accounts:
            self._items[account.id] = account

    async def get_account(self, account_id: str) -> Account:
        return await self.get(account_id)

    async def link_account(
        self,
        institution_id: str,
        account_type: AccountType,
        balance: Optional[Decimal] = None,
    ) -> Account:
        """Link a new institution account; balance is simulated if omitted."""
        await self._simulate_network("link_account")
        if balance is None:
            if account_type == AccountType.CREDIT:
                balance = money(self._rng.uniform(-5000, 0))
            else:
                balance = money(self._rng.uniform(1000, 50000))
        account = self._build(
            "link_account",
            id=self._new_id(),
            institution_id=institution_id,
            account_type=account_type,
            balance=balance,
            currency=self._default_currency,
        )
        return self._commit(MutationKind.CREATED, account)

    async def create(self, fields: dict[str, Any]) -> Account:
        data = dict(fields)
        data.setdefault("currency", self._default_currency)
        return await super().create(data)

    async def update_balance(self, account_id: str, balance: Decimal) -> Account:
        """
        Set a new balance and refresh the sync timestamp.

        Raises:
            NotFoundError: unknown account
            ValidationError: negative balance on a non-credit account
        """
        await self._simulate_network("update_balance")
        account = self._require(account_id, "update_balance")
        updated = self._apply("update_balance", account, balance)
        return self._commit(MutationKind.UPDATED, updated)

    async def refresh_account(self, account_id: str) -> Account:
        """Re-sync one account; the simulated balance drifts by up to 5%."""
        await self._simulate_network("refresh_account")
        account = self._require(account_id, "refresh_account")
        drift = Decimal(str(round(self._rng.uniform(-BALANCE_DRIFT, BALANCE_DRIFT), 4)))
        new_balance = (account.balance * (1 + drift)).quantize(Decimal("0.01"))
        updated = self._apply("refresh_account", account, new_balance)
        return self._commit(MutationKind.UPDATED, updated)

    async def unlink_account(self, account_id: str) -> Account:
        """Deactivate an account. It stays in the collection."""
        await self._simulate_network("unlink_account")
        account = self._require(account_id, "unlink_account")
        return self._commit(MutationKind.UPDATED, account.deactivate())

    async def delete(self, account_id: str) -> None:
        await self.unlink_account(account_id)

    async def fetch_active(self) -> list[Account]:
        return [a for a in await self.fetch_all() if a.is_active]

    def _apply(self, operation: str, account: Account, balance: Decimal) -> Account:
        try:
            return account.update_balance(balance)
        except ValidationError as e:
            raise self._failed(operation, e, entity_id=account.id)
