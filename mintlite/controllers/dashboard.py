"""
Dashboard Controller

Combines two channels: accounts (the main list) and transactions (a short
newest-first "recent activity" list). The two channels are independent;
the dashboard makes no assumption about their relative ordering.
"""

import asyncio
from decimal import Decimal
from typing import Optional

from mintlite.audit.logger import AuditLogger
from mintlite.controllers.base import BaseController, Binding
from mintlite.models.finance import Account, Transaction
from mintlite.providers.accounts import AccountProvider
from mintlite.providers.channel import Mutation, MutationKind
from mintlite.providers.transactions import TransactionProvider
from mintlite.utils.formatting import format_currency

DEFAULT_RECENT_LIMIT = 5


class DashboardController(BaseController[Account]):

    def __init__(
        self,
        account_provider: AccountProvider,
        transaction_provider: TransactionProvider,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(audit_logger)
        self._accounts = account_provider
        self._transactions = transaction_provider
        self._recent_limit = recent_limit
        self._recent: list[Transaction] = []

    def _bindings(self) -> list[Binding]:
        return [
            (self._accounts.mutations, self._on_mutation),
            (self._transactions.mutations, self._on_transaction_mutation),
        ]

    async def _load(self) -> None:
        await self.refresh()

    def _on_cleanup(self) -> None:
        self._recent = []

    @property
    def recent_transactions(self) -> list[Transaction]:
        return list(self._recent)

    @property
    def total_balance(self) -> Decimal:
        return sum((a.balance for a in self._items if a.is_active), Decimal("0"))

    def formatted_total_balance(self) -> str:
        return format_currency(self.total_balance)

    async def refresh(self) -> Optional[tuple[list[Account], list[Transaction]]]:
        """Reload accounts and recent activity together; all or nothing."""

        async def call() -> tuple[list[Account], list[Transaction]]:
            accounts, transactions = await asyncio.gather(
                self._accounts.fetch_all(),
                self._transactions.fetch_all(),
            )
            return accounts, transactions

        def apply(result: tuple[list[Account], list[Transaction]]) -> None:
            accounts, transactions = result
            self._replace_items(accounts)
            self._set_recent(transactions)

        return await self._run(
            "refresh_dashboard",
            call,
            apply,
            sequence=self._next_list_request(),
        )

    def _set_recent(self, transactions: list[Transaction]) -> None:
        newest = sorted(transactions, key=lambda t: t.date, reverse=True)
        self._recent = newest[: self._recent_limit]

    def _on_transaction_mutation(self, mutation: Mutation) -> None:
        entity = mutation.entity
        remaining = [t for t in self._recent if t.id != entity.id]
        if mutation.kind == MutationKind.DELETED:
            self._recent = remaining
        else:
            self._set_recent(remaining + [entity])
        self._emit()
