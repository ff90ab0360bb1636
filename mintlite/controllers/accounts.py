"""Account Controller"""

from collections import defaultdict
from decimal import Decimal
from typing import Optional

from mintlite.audit.logger import AuditLogger
from mintlite.controllers.base import BaseController, Binding
from mintlite.models.finance import Account, AccountType
from mintlite.providers.accounts import AccountProvider
from mintlite.utils.formatting import format_currency


class AccountController(BaseController[Account]):
    """Linked accounts, including deactivated ones (flagged, not removed)."""

    def __init__(
        self,
        provider: AccountProvider,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(audit_logger)
        self._provider = provider

    def _bindings(self) -> list[Binding]:
        return [(self._provider.mutations, self._on_mutation)]

    async def _load(self) -> None:
        await self.fetch_accounts()

    # =========================================================================
    # Derived values
    # =========================================================================

    @property
    def active_accounts(self) -> list[Account]:
        return [a for a in self._items if a.is_active]

    @property
    def total_balance(self) -> Decimal:
        """Net balance over active accounts (credit balances subtract)."""
        return sum((a.balance for a in self.active_accounts), Decimal("0"))

    def formatted_total_balance(self) -> str:
        return format_currency(self.total_balance)

    def accounts_by_type(self) -> dict[AccountType, list[Account]]:
        grouped: dict[AccountType, list[Account]] = defaultdict(list)
        for account in self.active_accounts:
            grouped[account.account_type].append(account)
        return dict(grouped)

    # =========================================================================
    # Operations
    # =========================================================================

    async def fetch_accounts(self) -> Optional[list[Account]]:
        return await self._run(
            "fetch_accounts",
            self._provider.fetch_all,
            self._replace_items,
            sequence=self._next_list_request(),
        )

    async def link_account(
        self,
        institution_id: str,
        account_type: AccountType,
        balance: Optional[Decimal] = None,
    ) -> Optional[Account]:
        return await self._run(
            "link_account",
            lambda: self._provider.link_account(institution_id, account_type, balance),
            self._merge,
        )

    async def update_balance(self, account_id: str, balance: Decimal) -> Optional[Account]:
        return await self._run(
            "update_balance",
            lambda: self._provider.update_balance(account_id, balance),
            self._merge,
        )

    async def refresh_account(self, account_id: str) -> Optional[Account]:
        return await self._run(
            "refresh_account",
            lambda: self._provider.refresh_account(account_id),
            self._merge,
        )

    async def unlink_account(self, account_id: str) -> Optional[Account]:
        return await self._run(
            "unlink_account",
            lambda: self._provider.unlink_account(account_id),
            self._merge,
        )
