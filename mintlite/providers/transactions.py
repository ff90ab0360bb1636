"""
Transaction Provider

Transactions are seeded once and then filtered, never regenerated on
fetch, so ids stay stable across calls and an update published on the
channel always refers to a transaction a controller has already seen.
"""

from typing import Any, Optional

from mintlite.errors import ValidationCode, ValidationError
from mintlite.models.finance import Transaction
from mintlite.providers.base import SimulatedProvider
from mintlite.providers.channel import MutationKind
from mintlite.providers.fixtures import MockDataGenerator

DEFAULT_ACCOUNT_ID = "default"


class TransactionProvider(SimulatedProvider[Transaction]):
    entity_class = Transaction

    def __init__(
        self,
        *args: Any,
        initial_transactions: Optional[list[Transaction]] = None,
        seed_count: int = 20,
        seed_account_id: str = DEFAULT_ACCOUNT_ID,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self._generator = MockDataGenerator(rng=self._rng)
        if initial_transactions is None:
            initial_transactions = self._generator.transactions(seed_count, seed_account_id)
        for transaction in initial_transactions:
            self._items[transaction.id] = transaction

    async def fetch_all(self, account_id: Optional[str] = None) -> list[Transaction]:
        """All transactions, or only those of one account."""
        transactions = await super().fetch_all()
        if account_id is None:
            return transactions
        return [t for t in transactions if t.account_id == account_id]

    async def search(self, query: str, account_id: Optional[str] = None) -> list[Transaction]:
        """
        Case-insensitive substring match on description or merchant name.

        A blank query matches everything.
        """
        await self._simulate_network("search")
        needle = query.strip()
        return [
            t for t in self._items.values()
            if (account_id is None or t.account_id == account_id)
            and (not needle or t.matches(needle))
        ]

    async def categorize(self, transaction_id: str, category: str) -> Transaction:
        await self._simulate_network("categorize")
        transaction = self._require(transaction_id, "categorize")
        updated = self._revise("categorize", transaction, category=category)
        return self._commit(MutationKind.UPDATED, updated)

    async def add_note(self, transaction_id: str, note: Optional[str]) -> Transaction:
        await self._simulate_network("add_note")
        transaction = self._require(transaction_id, "add_note")
        updated = self._revise("add_note", transaction, notes=note)
        return self._commit(MutationKind.UPDATED, updated)

    async def import_transactions(self, account_id: str, count: int = 10) -> list[Transaction]:
        """
        Pull `count` new transactions for an account.

        Each one is committed and published as CREATED, newest first.
        """
        await self._simulate_network("import_transactions")
        imported = self._generator.transactions(count, account_id)
        for transaction in imported:
            self._commit(MutationKind.CREATED, transaction)
        return imported

    async def update(self, entity: Transaction) -> Transaction:
        """
        Store a new category or notes for an existing transaction.

        Amount and date are fixed once posted; changing them is rejected.
        """
        await self._simulate_network("update")
        current = self._require(entity.id, "update")
        updated = self._revise(
            "update",
            current,
            category=entity.category,
            notes=entity.notes,
            amount=entity.amount,
            date=entity.date,
        )
        return self._commit(MutationKind.UPDATED, updated)

    def _revise(self, operation: str, current: Transaction, **changes: Any) -> Transaction:
        for field in ("amount", "date"):
            if field in changes and changes.pop(field) != getattr(current, field):
                raise self._failed(
                    operation,
                    ValidationError(
                        ValidationCode.FIELD_INVALID,
                        f"Transaction {field} cannot be changed",
                        field=field,
                    ),
                    entity_id=current.id,
                )
        try:
            return current.replace(**changes)
        except ValidationError as e:
            raise self._failed(operation, e, entity_id=current.id)
