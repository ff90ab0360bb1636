"""
Transaction Controller

Lists transactions (optionally for one account) with a debounced search
box. `set_search_query` feeds the pipeline; the debounced value runs
`search` or, when empty, the unfiltered fetch.
"""

from typing import Optional

from mintlite.audit.logger import AuditLogger
from mintlite.controllers.base import BaseController, Binding
from mintlite.controllers.search import DEFAULT_DEBOUNCE_SECONDS, DebouncedSearch
from mintlite.models.finance import Transaction
from mintlite.providers.transactions import DEFAULT_ACCOUNT_ID, TransactionProvider


class TransactionController(BaseController[Transaction]):

    def __init__(
        self,
        provider: TransactionProvider,
        account_id: Optional[str] = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(audit_logger)
        self._provider = provider
        self._account_id = account_id
        self._query = ""
        self._search = DebouncedSearch(self._run_debounced, delay_seconds=debounce_seconds)

    @property
    def account_id(self) -> Optional[str]:
        return self._account_id

    @property
    def search_query(self) -> str:
        """Query behind the list currently shown ("" = unfiltered)."""
        return self._query

    @property
    def search_pipeline(self) -> DebouncedSearch:
        return self._search

    def _bindings(self) -> list[Binding]:
        return [(self._provider.mutations, self._on_mutation)]

    async def _load(self) -> None:
        await self.fetch_transactions()

    def _on_cleanup(self) -> None:
        self._search.reset()
        self._query = ""

    def _accepts(self, entity: Transaction) -> bool:
        if self._account_id is not None and entity.account_id != self._account_id:
            return False
        return not self._query or entity.matches(self._query)

    # =========================================================================
    # Listing & search
    # =========================================================================

    async def fetch_transactions(self) -> Optional[list[Transaction]]:
        """Unfiltered list; supersedes any search in flight."""
        self._search.reset()
        return await self._list("", "fetch_transactions")

    async def search(self, query: str) -> Optional[list[Transaction]]:
        """Run a search right away, bypassing the debounce window."""
        query = query.strip()
        self._search.reset(query)
        if not query:
            return await self._list("", "fetch_transactions")
        return await self._list(query, "search")

    def set_search_query(self, raw_query: str) -> None:
        """Keystroke input; only the value left after the quiet window runs."""
        self._search.submit(raw_query)

    async def _run_debounced(self, query: str) -> Optional[list[Transaction]]:
        if self._audit:
            self._audit.log_search_issued(self.name, query, self._correlation_id)
        if not query:
            return await self._list("", "fetch_transactions")
        return await self._list(query, "search")

    async def _list(self, query: str, operation: str) -> Optional[list[Transaction]]:
        sequence = self._next_list_request()

        async def call() -> list[Transaction]:
            if query:
                return await self._provider.search(query, account_id=self._account_id)
            return await self._provider.fetch_all(account_id=self._account_id)

        def apply(transactions: list[Transaction]) -> None:
            self._query = query
            self._replace_items(transactions)

        result = await self._run(operation, call, apply, sequence=sequence)
        if result is None and sequence == self._list_sequence and self._error_message:
            # Retyping a failed query must run it again
            self._search.forget(query)
        return result

    # =========================================================================
    # Edits
    # =========================================================================

    async def categorize(self, transaction_id: str, category: str) -> Optional[Transaction]:
        return await self._run(
            "categorize",
            lambda: self._provider.categorize(transaction_id, category),
            self._merge,
        )

    async def add_note(self, transaction_id: str, note: Optional[str]) -> Optional[Transaction]:
        return await self._run(
            "add_note",
            lambda: self._provider.add_note(transaction_id, note),
            self._merge,
        )

    async def import_transactions(
        self,
        count: int = 10,
        account_id: Optional[str] = None,
    ) -> Optional[list[Transaction]]:
        target = account_id or self._account_id or DEFAULT_ACCOUNT_ID

        def apply(transactions: list[Transaction]) -> None:
            for transaction in transactions:
                self._merge(transaction)

        return await self._run(
            "import_transactions",
            lambda: self._provider.import_transactions(target, count),
            apply,
        )

    async def delete_transaction(self, transaction_id: str) -> None:
        await self._run(
            "delete_transaction",
            lambda: self._provider.delete(transaction_id),
            lambda _: self._remove(transaction_id),
        )
