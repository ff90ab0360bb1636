"""
Tests for debounced search

Covers the pipeline on its own and wired into TransactionController,
including suppression of out-of-order search results.
"""

import asyncio
import pytest

from mintlite.controllers import DebouncedSearch, TransactionController
from mintlite.models import AuditEventType
from mintlite.providers import TransactionProvider

from tests.conftest import ScriptedLatency

DELAY = 0.02


class RecordingTransactionProvider(TransactionProvider):
    """Remembers every search and unfiltered fetch it serves."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = []

    async def fetch_all(self, account_id=None):
        self.calls.append(("fetch_all", None))
        return await super().fetch_all(account_id)

    async def search(self, query, account_id=None):
        self.calls.append(("search", query))
        return await super().search(query, account_id)

    @property
    def searches(self):
        return [query for kind, query in self.calls if kind == "search"]


def recorder():
    queries = []

    async def on_query(query):
        queries.append(query)

    return queries, on_query


class TestDebouncedSearch:
    """Tests for the pipeline in isolation."""

    @pytest.mark.asyncio
    async def test_rapid_input_emits_last_value_once(self):
        queries, on_query = recorder()
        search = DebouncedSearch(on_query, delay_seconds=DELAY)

        for text in ("a", "ap", "app"):
            search.submit(text)
        assert search.pending_query == "app"
        await search.wait_until_idle()

        assert queries == ["app"]
        assert search.last_emitted == "app"
        assert search.is_idle

    @pytest.mark.asyncio
    async def test_value_is_trimmed(self):
        queries, on_query = recorder()
        search = DebouncedSearch(on_query, delay_seconds=DELAY)
        search.submit("  coffee  ")
        await search.wait_until_idle()
        assert queries == ["coffee"]

    @pytest.mark.asyncio
    async def test_repeated_value_is_emitted_once(self):
        queries, on_query = recorder()
        search = DebouncedSearch(on_query, delay_seconds=DELAY)

        search.submit("app")
        await search.wait_until_idle()
        search.submit("app ")
        await search.wait_until_idle()

        assert queries == ["app"]

    @pytest.mark.asyncio
    async def test_empty_value_is_emitted_after_a_query(self):
        queries, on_query = recorder()
        search = DebouncedSearch(on_query, delay_seconds=DELAY)

        search.submit("app")
        await search.wait_until_idle()
        search.submit("   ")
        await search.wait_until_idle()

        assert queries == ["app", ""]

    @pytest.mark.asyncio
    async def test_initial_empty_value_is_not_emitted(self):
        queries, on_query = recorder()
        search = DebouncedSearch(on_query, delay_seconds=DELAY)
        search.submit("")
        await search.wait_until_idle()
        assert queries == []

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_value(self):
        queries, on_query = recorder()
        search = DebouncedSearch(on_query, delay_seconds=DELAY)

        search.submit("app")
        search.cancel()
        await asyncio.sleep(DELAY * 3)

        assert queries == []
        assert search.pending_query is None
        assert search.is_idle

    @pytest.mark.asyncio
    async def test_new_input_does_not_cancel_query_in_flight(self):
        finished = []

        async def slow_query(query):
            await asyncio.sleep(DELAY * 2)
            finished.append(query)

        search = DebouncedSearch(slow_query, delay_seconds=DELAY)
        search.submit("a")
        await asyncio.sleep(DELAY * 1.5)
        search.submit("b")
        await search.wait_until_idle()

        assert finished == ["a", "b"]

    @pytest.mark.asyncio
    async def test_reset_sets_last_emitted(self):
        queries, on_query = recorder()
        search = DebouncedSearch(on_query, delay_seconds=DELAY)
        search.reset("app")
        search.submit("app")
        await search.wait_until_idle()
        assert queries == []

    @pytest.mark.asyncio
    async def test_forgotten_value_runs_again(self):
        queries, on_query = recorder()
        search = DebouncedSearch(on_query, delay_seconds=DELAY)
        search.submit("app")
        await search.wait_until_idle()

        search.forget("app")
        search.submit("app")
        await search.wait_until_idle()

        assert queries == ["app", "app"]

    @pytest.mark.asyncio
    async def test_forget_keeps_pending_value(self):
        queries, on_query = recorder()
        search = DebouncedSearch(on_query, delay_seconds=DELAY)
        search.reset("app")
        search.submit("apple")

        search.forget("app")
        assert search.pending_query == "apple"
        await search.wait_until_idle()

        assert queries == ["apple"]

    def test_forget_other_value_is_ignored(self):
        _, on_query = recorder()
        search = DebouncedSearch(on_query, delay_seconds=DELAY)
        search.reset("app")
        search.forget("apple")
        assert search.last_emitted == "app"

    def test_negative_delay(self):
        _, on_query = recorder()
        with pytest.raises(ValueError):
            DebouncedSearch(on_query, delay_seconds=-1)


class TestTransactionSearch:
    """Tests for search wired into the transaction list."""

    @pytest.mark.asyncio
    async def test_typing_issues_one_search(self, sample_transactions, audit_logger):
        provider = RecordingTransactionProvider(initial_transactions=sample_transactions)
        controller = TransactionController(
            provider, debounce_seconds=DELAY, audit_logger=audit_logger
        )
        await controller.initialize()

        for text in ("a", "ap", "app"):
            controller.set_search_query(text)
        await controller.search_pipeline.wait_until_idle()

        assert provider.searches == ["app"]
        assert [t.id for t in controller.items] == ["t3"]
        assert controller.search_query == "app"
        assert len(audit_logger.events_of_type(AuditEventType.SEARCH_ISSUED)) == 1

    @pytest.mark.asyncio
    async def test_clearing_query_restores_full_list(self, sample_transactions):
        provider = RecordingTransactionProvider(initial_transactions=sample_transactions)
        controller = TransactionController(provider, debounce_seconds=DELAY)
        await controller.initialize()
        controller.set_search_query("amazon")
        await controller.search_pipeline.wait_until_idle()

        controller.set_search_query("")
        await controller.search_pipeline.wait_until_idle()

        assert controller.search_query == ""
        assert len(controller.items) == 4
        assert provider.calls[-1] == ("fetch_all", None)

    @pytest.mark.asyncio
    async def test_older_search_result_is_dropped(self, sample_transactions, audit_logger):
        # initial load, then a slow "star" and a fast "amazon"
        provider = TransactionProvider(
            initial_transactions=sample_transactions,
            latency=ScriptedLatency([0.0, 0.1, 0.01]),
        )
        controller = TransactionController(provider, audit_logger=audit_logger)
        await controller.initialize()

        slow = asyncio.create_task(controller.search("star"))
        fast = asyncio.create_task(controller.search("amazon"))
        slow_result, fast_result = await asyncio.gather(slow, fast)

        assert slow_result is None
        assert [t.id for t in fast_result] == ["t2"]
        assert [t.id for t in controller.items] == ["t2"]
        assert controller.search_query == "amazon"
        assert not controller.is_loading
        assert audit_logger.events_of_type(AuditEventType.STALE_RESULT_DROPPED)

    @pytest.mark.asyncio
    async def test_debounced_results_arrive_in_issue_order(self, sample_transactions):
        provider = TransactionProvider(
            initial_transactions=sample_transactions,
            latency=ScriptedLatency([0.0, 0.1, 0.01]),
        )
        controller = TransactionController(provider, debounce_seconds=DELAY)
        await controller.initialize()

        controller.set_search_query("star")
        await asyncio.sleep(DELAY * 2)
        controller.set_search_query("amazon")
        await controller.search_pipeline.wait_until_idle()

        assert controller.search_query == "amazon"
        assert [t.id for t in controller.items] == ["t2"]

    @pytest.mark.asyncio
    async def test_cleanup_cancels_pending_search(self, sample_transactions):
        provider = RecordingTransactionProvider(initial_transactions=sample_transactions)
        controller = TransactionController(provider, debounce_seconds=DELAY)
        await controller.initialize()

        controller.set_search_query("app")
        controller.cleanup()
        await asyncio.sleep(DELAY * 3)

        assert provider.searches == []
        assert controller.items == []


    @pytest.mark.asyncio
    async def test_failed_query_can_be_retyped(self, sample_transactions):
        provider = RecordingTransactionProvider(initial_transactions=sample_transactions)
        controller = TransactionController(provider, debounce_seconds=DELAY)
        await controller.initialize()

        provider.failure_probability = 1.0
        controller.set_search_query("apple")
        await controller.search_pipeline.wait_until_idle()
        assert controller.error_message is not None

        provider.failure_probability = 0.0
        controller.set_search_query("appl")
        controller.set_search_query("apple")
        await controller.search_pipeline.wait_until_idle()

        assert provider.searches == ["apple", "apple"]
        assert controller.error_message is None
        assert controller.search_query == "apple"
        assert [t.id for t in controller.items] == ["t3"]

    @pytest.mark.asyncio
    async def test_failed_explicit_search_can_be_retyped(self, sample_transactions):
        provider = RecordingTransactionProvider(initial_transactions=sample_transactions)
        controller = TransactionController(provider, debounce_seconds=DELAY)
        await controller.initialize()

        provider.failure_probability = 1.0
        await controller.search("amazon")
        provider.failure_probability = 0.0
        controller.set_search_query("amazon")
        await controller.search_pipeline.wait_until_idle()

        assert provider.searches == ["amazon", "amazon"]
        assert [t.id for t in controller.items] == ["t2"]
    @pytest.mark.asyncio
    async def test_explicit_refresh_supersedes_pending_query(self, sample_transactions):
        provider = RecordingTransactionProvider(initial_transactions=sample_transactions)
        controller = TransactionController(provider, debounce_seconds=DELAY)
        await controller.initialize()

        controller.set_search_query("app")
        await controller.fetch_transactions()
        await asyncio.sleep(DELAY * 3)

        assert provider.searches == []
        assert len(controller.items) == 4


class TestTransactionController:
    """Tests for transaction edits and list filtering."""

    @pytest.mark.asyncio
    async def test_account_scope(self, sample_transactions):
        provider = TransactionProvider(initial_transactions=sample_transactions, seed=1)
        controller = TransactionController(provider, account_id="ACC2")
        await controller.initialize()
        assert [t.id for t in controller.items] == ["t4"]

        await provider.import_transactions("ACC1", count=2)

        assert [t.id for t in controller.items] == ["t4"]

    @pytest.mark.asyncio
    async def test_import_into_own_account(self, sample_transactions):
        provider = TransactionProvider(initial_transactions=sample_transactions, seed=1)
        controller = TransactionController(provider, account_id="ACC2")
        await controller.initialize()

        imported = await controller.import_transactions(count=2)

        assert len(imported) == 2
        assert all(t.account_id == "ACC2" for t in imported)
        assert len(controller.items) == 3

    @pytest.mark.asyncio
    async def test_active_query_filters_channel_inserts(self, sample_transactions):
        provider = TransactionProvider(initial_transactions=sample_transactions)
        controller = TransactionController(provider)
        await controller.initialize()
        await controller.search("amazon")

        await provider.categorize("t1", "Coffee")

        assert [t.id for t in controller.items] == ["t2"]

    @pytest.mark.asyncio
    async def test_categorize_in_place(self, sample_transactions):
        provider = TransactionProvider(initial_transactions=sample_transactions)
        controller = TransactionController(provider)
        await controller.initialize()

        await controller.categorize("t2", "Electronics")
        await controller.add_note("t2", "birthday gift")

        assert [t.id for t in controller.items] == ["t1", "t2", "t3", "t4"]
        assert controller.get("t2").category == "Electronics"
        assert controller.get("t2").notes == "birthday gift"

    @pytest.mark.asyncio
    async def test_delete_transaction(self, sample_transactions):
        provider = TransactionProvider(initial_transactions=sample_transactions)
        controller = TransactionController(provider)
        await controller.initialize()
        await controller.delete_transaction("t1")
        assert controller.get("t1") is None
        assert controller.error_message is None
