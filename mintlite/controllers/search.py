"""
Debounced Search Pipeline

Raw query text arrives on every keystroke. Only the value still present
after a quiet window triggers a downstream query:

    "a" -> "ap" -> "app" -> (500ms quiet) -> query("app")

Rules:
- Intermediate values are discarded, never queued
- The debounced value is whitespace-trimmed
- The same value twice in a row is emitted once, unless the consumer
  reports that the first run failed (`forget`)
- An empty value is still emitted; the consumer treats it as "show all"

DESIGN DECISION: The timer task only sleeps. When it fires it hands the
query to a separate task, so a keystroke that cancels the timer can never
cancel a downstream query already in flight. Stale downstream results are
the consumer's problem (see BaseController's list sequence).
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5


class DebouncedSearch:
    """
    Coalesces rapid query changes into single downstream calls.

    Usage:
        search = DebouncedSearch(controller.run_query, delay_seconds=0.5)
        search.submit("a")
        search.submit("app")   # only "app" is queried, 500ms later
    """

    def __init__(
        self,
        on_query: Callable[[str], Awaitable[Any]],
        delay_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        initial_query: str = "",
    ):
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {delay_seconds}")
        self._on_query = on_query
        self._delay = delay_seconds
        self._timer: Optional[asyncio.Task] = None
        self._queries: set[asyncio.Task] = set()
        self._pending: Optional[str] = None
        self._last_emitted: Optional[str] = initial_query.strip()

    @property
    def delay_seconds(self) -> float:
        return self._delay

    @property
    def pending_query(self) -> Optional[str]:
        """Raw text waiting for the quiet window, if any."""
        return self._pending

    @property
    def last_emitted(self) -> Optional[str]:
        """Value the consumer is showing; None after `forget`."""
        return self._last_emitted

    @property
    def is_idle(self) -> bool:
        return self._timer is None and not self._queries

    def submit(self, raw_query: str) -> None:
        """Record a new raw value and restart the quiet window."""
        self._pending = raw_query
        if self._timer is not None:
            self._timer.cancel()
        self._timer = asyncio.ensure_future(self._fire_after_quiet(raw_query))

    async def _fire_after_quiet(self, raw_query: str) -> None:
        await asyncio.sleep(self._delay)
        self._timer = None
        self._pending = None

        query = raw_query.strip()
        if query == self._last_emitted:
            logger.debug("search_duplicate_skipped", query=query)
            return
        self._last_emitted = query

        task = asyncio.ensure_future(self._on_query(query))
        self._queries.add(task)
        task.add_done_callback(self._queries.discard)

    def reset(self, last_emitted: str = "") -> None:
        """
        Forget the pending value and set what counts as already shown.

        Used when the consumer changes its list without going through the
        pipeline (e.g. an explicit refresh).
        """
        self.cancel()
        self._last_emitted = last_emitted.strip()

    def forget(self, query: str) -> None:
        """
        Stop treating `query` as already shown, so submitting it again runs it.

        Called by the consumer when the downstream call for `query` failed.
        A pending value is left alone.
        """
        if self._last_emitted == query.strip():
            self._last_emitted = None

    def cancel(self) -> None:
        """Drop the pending value. In-flight downstream queries keep running."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = None

    async def wait_until_idle(self) -> None:
        """Wait for the quiet window and any downstream queries to finish."""
        while not self.is_idle:
            pending = list(self._queries)
            if self._timer is not None:
                pending.append(self._timer)
            await asyncio.gather(*pending, return_exceptions=True)
