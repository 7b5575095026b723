"""Cursor pagination driver.

Architecture:
    The upstream paginates with an opaque start key. Cursors have been
    observed to repeat or to stop advancing, so the driver is split into:
    - CursorTracker: a pure state machine (FETCHING -> ADVANCING ->
      FETCHING | DONE) with two circuit breakers, testable without I/O
    - CursorPaginator: an async generator that fetches pages through the
      retry wrapper and feeds each returned cursor to the tracker

    The page sequence is finite regardless of upstream behaviour: every
    ADVANCING step either adopts a never-seen cursor, re-requests a stuck
    cursor a bounded number of times, or reaches DONE.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from functools import partial

from ..core.config import AggregatorConfig
from ..core.enums import PaginationState, StopReason
from ..models import PageResult
from ..utils.retry import retry_async

logger = logging.getLogger(__name__)

PageFetcher = Callable[[str | None], Awaitable[PageResult]]


class CursorTracker:
    """State machine deciding whether another page should be requested.

    Attributes:
        state: Current PaginationState
        cursor: Cursor for the next request (None before the first page)
        same_cursor_count: Consecutive pages whose next-cursor equalled the
            cursor used to request them
        stop_reason: Why DONE was reached, None while running
        pages: Pages observed so far
    """

    def __init__(self, start_cursor: str | None = None, *, same_cursor_threshold: int = 3) -> None:
        if same_cursor_threshold < 1:
            raise ValueError("same_cursor_threshold must be >= 1")
        self.state = PaginationState.FETCHING
        self.cursor = start_cursor
        self.same_cursor_count = 0
        self.stop_reason: StopReason | None = None
        self.pages = 0
        self._threshold = same_cursor_threshold
        self._seen: set[str] = {start_cursor} if start_cursor else set()

    @property
    def done(self) -> bool:
        return self.state is PaginationState.DONE

    def advance(self, next_cursor: str | None) -> PaginationState:
        """Transition after a page was received with next_cursor.

        Returns:
            FETCHING when another page should be requested with self.cursor,
            DONE otherwise

        Raises:
            RuntimeError: If called after DONE
        """
        if self.done:
            raise RuntimeError("Pagination already finished")

        self.state = PaginationState.ADVANCING
        self.pages += 1

        if not next_cursor:
            return self._finish(StopReason.EXHAUSTED)

        if next_cursor == self.cursor:
            self.same_cursor_count += 1
            logger.warning(
                "Same start key returned %d times: %s",
                self.same_cursor_count,
                next_cursor,
            )
            if self.same_cursor_count >= self._threshold:
                return self._finish(StopReason.STUCK_CURSOR)
        elif next_cursor in self._seen:
            return self._finish(StopReason.CURSOR_CYCLE)
        else:
            self.same_cursor_count = 0
            self._seen.add(next_cursor)
            self.cursor = next_cursor

        self.state = PaginationState.FETCHING
        return self.state

    def _finish(self, reason: StopReason) -> PaginationState:
        self.state = PaginationState.DONE
        self.stop_reason = reason
        if reason is StopReason.EXHAUSTED:
            logger.debug("Cursor absent; pagination exhausted", extra={"pages": self.pages})
        else:
            logger.error(
                "Pagination loop detected; stopping",
                extra={"reason": reason.value, "cursor": self.cursor, "pages": self.pages},
            )
        return self.state


class CursorPaginator:
    """Lazy page sequence following upstream cursors.

    Construct with a start cursor to resume a previous run.
    """

    def __init__(
        self,
        fetch_page: PageFetcher,
        *,
        config: AggregatorConfig | None = None,
        start_cursor: str | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        description: str = "page fetch",
    ) -> None:
        self._fetch_page = fetch_page
        self._config = config or AggregatorConfig()
        self._sleep = sleep
        self._description = description
        self.tracker = CursorTracker(
            start_cursor, same_cursor_threshold=self._config.same_cursor_threshold
        )
        #: Cursor used to request the most recently yielded page
        self.last_cursor: str | None = start_cursor

    @property
    def stop_reason(self) -> StopReason | None:
        return self.tracker.stop_reason

    async def pages(self) -> AsyncIterator[PageResult]:
        """Yield pages until the tracker reaches DONE.

        Raises:
            Exception: The last error of a page fetch whose retries ran out
        """
        while not self.tracker.done:
            cursor = self.tracker.cursor
            self.last_cursor = cursor
            logger.info(
                "Fetching page %d%s",
                self.tracker.pages + 1,
                f" (start_key: {cursor})" if cursor else "",
            )
            page = await retry_async(
                partial(self._fetch_page, cursor),
                max_attempts=self._config.max_attempts,
                base_delay=self._config.base_delay,
                sleep=self._sleep,
                description=self._description,
            )
            state = self.tracker.advance(page.next_cursor)
            yield page
            if state is PaginationState.FETCHING and self._config.page_delay > 0:
                await self._sleep(self._config.page_delay)
