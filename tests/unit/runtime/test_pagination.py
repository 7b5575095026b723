"""Unit tests for the cursor pagination driver."""

from __future__ import annotations

import pytest

from callcenter.reports.core import AggregatorConfig, PaginationState, StopReason, TransportError
from callcenter.reports.models import PageResult
from callcenter.reports.runtime import CursorPaginator, CursorTracker


class TestCursorTracker:
    """Test the pure transition function."""

    def test_absent_cursor_exhausts(self):
        """Test an absent cursor ends pagination normally."""
        tracker = CursorTracker()
        assert tracker.advance(None) is PaginationState.DONE
        assert tracker.stop_reason is StopReason.EXHAUSTED
        assert tracker.pages == 1

    def test_empty_string_cursor_is_absent(self):
        """Test an empty cursor counts as absent."""
        tracker = CursorTracker()
        assert tracker.advance("") is PaginationState.DONE
        assert tracker.stop_reason is StopReason.EXHAUSTED

    def test_advancing_cursor(self):
        """Test fresh cursors are adopted."""
        tracker = CursorTracker()
        assert tracker.advance("k1") is PaginationState.FETCHING
        assert tracker.cursor == "k1"
        assert tracker.advance("k2") is PaginationState.FETCHING
        assert tracker.cursor == "k2"
        assert tracker.same_cursor_count == 0

    def test_same_cursor_threshold(self):
        """Test three non-advancing pages end pagination."""
        tracker = CursorTracker("k")
        assert tracker.advance("k") is PaginationState.FETCHING
        assert tracker.advance("k") is PaginationState.FETCHING
        assert tracker.same_cursor_count == 2
        assert tracker.advance("k") is PaginationState.DONE
        assert tracker.stop_reason is StopReason.STUCK_CURSOR
        assert tracker.pages == 3

    def test_same_cursor_counter_resets(self):
        """Test an advancing cursor resets the counter."""
        tracker = CursorTracker("k")
        tracker.advance("k")
        tracker.advance("k2")
        assert tracker.same_cursor_count == 0
        tracker.advance("k2")
        tracker.advance("k2")
        assert not tracker.done

    def test_cycle_detected(self):
        """Test a previously seen cursor ends pagination."""
        tracker = CursorTracker()
        tracker.advance("a")
        tracker.advance("b")
        assert tracker.advance("a") is PaginationState.DONE
        assert tracker.stop_reason is StopReason.CURSOR_CYCLE
        assert tracker.cursor == "b"

    def test_start_cursor_counts_as_seen(self):
        """Test a resume cursor returning later is a cycle."""
        tracker = CursorTracker("start")
        tracker.advance("next")
        assert tracker.advance("start") is PaginationState.DONE
        assert tracker.stop_reason is StopReason.CURSOR_CYCLE

    def test_advance_after_done_raises(self):
        """Test DONE is terminal."""
        tracker = CursorTracker()
        tracker.advance(None)
        with pytest.raises(RuntimeError):
            tracker.advance("k")

    def test_invalid_threshold(self):
        """Test the threshold must be positive."""
        with pytest.raises(ValueError):
            CursorTracker(same_cursor_threshold=0)


class FakeUpstream:
    """Serves pages keyed by request cursor and records calls."""

    def __init__(self, pages: dict[str | None, PageResult]) -> None:
        self.pages = pages
        self.calls: list[str | None] = []

    async def __call__(self, cursor: str | None) -> PageResult:
        self.calls.append(cursor)
        return self.pages[cursor]


async def _collect(paginator: CursorPaginator) -> list[PageResult]:
    return [page async for page in paginator.pages()]


class TestCursorPaginator:
    """Test the async page sequence."""

    @pytest.mark.asyncio
    async def test_follows_cursor_until_absent(self, fast_config, no_sleep):
        """Test pages are fetched until the cursor disappears."""
        upstream = FakeUpstream(
            {
                None: PageResult(records=[{"call_id": "a"}], next_cursor="k1"),
                "k1": PageResult(records=[{"call_id": "b"}], next_cursor="k2"),
                "k2": PageResult(records=[{"call_id": "c"}], next_cursor=None),
            }
        )
        paginator = CursorPaginator(upstream, config=fast_config, sleep=no_sleep)

        pages = await _collect(paginator)

        assert [p.records[0]["call_id"] for p in pages] == ["a", "b", "c"]
        assert upstream.calls == [None, "k1", "k2"]
        assert paginator.stop_reason is StopReason.EXHAUSTED

    @pytest.mark.asyncio
    async def test_stuck_cursor_terminates_after_three_pages(self, fast_config, no_sleep):
        """Test an upstream repeating the cursor is fetched exactly three times."""
        upstream = FakeUpstream({"k": PageResult(records=[], next_cursor="k")})
        paginator = CursorPaginator(upstream, config=fast_config, start_cursor="k", sleep=no_sleep)

        pages = await _collect(paginator)

        assert len(pages) == 3
        assert upstream.calls == ["k", "k", "k"]
        assert paginator.stop_reason is StopReason.STUCK_CURSOR

    @pytest.mark.asyncio
    async def test_stuck_after_first_page(self, fast_config, no_sleep):
        """Test the first cursor is adopted before repeats are counted."""
        upstream = FakeUpstream(
            {
                None: PageResult(records=[], next_cursor="k"),
                "k": PageResult(records=[], next_cursor="k"),
            }
        )
        paginator = CursorPaginator(upstream, config=fast_config, sleep=no_sleep)

        await _collect(paginator)

        assert upstream.calls == [None, "k", "k", "k"]
        assert paginator.stop_reason is StopReason.STUCK_CURSOR

    @pytest.mark.asyncio
    async def test_cycle_terminates(self, fast_config, no_sleep):
        """Test the driver stops on the second occurrence of a cursor."""
        upstream = FakeUpstream(
            {
                None: PageResult(next_cursor="a"),
                "a": PageResult(next_cursor="b"),
                "b": PageResult(next_cursor="a"),
            }
        )
        paginator = CursorPaginator(upstream, config=fast_config, sleep=no_sleep)

        pages = await _collect(paginator)

        assert len(pages) == 3
        assert upstream.calls == [None, "a", "b"]
        assert paginator.stop_reason is StopReason.CURSOR_CYCLE

    @pytest.mark.asyncio
    async def test_resume_from_cursor(self, fast_config, no_sleep):
        """Test a paginator constructed with a cursor starts there."""
        upstream = FakeUpstream({"k5": PageResult(records=[{"call_id": "z"}], next_cursor=None)})
        paginator = CursorPaginator(upstream, config=fast_config, start_cursor="k5", sleep=no_sleep)

        pages = await _collect(paginator)

        assert upstream.calls == ["k5"]
        assert pages[0].records == [{"call_id": "z"}]

    @pytest.mark.asyncio
    async def test_page_delay_between_pages(self, no_sleep):
        """Test the fixed delay is applied between pages only."""
        config = AggregatorConfig(base_delay=0.0, page_delay=0.1)
        upstream = FakeUpstream(
            {None: PageResult(next_cursor="k1"), "k1": PageResult(next_cursor=None)}
        )
        paginator = CursorPaginator(upstream, config=config, sleep=no_sleep)

        await _collect(paginator)

        no_sleep.assert_awaited_once_with(0.1)

    @pytest.mark.asyncio
    async def test_retries_failed_page(self, fast_config, no_sleep):
        """Test page fetches go through the retry wrapper."""
        attempts = 0

        async def flaky(cursor):
            nonlocal attempts
            attempts += 1
            if attempts < 3:
                raise TransportError("flaky")
            return PageResult(records=[{"call_id": "a"}])

        paginator = CursorPaginator(flaky, config=fast_config, sleep=no_sleep)
        pages = await _collect(paginator)

        assert attempts == 3
        assert len(pages) == 1

    @pytest.mark.asyncio
    async def test_exhausted_retries_propagate(self, fast_config, no_sleep):
        """Test the last error propagates once retries run out."""

        async def down(cursor):
            raise TransportError("down")

        paginator = CursorPaginator(down, config=fast_config, sleep=no_sleep)
        with pytest.raises(TransportError):
            await _collect(paginator)
