"""Bounded report aggregation.

Architecture:
    ReportAggregator is the entry point consumed by connectors. It picks a
    strategy by requested size:
    - no limit, or a limit within one upstream page: one request with the
      limit passed as a page-size hint, no cursor driver
    - larger limits: the cursor driver, accumulating unique records until
      the limit is reached or the driver stops
    - when consecutive pages add nothing new and a time range was given, the
      window is split into sub-windows fetched one at a time

    Pagination anomalies never raise to the caller; they end the run with a
    partial result whose has_more flag reflects the uncertainty. Only a
    failure of the first request surfaces, as ExhaustedRetriesError.

Resume cursor:
    When the limit is reached part-way through a page, next_cursor is the
    cursor that fetched that page, so a resumed run may repeat records but
    never skips them. A fully consumed page hands back its own next-cursor.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import aclosing
from dataclasses import dataclass
from functools import partial

from ..core.config import AggregatorConfig
from ..core.enums import FetchMethod, StopReason
from ..core.exceptions import ExhaustedRetriesError, LoopDetected
from ..models import AggregateResult, FetchRequest, PageQuery, PageResult
from ..utils.retry import retry_async
from .pagination import CursorPaginator
from .records import DEFAULT_PROFILE, RecordAccumulator, RecordProfile
from .slicing import SliceExecutor, SlicePlan, SlicePolicy, TimeSlicePlanner

logger = logging.getLogger(__name__)

QueryFetcher = Callable[[PageQuery], Awaitable[PageResult]]


@dataclass
class _CursorRun:
    """Outcome of a cursor-driven run."""

    has_more: bool
    next_cursor: str | None
    stop_reason: StopReason
    pages: int


class ReportAggregator:
    """Collects a deduplicated, size-bounded record set for one report.

    Each aggregate() call uses fresh state; an instance may be reused.
    """

    def __init__(
        self,
        fetch_page: QueryFetcher,
        *,
        profile: RecordProfile = DEFAULT_PROFILE,
        config: AggregatorConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        report: str = "unknown",
    ) -> None:
        """Initialize aggregator.

        Args:
            fetch_page: Async function issuing one upstream request
            profile: Identity and shape rules for the report's records
            config: Retry, pagination and slicing parameters
            sleep: Awaitable sleep function (injectable for tests)
            report: Report identifier used in log records
        """
        self._fetch_page = fetch_page
        self._profile = profile
        self._config = config or AggregatorConfig()
        self._sleep = sleep
        self._report = report

    @property
    def config(self) -> AggregatorConfig:
        return self._config

    def effective_limit(self, limit: int | None) -> int | None:
        """Requested limit after applying the internal ceiling."""
        clamped = self._config.clamp_limit(limit)
        if clamped != limit:
            logger.info(
                "Requested limit %s exceeds maximum; clamped to %s",
                limit,
                clamped,
                extra={"report": self._report},
            )
        return clamped

    async def aggregate(self, request: FetchRequest) -> AggregateResult:
        """Collect up to request.limit unique records.

        Raises:
            ExhaustedRetriesError: If the first upstream request fails after
                all retries
        """
        limit = self.effective_limit(request.limit)
        base = self._base_query(request)

        if limit is None or limit <= self._config.page_size:
            return await self._single_page(base.model_copy(update={"limit": limit}), limit)
        return await self._multi_page(request, base, limit)

    async def export(self, request: FetchRequest) -> AggregateResult:
        """Follow the cursor until the upstream has no more pages.

        Ignores request.limit. Pages that add nothing new do not stop the run;
        the cursor circuit breakers still do.

        Raises:
            ExhaustedRetriesError: If the first upstream request fails after
                all retries
        """
        accumulator = RecordAccumulator(self._profile)
        run = await self._drive_cursor(
            self._base_query(request),
            accumulator,
            start_cursor=request.resume_cursor,
            detect_stagnation=False,
        )
        logger.info(
            "Export complete: %d records over %d pages",
            len(accumulator),
            run.pages,
            extra={"report": self._report, "stop_reason": run.stop_reason.value},
        )
        return self._result(accumulator, run, FetchMethod.MULTI_PAGE, None)

    def _base_query(self, request: FetchRequest) -> PageQuery:
        time_range = request.time_range
        return PageQuery(
            start_date=time_range.start if time_range else None,
            end_date=time_range.end if time_range else None,
            cursor=request.resume_cursor,
            filters=request.filters,
        )

    async def _single_page(self, query: PageQuery, limit: int | None) -> AggregateResult:
        logger.info(
            "Single-page fetch",
            extra={"report": self._report, "limit": limit, "cursor": query.cursor},
        )
        page = await self._first_request(partial(self._fetch_page, query))

        accumulator = RecordAccumulator(self._profile, limit)
        merged = accumulator.merge(page.records)

        if merged.overflow:
            next_cursor = query.cursor
        else:
            next_cursor = page.next_cursor
        has_more = page.next_cursor is not None or merged.overflow > 0

        return AggregateResult(
            records=accumulator.records,
            has_more=has_more,
            next_cursor=next_cursor,
            fetch_method=FetchMethod.SINGLE_PAGE,
            stop_reason=StopReason.SINGLE_PAGE,
            pages_fetched=1,
            limit=limit,
        )

    async def _multi_page(
        self, request: FetchRequest, base: PageQuery, limit: int
    ) -> AggregateResult:
        accumulator = RecordAccumulator(self._profile, limit)
        try:
            run = await self._drive_cursor(
                base,
                accumulator,
                start_cursor=request.resume_cursor,
                detect_stagnation=True,
            )
        except LoopDetected as signal:
            if request.time_range is None:
                logger.warning(
                    "Pagination stagnated and no time range was given; returning partial result",
                    extra={"report": self._report, "records": len(accumulator)},
                )
                run = _CursorRun(
                    has_more=True,
                    next_cursor=None,
                    stop_reason=StopReason.STAGNATION,
                    pages=signal.pages,
                )
                return self._result(accumulator, run, FetchMethod.MULTI_PAGE, limit)
            return await self._time_sliced(request, base, accumulator, signal.pages, limit)

        return self._result(accumulator, run, FetchMethod.MULTI_PAGE, limit)

    async def _drive_cursor(
        self,
        base: PageQuery,
        accumulator: RecordAccumulator,
        *,
        start_cursor: str | None,
        detect_stagnation: bool,
    ) -> _CursorRun:
        """Run the cursor driver, merging each page into accumulator.

        Raises:
            LoopDetected: When stagnation detection is on and consecutive
                pages add no new records
            ExhaustedRetriesError: If the first page cannot be fetched
        """
        paginator = CursorPaginator(
            partial(self._fetch_hinted, base, accumulator),
            config=self._config,
            start_cursor=start_cursor,
            sleep=self._sleep,
            description=f"{self._report} page fetch",
        )

        pages = 0
        stagnant = 0
        async with aclosing(paginator.pages()) as page_stream:
            while True:
                try:
                    page = await anext(page_stream)
                except StopAsyncIteration:
                    break
                except Exception as e:
                    if pages == 0:
                        raise ExhaustedRetriesError(
                            f"Failed to fetch {self._report}: {e}",
                            last_error=e,
                            attempts=self._config.max_attempts,
                        ) from e
                    logger.error(
                        "Page fetch failed after %d pages; returning partial result",
                        pages,
                        extra={
                            "report": self._report,
                            "cursor": paginator.last_cursor,
                            "error_type": type(e).__name__,
                            "error_message": str(e),
                        },
                    )
                    return _CursorRun(True, paginator.last_cursor, StopReason.FETCH_FAILED, pages)

                pages += 1
                merged = accumulator.merge(page.records)
                logger.info(
                    "Page %d: %d records, %d new, %d total",
                    pages,
                    len(page.records),
                    merged.added,
                    len(accumulator),
                    extra={"report": self._report},
                )

                if accumulator.full:
                    if merged.overflow:
                        return _CursorRun(True, paginator.last_cursor, StopReason.LIMIT_REACHED, pages)
                    return _CursorRun(
                        page.next_cursor is not None,
                        page.next_cursor,
                        StopReason.LIMIT_REACHED,
                        pages,
                    )

                if merged.added:
                    stagnant = 0
                    continue
                stagnant += 1
                if detect_stagnation and stagnant >= self._config.stagnation_threshold:
                    raise LoopDetected(
                        f"{stagnant} consecutive pages without new records",
                        reason=StopReason.STAGNATION.value,
                        pages=pages,
                    )

        reason = paginator.stop_reason or StopReason.EXHAUSTED
        if reason is StopReason.EXHAUSTED:
            return _CursorRun(False, None, reason, pages)
        return _CursorRun(True, paginator.tracker.cursor, reason, pages)

    async def _time_sliced(
        self,
        request: FetchRequest,
        base: PageQuery,
        accumulator: RecordAccumulator,
        cursor_pages: int,
        limit: int,
    ) -> AggregateResult:
        time_range = request.time_range
        assert time_range is not None

        logger.info(
            "Cursor pagination stagnated; switching to time slicing",
            extra={
                "report": self._report,
                "records": len(accumulator),
                "remaining": accumulator.remaining,
            },
        )

        policy = SlicePolicy.from_config(self._config)
        plans = TimeSlicePlanner(policy, report=self._report).plan(
            start=time_range.start, end=time_range.end, limit=accumulator.remaining
        )
        executor = SliceExecutor(policy, config=self._config, sleep=self._sleep, report=self._report)
        outcome = await executor.execute(
            plans=plans,
            fetch_slice=partial(self._fetch_slice, base),
            accumulator=accumulator,
        )

        has_more = (
            outcome.limit_reached
            or outcome.overflow > 0
            or outcome.saturated_slices > 0
            or outcome.slices_failed > 0
        )
        return AggregateResult(
            records=accumulator.records,
            has_more=has_more,
            next_cursor=None,
            fetch_method=FetchMethod.TIME_SLICED,
            stop_reason=StopReason.LIMIT_REACHED
            if outcome.limit_reached
            else StopReason.SLICES_EXHAUSTED,
            pages_fetched=cursor_pages + outcome.slices_used,
            limit=limit,
        )

    async def _first_request(self, operation: Callable[[], Awaitable[PageResult]]) -> PageResult:
        try:
            return await retry_async(
                operation,
                max_attempts=self._config.max_attempts,
                base_delay=self._config.base_delay,
                sleep=self._sleep,
                description=f"{self._report} page fetch",
            )
        except Exception as e:
            raise ExhaustedRetriesError(
                f"Failed to fetch {self._report}: {e}",
                last_error=e,
                attempts=self._config.max_attempts,
            ) from e

    async def _fetch_hinted(
        self, base: PageQuery, accumulator: RecordAccumulator, cursor: str | None
    ) -> PageResult:
        remaining = accumulator.remaining
        hint = self._config.page_size if remaining is None else min(self._config.page_size, remaining)
        return await self._fetch_page(base.model_copy(update={"cursor": cursor, "limit": hint}))

    async def _fetch_slice(self, base: PageQuery, plan: SlicePlan) -> PageResult:
        query = base.model_copy(
            update={"start_date": plan.start, "end_date": plan.end, "limit": plan.limit, "cursor": None}
        )
        return await self._fetch_page(query)

    def _result(
        self,
        accumulator: RecordAccumulator,
        run: _CursorRun,
        method: FetchMethod,
        limit: int | None,
    ) -> AggregateResult:
        return AggregateResult(
            records=accumulator.records,
            has_more=run.has_more,
            next_cursor=run.next_cursor,
            fetch_method=method,
            stop_reason=run.stop_reason,
            pages_fetched=run.pages,
            limit=limit,
        )
