"""Slice execution logic for fetching and merging sub-windows.

This module provides the SliceExecutor class that executes slice plans one
at a time, merging newly unique records into a shared accumulator.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from functools import partial
from time import perf_counter

from ...core.config import AggregatorConfig
from ...models import PageResult
from ...utils.retry import retry_async
from ..records import RecordAccumulator
from .definitions import SlicePlan, SlicePolicy, SliceResult
from .telemetry import (
    log_slice_completed,
    log_slice_error,
    log_slice_saturated,
    log_slicing_complete,
)

SliceFetcher = Callable[[SlicePlan], Awaitable[PageResult]]


class SliceExecutor:
    """Executes slice plans sequentially and merges results.

    Each slice is a single-page query capped at the upstream page size. A
    slice returning a full page may have lost records beyond the cap; such
    slices are counted and logged rather than hidden.
    """

    def __init__(
        self,
        policy: SlicePolicy | None = None,
        *,
        config: AggregatorConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        report: str = "unknown",
    ) -> None:
        """Initialize slice executor.

        Args:
            policy: Slicing policy
            config: Retry and delay settings
            sleep: Awaitable sleep function (injectable for tests)
            report: Report identifier used in log records
        """
        self._config = config or AggregatorConfig()
        self._policy = policy or SlicePolicy.from_config(self._config)
        self._sleep = sleep
        self._report = report

    async def execute(
        self,
        *,
        plans: list[SlicePlan],
        fetch_slice: SliceFetcher,
        accumulator: RecordAccumulator,
    ) -> SliceResult:
        """Fetch each slice until the accumulator is full or slices run out.

        Args:
            plans: Slice plans in the order to fetch them
            fetch_slice: Async function fetching one slice as a single page
            accumulator: Shared accumulator receiving unique records

        Returns:
            SliceResult describing the run
        """
        if not plans:
            raise ValueError("Cannot execute: no slice plans provided")

        result = SliceResult()

        for position, plan in enumerate(plans):
            if accumulator.full:
                break

            slice_start = perf_counter()
            try:
                page = await retry_async(
                    partial(fetch_slice, plan),
                    max_attempts=self._config.max_attempts,
                    base_delay=self._config.base_delay,
                    sleep=self._sleep,
                    description=f"slice {plan.slice_index + 1}/{len(plans)}",
                )
            except Exception as e:
                result.slices_failed += 1
                log_slice_error(
                    report=self._report,
                    slice_index=plan.slice_index,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
            else:
                result.slices_used += 1
                merged = accumulator.merge(page.records)
                result.records_fetched += len(page.records)
                result.records_added += merged.added
                result.overflow += merged.overflow

                if len(page.records) >= self._policy.max_points:
                    result.saturated_slices += 1
                    log_slice_saturated(
                        report=self._report, plan=plan, rows_fetched=len(page.records)
                    )

                log_slice_completed(
                    report=self._report,
                    plan=plan,
                    rows_fetched=len(page.records),
                    rows_added=merged.added,
                    latency_ms=(perf_counter() - slice_start) * 1000.0,
                )

            is_last = position == len(plans) - 1
            if not is_last and not accumulator.full and self._config.slice_delay > 0:
                await self._sleep(self._config.slice_delay)

        result.limit_reached = accumulator.full
        log_slicing_complete(report=self._report, result=result)
        return result
