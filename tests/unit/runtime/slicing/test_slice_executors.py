"""Unit tests for time-slice execution."""

from __future__ import annotations

from unittest.mock import call

import pytest

from callcenter.reports.core import AggregatorConfig, TransportError
from callcenter.reports.models import PageResult
from callcenter.reports.runtime import RecordAccumulator
from callcenter.reports.runtime.slicing import SliceExecutor, SlicePlan, SlicePolicy


def _plans(count: int) -> list[SlicePlan]:
    return [SlicePlan(start=i * 100, end=(i + 1) * 100, limit=500, slice_index=i) for i in range(count)]


class TestSliceExecutor:
    """Test SliceExecutor functionality."""

    @pytest.mark.asyncio
    async def test_merges_unique_records(self, fast_config, no_sleep):
        """Test records from all slices are merged without duplicates."""
        executor = SliceExecutor(config=fast_config, sleep=no_sleep)
        accumulator = RecordAccumulator()

        async def fetch_slice(plan: SlicePlan) -> PageResult:
            # Every slice repeats "shared"
            return PageResult(records=[{"call_id": f"r{plan.slice_index}"}, {"call_id": "shared"}])

        result = await executor.execute(plans=_plans(3), fetch_slice=fetch_slice, accumulator=accumulator)

        assert result.slices_used == 3
        assert result.records_fetched == 6
        assert result.records_added == 4
        assert [r["call_id"] for r in accumulator.records] == ["r0", "shared", "r1", "r2"]

    @pytest.mark.asyncio
    async def test_stops_at_limit(self, fast_config, no_sleep, make_records):
        """Test no further slices are fetched once the limit is reached."""
        executor = SliceExecutor(config=fast_config, sleep=no_sleep)
        accumulator = RecordAccumulator(limit=5)
        fetched: list[int] = []

        async def fetch_slice(plan: SlicePlan) -> PageResult:
            fetched.append(plan.slice_index)
            return PageResult(records=make_records(3, prefix=f"s{plan.slice_index}-"))

        result = await executor.execute(plans=_plans(4), fetch_slice=fetch_slice, accumulator=accumulator)

        assert fetched == [0, 1]
        assert len(accumulator) == 5
        assert result.limit_reached
        assert result.overflow == 1

    @pytest.mark.asyncio
    async def test_failed_slice_skipped(self, fast_config, no_sleep):
        """Test a slice failing after retries is logged and skipped."""
        executor = SliceExecutor(config=fast_config, sleep=no_sleep)
        accumulator = RecordAccumulator()
        attempts: dict[int, int] = {}

        async def fetch_slice(plan: SlicePlan) -> PageResult:
            attempts[plan.slice_index] = attempts.get(plan.slice_index, 0) + 1
            if plan.slice_index == 1:
                raise TransportError("HTTP 500", status_code=500)
            return PageResult(records=[{"call_id": f"r{plan.slice_index}"}])

        result = await executor.execute(plans=_plans(3), fetch_slice=fetch_slice, accumulator=accumulator)

        assert attempts == {0: 1, 1: 3, 2: 1}
        assert result.slices_failed == 1
        assert result.slices_used == 2
        assert [r["call_id"] for r in accumulator.records] == ["r0", "r2"]

    @pytest.mark.asyncio
    async def test_saturated_slices_counted(self, fast_config, no_sleep, make_records):
        """Test slices returning a full page are reported."""
        executor = SliceExecutor(SlicePolicy(max_points=2), config=fast_config, sleep=no_sleep)
        accumulator = RecordAccumulator()

        async def fetch_slice(plan: SlicePlan) -> PageResult:
            count = 2 if plan.slice_index == 0 else 1
            return PageResult(records=make_records(count, prefix=f"s{plan.slice_index}-"))

        result = await executor.execute(plans=_plans(2), fetch_slice=fetch_slice, accumulator=accumulator)

        assert result.saturated_slices == 1

    @pytest.mark.asyncio
    async def test_delay_between_slices(self, no_sleep):
        """Test the inter-slice delay is applied between slices only."""
        config = AggregatorConfig(base_delay=0.0, slice_delay=0.2)
        executor = SliceExecutor(config=config, sleep=no_sleep)

        async def fetch_slice(plan: SlicePlan) -> PageResult:
            return PageResult(records=[{"call_id": f"r{plan.slice_index}"}])

        await executor.execute(plans=_plans(3), fetch_slice=fetch_slice, accumulator=RecordAccumulator())

        assert no_sleep.await_args_list == [call(0.2), call(0.2)]

    @pytest.mark.asyncio
    async def test_empty_plans_rejected(self, fast_config):
        """Test executing no plans is an error."""
        executor = SliceExecutor(config=fast_config)
        with pytest.raises(ValueError):
            await executor.execute(plans=[], fetch_slice=None, accumulator=RecordAccumulator())
