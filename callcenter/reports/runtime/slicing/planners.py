"""Slice planning logic for splitting a time window.

This module provides the TimeSlicePlanner class that determines how to split
a requested window into sub-windows, each fetched as an independent query.
"""

from __future__ import annotations

from .definitions import SlicePlan, SlicePolicy, calculate_slice_count
from .telemetry import log_slice_plan


class TimeSlicePlanner:
    """Plans contiguous sub-windows for a time range.

    The planned sub-windows never overlap, are contiguous, and together
    cover [start, end) exactly. Boundaries are whole seconds computed as
    start + duration * i // count, so widths differ by at most one second.
    """

    def __init__(self, policy: SlicePolicy | None = None, *, report: str = "unknown") -> None:
        """Initialize slice planner.

        Args:
            policy: Slicing policy
            report: Report identifier used in log records
        """
        self._policy = policy or SlicePolicy()
        self._report = report

    def plan(self, *, start: int, end: int, limit: int | None = None) -> list[SlicePlan]:
        """Plan sub-windows for [start, end).

        Args:
            start: Window start, seconds since epoch
            end: Window end, seconds since epoch
            limit: Records still wanted (for telemetry only)

        Returns:
            List of slice plans in chronological order

        Raises:
            ValueError: If the window is empty or inverted
        """
        if end <= start:
            raise ValueError("Cannot plan slices: end must be after start")

        duration = end - start
        count = calculate_slice_count(duration, self._policy)

        plans = [
            SlicePlan(
                start=start + duration * i // count,
                end=start + duration * (i + 1) // count,
                limit=self._policy.max_points,
                slice_index=i,
            )
            for i in range(count)
        ]

        log_slice_plan(
            report=self._report,
            total_slices=len(plans),
            start=start,
            end=end,
            total_limit=limit,
        )

        return plans
