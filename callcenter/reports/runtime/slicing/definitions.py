"""Time-slicing policy and plan structures.

This module defines the data structures used to describe how a time window
is split into sub-windows when cursor pagination stops making progress.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime

from ...core.config import AggregatorConfig


@dataclass(frozen=True)
class SlicePolicy:
    """Slicing policy.

    Attributes:
        max_points: Upstream cap on records per slice request
        max_window_seconds: Longest allowed sub-window
        min_slices: Minimum number of sub-windows
    """

    max_points: int = 500
    max_window_seconds: int = 14_400
    min_slices: int = 4

    def __post_init__(self) -> None:
        if self.max_points < 1:
            raise ValueError("max_points must be >= 1")
        if self.max_window_seconds < 1:
            raise ValueError("max_window_seconds must be >= 1")
        if self.min_slices < 1:
            raise ValueError("min_slices must be >= 1")

    @classmethod
    def from_config(cls, config: AggregatorConfig) -> SlicePolicy:
        return cls(
            max_points=config.page_size,
            max_window_seconds=config.max_slice_seconds,
            min_slices=config.min_slices,
        )


@dataclass(frozen=True)
class SlicePlan:
    """Plan for a single sub-window.

    Attributes:
        start: Sub-window start, seconds since epoch (inclusive)
        end: Sub-window end, seconds since epoch (exclusive)
        limit: Page-size hint sent with the request
        slice_index: Zero-based index of this slice in the overall plan
    """

    start: int
    end: int
    limit: int
    slice_index: int = 0

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def start_time(self) -> datetime:
        return datetime.fromtimestamp(self.start, tz=UTC)

    @property
    def end_time(self) -> datetime:
        return datetime.fromtimestamp(self.end, tz=UTC)


@dataclass
class SliceResult:
    """Result of executing a slice plan.

    Attributes:
        slices_used: Slices fetched successfully
        slices_failed: Slices skipped after exhausting retries
        records_fetched: Records returned across all slices (before dedup)
        records_added: New unique records merged into the accumulator
        saturated_slices: Slices that came back at the per-request cap
        overflow: New records left out because the limit was reached
        limit_reached: Whether the accumulator reached its limit
    """

    slices_used: int = 0
    slices_failed: int = 0
    records_fetched: int = 0
    records_added: int = 0
    saturated_slices: int = 0
    overflow: int = 0
    limit_reached: bool = False


def calculate_slice_count(duration: int, policy: SlicePolicy) -> int:
    """Number of sub-windows for a window of duration seconds.

    At least policy.min_slices, and enough that none exceeds
    policy.max_window_seconds; never more than one per second.
    """
    if duration < 1:
        raise ValueError("duration must be >= 1 second")
    count = max(policy.min_slices, math.ceil(duration / policy.max_window_seconds))
    return min(count, duration)
