"""Time-slicing fallback for upstreams with broken cursor pagination.

Architecture:
    The slicing layer consists of:
    - definitions.py: Policy and plan structures (SlicePolicy, SlicePlan, SliceResult)
    - planners.py: Splits a window into contiguous sub-windows
    - executors.py: Fetches sub-windows one at a time and merges unique records
    - telemetry.py: Structured logging

Known limitation:
    Each sub-window is a single capped request. A sub-window holding more
    records than the cap silently loses the excess; saturated slices are
    counted and logged so callers can narrow the window.
"""

from __future__ import annotations

from .definitions import SlicePlan, SlicePolicy, SliceResult, calculate_slice_count
from .executors import SliceExecutor
from .planners import TimeSlicePlanner

__all__ = [
    "SlicePolicy",
    "SlicePlan",
    "SliceResult",
    "SliceExecutor",
    "TimeSlicePlanner",
    "calculate_slice_count",
]
