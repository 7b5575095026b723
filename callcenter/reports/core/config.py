"""Aggregation tuning knobs.

Architecture:
    A single frozen value object replaces module-level retry/paging constants.
    It is passed into the aggregator (and from there into the pagination
    driver and slice executor) at construction, so tests can run with zero
    delays and tightened thresholds.
"""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ValidationError

# Upstream hard cap per response
UPSTREAM_PAGE_SIZE = 500
# Internal ceiling on a single aggregation request
MAX_RECORD_LIMIT = 10_000


@dataclass(frozen=True)
class AggregatorConfig:
    """Retry, pagination and slicing parameters for one aggregator.

    Attributes:
        max_attempts: Attempts per page fetch before giving up
        base_delay: First retry delay in seconds (doubles each attempt)
        same_cursor_threshold: Consecutive non-advancing cursors before stopping
        stagnation_threshold: Consecutive zero-new-record pages before slicing
        page_size: Upstream per-page cap; also the single-page threshold
        max_limit: Ceiling applied to requested limits
        page_delay: Pause between successive cursor pages (seconds)
        slice_delay: Pause between successive time slices (seconds)
        max_slice_seconds: Longest allowed time slice
        min_slices: Minimum number of time slices
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    same_cursor_threshold: int = 3
    stagnation_threshold: int = 2
    page_size: int = UPSTREAM_PAGE_SIZE
    max_limit: int = MAX_RECORD_LIMIT
    page_delay: float = 0.1
    slice_delay: float = 0.2
    max_slice_seconds: int = 14_400
    min_slices: int = 4

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValidationError("max_attempts must be >= 1")
        if self.base_delay < 0 or self.page_delay < 0 or self.slice_delay < 0:
            raise ValidationError("delays must be >= 0")
        if self.same_cursor_threshold < 1:
            raise ValidationError("same_cursor_threshold must be >= 1")
        if self.stagnation_threshold < 1:
            raise ValidationError("stagnation_threshold must be >= 1")
        if self.page_size < 1:
            raise ValidationError("page_size must be >= 1")
        if self.max_limit < self.page_size:
            raise ValidationError("max_limit must be >= page_size")
        if self.max_slice_seconds < 1:
            raise ValidationError("max_slice_seconds must be >= 1")
        if self.min_slices < 1:
            raise ValidationError("min_slices must be >= 1")

    def clamp_limit(self, limit: int | None) -> int | None:
        """Clamp a requested limit to max_limit. None stays unbounded."""
        if limit is None:
            return None
        return min(limit, self.max_limit)
