"""Page and aggregation result models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..core.enums import FetchMethod, StopReason


class PageResult(BaseModel):
    """Records returned by one upstream call.

    A present next_cursor means more pages may exist; None marks the last
    page for the current query.
    """

    records: list[dict[str, Any]] = Field(default_factory=list)
    next_cursor: str | None = None

    model_config = ConfigDict(frozen=True)


class AggregateResult(BaseModel):
    """Flat, deduplicated, size-bounded result of an aggregation request."""

    records: list[dict[str, Any]] = Field(default_factory=list)
    has_more: bool = False
    next_cursor: str | None = None
    fetch_method: FetchMethod = FetchMethod.SINGLE_PAGE
    stop_reason: StopReason = StopReason.SINGLE_PAGE
    pages_fetched: int = Field(default=0, ge=0)
    limit: int | None = None

    @property
    def total(self) -> int:
        """Number of records returned."""
        return len(self.records)

    def to_payload(self) -> dict[str, Any]:
        """JSON response shape consumed by the dashboard."""
        return {
            "records": self.records,
            "hasMore": self.has_more,
            "nextCursor": self.next_cursor,
            "total": self.total,
            "limit": self.limit,
            "fetchMethod": self.fetch_method.value,
        }

    model_config = ConfigDict(frozen=True)
