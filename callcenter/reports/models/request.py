"""Request models for report aggregation."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.enums import ReportKind


class TimeRange(BaseModel):
    """Half-open time window [start, end) in seconds since epoch."""

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)

    @model_validator(mode="after")
    def validate_order(self) -> TimeRange:
        """Validate end > start."""
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self

    @property
    def duration(self) -> int:
        """Window length in seconds."""
        return self.end - self.start

    @classmethod
    def from_datetimes(cls, start: datetime, end: datetime) -> TimeRange:
        """Build a window from aware datetimes (truncated to whole seconds)."""
        return cls(start=int(start.timestamp()), end=int(end.timestamp()))

    model_config = ConfigDict(frozen=True)


class FetchRequest(BaseModel):
    """Caller input to the aggregator.

    Attributes:
        report: Report kind to fetch
        tenant_id: Upstream tenant/account identifier
        time_range: Optional window to restrict the report to
        limit: Optional maximum number of records (clamped by the aggregator)
        resume_cursor: Optional cursor returned by a previous response
        filters: Extra report-specific query parameters (e.g. agent name)
    """

    report: ReportKind
    tenant_id: str = Field(..., min_length=1)
    time_range: TimeRange | None = None
    limit: int | None = Field(default=None, ge=1)
    resume_cursor: str | None = None
    filters: dict[str, str] = Field(default_factory=dict)

    @field_validator("report", mode="before")
    @classmethod
    def parse_report(cls, v: Any) -> ReportKind:
        """Accept legacy camelCase report names."""
        if isinstance(v, str):
            return ReportKind.parse(v)
        return v

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class PageQuery(BaseModel):
    """Parameters of one upstream page request."""

    start_date: int | None = None
    end_date: int | None = None
    limit: int | None = None
    cursor: str | None = None
    filters: dict[str, str] = Field(default_factory=dict)

    def as_params(self) -> dict[str, Any]:
        """Parameter dict consumed by endpoint query builders.

        Filters stay nested under "filters" and never share keys with the
        window, page size, cursor or path.
        """
        return {
            "start_date": self.start_date,
            "end_date": self.end_date,
            "limit": self.limit,
            "cursor": self.cursor,
            "filters": dict(self.filters),
        }

    model_config = ConfigDict(frozen=True)
