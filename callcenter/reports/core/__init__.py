"""Core components."""

from .base import StaticTokenProvider, TokenProvider
from .config import MAX_RECORD_LIMIT, UPSTREAM_PAGE_SIZE, AggregatorConfig
from .enums import FetchMethod, PaginationState, ReportKind, StopReason
from .exceptions import (
    ExhaustedRetriesError,
    LoopDetected,
    ReportError,
    TransportError,
    UnknownReportError,
    UpstreamShapeError,
    ValidationError,
)

__all__ = [
    "AggregatorConfig",
    "MAX_RECORD_LIMIT",
    "UPSTREAM_PAGE_SIZE",
    "TokenProvider",
    "StaticTokenProvider",
    "ReportKind",
    "PaginationState",
    "FetchMethod",
    "StopReason",
    "ReportError",
    "TransportError",
    "UpstreamShapeError",
    "ExhaustedRetriesError",
    "LoopDetected",
    "UnknownReportError",
    "ValidationError",
]
