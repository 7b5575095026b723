"""Runtime components: transport, normalization, pagination and aggregation."""

from .aggregator import ReportAggregator
from .normalize import extract_items, is_pseudo_array, normalize_payload, unwrap_pseudo_array
from .pagination import CursorPaginator, CursorTracker
from .records import (
    DEFAULT_PROFILE,
    FlattenRule,
    MergeResult,
    Record,
    RecordAccumulator,
    RecordProfile,
)
from .rest import ResponseAdapter, RestEndpointSpec, RestRunner, RESTTransport

__all__ = [
    "ReportAggregator",
    "CursorPaginator",
    "CursorTracker",
    "DEFAULT_PROFILE",
    "FlattenRule",
    "MergeResult",
    "Record",
    "RecordAccumulator",
    "RecordProfile",
    "ResponseAdapter",
    "RestEndpointSpec",
    "RestRunner",
    "RESTTransport",
    "extract_items",
    "is_pseudo_array",
    "normalize_payload",
    "unwrap_pseudo_array",
]
