"""Call-center reports - resilient paginated report aggregation."""

from .connectors.portal import (
    PortalRESTConnector,
    PortalSettings,
    get_endpoint_spec,
    list_endpoints,
    load_settings,
)
from .core import (
    MAX_RECORD_LIMIT,
    UPSTREAM_PAGE_SIZE,
    AggregatorConfig,
    ExhaustedRetriesError,
    FetchMethod,
    LoopDetected,
    PaginationState,
    ReportError,
    ReportKind,
    StaticTokenProvider,
    StopReason,
    TokenProvider,
    TransportError,
    UnknownReportError,
    UpstreamShapeError,
    ValidationError,
)
from .models import AggregateResult, FetchRequest, PageQuery, PageResult, TimeRange
from .runtime import (
    CursorPaginator,
    CursorTracker,
    RecordAccumulator,
    RecordProfile,
    ReportAggregator,
    normalize_payload,
)
from .runtime.slicing import SliceExecutor, TimeSlicePlanner
from .utils import flatten_record, retry_async, to_csv

__version__ = "0.1.0"

__all__ = [
    # Connector
    "PortalRESTConnector",
    "PortalSettings",
    "get_endpoint_spec",
    "list_endpoints",
    "load_settings",
    # Core
    "AggregatorConfig",
    "MAX_RECORD_LIMIT",
    "UPSTREAM_PAGE_SIZE",
    "FetchMethod",
    "PaginationState",
    "ReportKind",
    "StopReason",
    "StaticTokenProvider",
    "TokenProvider",
    # Exceptions
    "ReportError",
    "TransportError",
    "UpstreamShapeError",
    "ExhaustedRetriesError",
    "LoopDetected",
    "UnknownReportError",
    "ValidationError",
    # Models
    "AggregateResult",
    "FetchRequest",
    "PageQuery",
    "PageResult",
    "TimeRange",
    # Runtime
    "CursorPaginator",
    "CursorTracker",
    "RecordAccumulator",
    "RecordProfile",
    "ReportAggregator",
    "SliceExecutor",
    "TimeSlicePlanner",
    "normalize_payload",
    # Utils
    "flatten_record",
    "retry_async",
    "to_csv",
]
