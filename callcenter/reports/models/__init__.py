"""Data models for report requests and results.

All models are Pydantic v2 and frozen. Records themselves stay open
mappings (dict[str, Any]) since their shape varies by report kind and by
upstream version.
"""

from .page import AggregateResult, PageResult
from .request import FetchRequest, PageQuery, TimeRange

__all__ = [
    "AggregateResult",
    "FetchRequest",
    "PageQuery",
    "PageResult",
    "TimeRange",
]
