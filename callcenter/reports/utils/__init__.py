"""Utility functions."""

from .export import flatten_record, to_csv
from .http import HTTPClient
from .retry import retry_async

__all__ = ["HTTPClient", "flatten_record", "retry_async", "to_csv"]
