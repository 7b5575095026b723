"""REST runtime abstractions."""

from .runner import ResponseAdapter, RestEndpointSpec, RestRunner, next_start_key
from .transport import RESTTransport

__all__ = [
    "RESTTransport",
    "RestRunner",
    "RestEndpointSpec",
    "ResponseAdapter",
    "next_start_key",
]
