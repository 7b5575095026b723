"""Core enumerations shared across the report runtime.

Architecture:
    String enums keep values JSON-friendly so they can be echoed straight back
    in API payloads and log records.

Key Types:
    - ReportKind: Upstream report families
    - PaginationState: States of the cursor pagination driver
    - FetchMethod: Strategy the aggregator used for a request
    - StopReason: Why an aggregation run stopped issuing requests
"""

from __future__ import annotations

from enum import Enum

# Route names used by the original dashboard front-end
_LEGACY_NAMES = {
    "queueCalls": "queue_calls",
    "queueOutboundCalls": "queue_outbound_calls",
    "campaignsActivity": "campaigns_activity",
    "agentStatus": "agent_status",
}


class ReportKind(str, Enum):
    """Report families exposed by the upstream reporting API."""

    CDRS = "cdrs"
    QUEUE_CALLS = "queue_calls"
    QUEUE_OUTBOUND_CALLS = "queue_outbound_calls"
    CAMPAIGNS_ACTIVITY = "campaigns_activity"
    AGENT_STATUS = "agent_status"

    @classmethod
    def parse(cls, value: str | ReportKind) -> ReportKind:
        """Resolve a report kind from its value or legacy camelCase route name.

        Raises:
            ValueError: If the value names no known report
        """
        if isinstance(value, cls):
            return value
        return cls(_LEGACY_NAMES.get(value, value))


class PaginationState(str, Enum):
    """States of the cursor pagination driver.

    FETCHING: a page request is due (with the current cursor, if any)
    ADVANCING: a page was received and its next-cursor is being evaluated
    DONE: terminal, no further pages are requested
    """

    FETCHING = "fetching"
    ADVANCING = "advancing"
    DONE = "done"


class FetchMethod(str, Enum):
    """Strategy selected for an aggregation request."""

    SINGLE_PAGE = "single-page"
    MULTI_PAGE = "multi-page"
    TIME_SLICED = "time-sliced"


class StopReason(str, Enum):
    """Why an aggregation run stopped."""

    SINGLE_PAGE = "single_page"
    EXHAUSTED = "exhausted"
    LIMIT_REACHED = "limit_reached"
    STUCK_CURSOR = "stuck_cursor"
    CURSOR_CYCLE = "cursor_cycle"
    STAGNATION = "stagnation"
    SLICES_EXHAUSTED = "slices_exhausted"
    FETCH_FAILED = "fetch_failed"
