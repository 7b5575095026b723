"""Portal REST endpoint registry.

This module exports the endpoint specification and adapter of every report
kind the portal serves.
"""

from __future__ import annotations

from ....core import ReportKind
from ....runtime.records import RecordProfile
from ....runtime.rest import ResponseAdapter, RestEndpointSpec
from .agent_status import SPEC as AgentStatusSpec  # noqa: N811
from .agent_status import Adapter as AgentStatusAdapter
from .campaigns_activity import SPEC as CampaignsActivitySpec  # noqa: N811
from .campaigns_activity import Adapter as CampaignsActivityAdapter
from .cdrs import SPEC as CdrsSpec  # noqa: N811
from .cdrs import Adapter as CdrsAdapter
from .queue_calls import SPEC as QueueCallsSpec  # noqa: N811
from .queue_calls import Adapter as QueueCallsAdapter
from .queue_outbound_calls import SPEC as QueueOutboundCallsSpec  # noqa: N811
from .queue_outbound_calls import Adapter as QueueOutboundCallsAdapter

# Registry mapping report kinds to specs and adapters
_ENDPOINT_REGISTRY: dict[ReportKind, tuple[RestEndpointSpec, type[ResponseAdapter]]] = {
    ReportKind.CDRS: (CdrsSpec, CdrsAdapter),
    ReportKind.QUEUE_CALLS: (QueueCallsSpec, QueueCallsAdapter),
    ReportKind.QUEUE_OUTBOUND_CALLS: (QueueOutboundCallsSpec, QueueOutboundCallsAdapter),
    ReportKind.CAMPAIGNS_ACTIVITY: (CampaignsActivitySpec, CampaignsActivityAdapter),
    ReportKind.AGENT_STATUS: (AgentStatusSpec, AgentStatusAdapter),
}


def _lookup(report: ReportKind | str) -> tuple[RestEndpointSpec, type[ResponseAdapter]] | None:
    try:
        kind = ReportKind.parse(report)
    except ValueError:
        return None
    return _ENDPOINT_REGISTRY.get(kind)


def get_endpoint_spec(report: ReportKind | str) -> RestEndpointSpec | None:
    """Get endpoint specification by report kind.

    Args:
        report: Report kind or its name (e.g., "cdrs", "queueCalls")

    Returns:
        RestEndpointSpec if found, None otherwise
    """
    entry = _lookup(report)
    return entry[0] if entry else None


def get_endpoint_adapter(report: ReportKind | str) -> type[ResponseAdapter] | None:
    """Get endpoint adapter class by report kind.

    Args:
        report: Report kind or its name (e.g., "cdrs", "queueCalls")

    Returns:
        Adapter class if found, None otherwise
    """
    entry = _lookup(report)
    return entry[1] if entry else None


def get_record_profile(report: ReportKind | str) -> RecordProfile | None:
    """Identity and shape rules for a report kind's records."""
    entry = _lookup(report)
    return entry[1].profile if entry else None


def list_endpoints() -> list[str]:
    """List all available report identifiers."""
    return [kind.value for kind in _ENDPOINT_REGISTRY]


__all__ = [
    "get_endpoint_spec",
    "get_endpoint_adapter",
    "get_record_profile",
    "list_endpoints",
    "AgentStatusSpec",
    "AgentStatusAdapter",
    "CampaignsActivitySpec",
    "CampaignsActivityAdapter",
    "CdrsSpec",
    "CdrsAdapter",
    "QueueCallsSpec",
    "QueueCallsAdapter",
    "QueueOutboundCallsSpec",
    "QueueOutboundCallsAdapter",
]
