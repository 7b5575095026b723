"""Agent status and activity endpoint definition and adapter.

Newer portals return an object keyed by extension instead of a list; the key
is injected into each record as "extension". Otherwise extension is filled
from the first of ext, userId, user_id or id that is present.
"""

from __future__ import annotations

from ....core import ReportKind
from ....runtime.records import FlattenRule, RecordProfile
from ....runtime.rest import ResponseAdapter, RestEndpointSpec
from ..config import AGENT_STATUS_FILTERS
from .shared import path_builder, query_builder

PROFILE = RecordProfile(
    id_fields=("extension",),
    number_fields=(),
    timestamp_fields=(),
    flatten_rules=tuple(
        FlattenRule(target="extension", source=(source,), override=False)
        for source in ("ext", "userId", "user_id", "id")
    ),
    fallback_key_field="extension",
)

# Endpoint specification
SPEC = RestEndpointSpec(
    id="agent_status",
    method="GET",
    build_path=path_builder(ReportKind.AGENT_STATUS),
    build_query=query_builder(filters=AGENT_STATUS_FILTERS),
)


class Adapter(ResponseAdapter):
    """Adapter for agent status pages."""

    profile = PROFILE
