"""Campaign lead activity endpoint definition and adapter."""

from __future__ import annotations

from ....core import ReportKind
from ....runtime.records import RecordProfile
from ....runtime.rest import ResponseAdapter, RestEndpointSpec
from .shared import path_builder, query_builder

PROFILE = RecordProfile(
    id_fields=("call_id", "_id", "id"),
    number_fields=("caller_id_number", "callee_id_number"),
    timestamp_fields=("timestamp", "called_time"),
)

# Endpoint specification; the portal returns its default columns
SPEC = RestEndpointSpec(
    id="campaigns_activity",
    method="GET",
    build_path=path_builder(ReportKind.CAMPAIGNS_ACTIVITY),
    build_query=query_builder(),
)


class Adapter(ResponseAdapter):
    profile = PROFILE
