"""Outbound queue calls endpoint definition and adapter."""

from __future__ import annotations

from ....core import ReportKind
from ....runtime.records import Record, RecordProfile
from ....runtime.rest import RestEndpointSpec
from ..config import QUEUE_OUTBOUND_CALL_FIELDS
from .shared import QueueAdapter, keep_first, path_builder, query_builder

PROFILE = RecordProfile(
    id_fields=("call_id",),
    number_fields=("caller_id_number", "destination"),
    timestamp_fields=("called_time", "event_timestamp"),
)

# Endpoint specification
SPEC = RestEndpointSpec(
    id="queue_outbound_calls",
    method="GET",
    build_path=path_builder(ReportKind.QUEUE_OUTBOUND_CALLS),
    build_query=query_builder(fields=QUEUE_OUTBOUND_CALL_FIELDS),
)


class Adapter(QueueAdapter):
    """Adapter for outbound queue call pages.

    Outbound rows carry the full queue history; exports keep only the oldest
    entry and leave agent_history intact.
    """

    profile = PROFILE

    def finalize(self, records: list[Record]) -> list[Record]:
        out = super().finalize(records)
        for record in out:
            keep_first(record, "queue_history")
        return out
