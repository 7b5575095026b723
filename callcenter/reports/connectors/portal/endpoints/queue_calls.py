"""Inbound queue calls endpoint definition and adapter.

The portal returns one row per agent leg of a queued call. A full export
keeps the first row per call_id (normally the initial dial leg) and only the
first agent_history entry of each kept row.
"""

from __future__ import annotations

from ....core import ReportKind
from ....runtime.records import Record, RecordProfile
from ....runtime.rest import RestEndpointSpec
from ..config import QUEUE_CALL_FIELDS
from .shared import QueueAdapter, keep_first, path_builder, query_builder

PROFILE = RecordProfile(
    id_fields=("call_id",),
    number_fields=("caller_id_number", "callee_id_number"),
    timestamp_fields=("called_time", "event_timestamp"),
)

# Endpoint specification
SPEC = RestEndpointSpec(
    id="queue_calls",
    method="GET",
    build_path=path_builder(ReportKind.QUEUE_CALLS),
    build_query=query_builder(fields=QUEUE_CALL_FIELDS),
)


class Adapter(QueueAdapter):
    """Adapter for inbound queue call pages."""

    profile = PROFILE

    def finalize(self, records: list[Record]) -> list[Record]:
        """Derive durations, keep one row per call and its first agent leg."""
        seen: set[str] = set()
        out: list[Record] = []
        for record in super().finalize(records):
            call_id = record.get("call_id")
            if call_id:
                if call_id in seen:
                    continue
                seen.add(call_id)
            keep_first(record, "agent_history")
            out.append(record)
        return out
