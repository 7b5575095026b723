"""Call detail records endpoint definition and adapter.

The portal wraps CDRs in envelope objects carrying a "cdrs" list, and keeps
agent dispositions under a vendor "fonoUC" annotation. Both are flattened so
every record exposes disposition, subdisposition and follow_up_notes at the
top level.
"""

from __future__ import annotations

from ....core import ReportKind
from ....runtime.records import FlattenRule, RecordProfile
from ....runtime.rest import ResponseAdapter, RestEndpointSpec
from ..config import CDR_FIELDS
from .shared import path_builder, query_builder

PROFILE = RecordProfile(
    id_fields=("call_id", "_id", "id", "bridge_id"),
    number_fields=("caller_id_number", "callee_id_number"),
    timestamp_fields=("timestamp", "called_time"),
    nested_field="cdrs",
    flatten_rules=(
        FlattenRule(target="disposition", source=("fonoUC", "disposition")),
        FlattenRule(target="follow_up_notes", source=("fonoUC", "follow_up_notes")),
        # "Callback - Tomorrow" from {"name": "Callback", "subdisposition": {"name": "Tomorrow"}}
        FlattenRule(
            target="subdisposition",
            source=("fonoUC", "subdisposition"),
            label_key="name",
            chain_key="subdisposition",
        ),
    ),
)

# Endpoint specification
SPEC = RestEndpointSpec(
    id="cdrs",
    method="GET",
    build_path=path_builder(ReportKind.CDRS),
    build_query=query_builder(fields=CDR_FIELDS),
)


class Adapter(ResponseAdapter):
    """Adapter for call detail record pages."""

    profile = PROFILE
