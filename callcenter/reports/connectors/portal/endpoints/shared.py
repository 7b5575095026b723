"""Helpers shared by the portal endpoint definitions."""

from __future__ import annotations

from collections.abc import Callable
from numbers import Number
from typing import Any

from ....core import ReportKind
from ....runtime.records import Record
from ....runtime.rest import ResponseAdapter
from ..config import (
    CURSOR_PARAM,
    END_DATE_PARAM,
    FIELDS_PARAM,
    LIMIT_PARAM,
    PATHS,
    START_DATE_PARAM,
)


def path_builder(report: ReportKind) -> Callable[[dict[str, Any]], str]:
    """Path builder honouring a per-request "path" override."""

    def build_path(params: dict[str, Any]) -> str:
        return params.get("path") or PATHS[report]

    return build_path


def query_builder(
    fields: tuple[str, ...] | None = None,
    filters: tuple[str, ...] = (),
) -> Callable[[dict[str, Any]], dict[str, Any]]:
    """Build a query-parameter builder for one report.

    Args:
        fields: Field projection sent as a comma-joined list
        filters: Names read from params["filters"] and forwarded when set

    Returns:
        Function mapping runner params to portal query parameters
    """

    def build_query(params: dict[str, Any]) -> dict[str, Any]:
        query: dict[str, Any] = {}
        if params.get("start_date") is not None:
            query[START_DATE_PARAM] = int(params["start_date"])
        if params.get("end_date") is not None:
            query[END_DATE_PARAM] = int(params["end_date"])
        if params.get("limit"):
            query[LIMIT_PARAM] = int(params["limit"])
        if params.get("cursor"):
            query[CURSOR_PARAM] = str(params["cursor"])
        if fields:
            query[FIELDS_PARAM] = ",".join(fields)
        requested = params.get("filters") or {}
        for name in filters:
            value = requested.get(name)
            if value:
                query[name] = str(value)
        return query

    return build_query


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def derive_queue_durations(record: Record) -> None:
    """Fill talked_duration and wait_duration when the upstream omitted them."""
    called = record.get("called_time")
    answered = record.get("answered_time")
    hangup = record.get("hangup_time")

    if not record.get("talked_duration") and _is_number(hangup) and _is_number(answered) and answered:
        record["talked_duration"] = hangup - answered

    if not record.get("wait_duration") and _is_number(called) and called:
        if _is_number(answered) and answered:
            record["wait_duration"] = answered - called
        elif _is_number(hangup) and hangup:
            record["wait_duration"] = hangup - called


def keep_first(record: Record, field: str) -> None:
    """Trim a list field to its first element."""
    value = record.get(field)
    if isinstance(value, list) and len(value) > 1:
        record[field] = [value[0]]


class QueueAdapter(ResponseAdapter):
    """Base adapter for queue reports: derives missing durations on export."""

    def finalize(self, records: list[Record]) -> list[Record]:
        out = [dict(record) for record in records]
        for record in out:
            derive_queue_durations(record)
        return out
