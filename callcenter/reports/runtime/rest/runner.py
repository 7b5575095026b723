"""REST request runner using endpoint specs and response adapters."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ...models import PageResult
from ..normalize import CURSOR_FIELD, normalize_payload
from ..records import DEFAULT_PROFILE, Record, RecordProfile
from .transport import RESTTransport


def next_start_key(response: Any) -> str | None:
    """Read the upstream continuation key from a response envelope."""
    if not isinstance(response, Mapping):
        return None
    value = response.get(CURSOR_FIELD)
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class RestEndpointSpec:
    id: str
    method: str  # only "GET" is used by the reporting API
    build_path: Callable[[dict[str, Any]], str]
    build_query: Callable[[dict[str, Any]], dict[str, Any]] | None = None
    next_cursor: Callable[[Any], str | None] | None = next_start_key


class ResponseAdapter:
    """Turns a raw page body into flat records.

    Subclasses set profile and may override finalize() for report-specific
    post-processing of a complete export.
    """

    profile: RecordProfile = DEFAULT_PROFILE

    def parse(self, response: Any, params: dict[str, Any]) -> list[Record]:  # noqa: ARG002
        return normalize_payload(response, self.profile)

    def finalize(self, records: list[Record]) -> list[Record]:
        return records


class RestRunner:
    def __init__(self, transport: RESTTransport) -> None:
        self._t = transport

    async def run(
        self,
        *,
        spec: RestEndpointSpec,
        adapter: ResponseAdapter,
        params: dict[str, Any],
        tenant_id: str,
    ) -> PageResult:
        path = spec.build_path(params)
        query = spec.build_query(params) if spec.build_query else None

        if spec.method.upper() != "GET":
            raise ValueError(f"Unsupported method for {spec.id}: {spec.method}")

        data = await self._t.get(path, tenant_id=tenant_id, params=query)
        records = adapter.parse(data, params)
        cursor = spec.next_cursor(data) if spec.next_cursor else None
        return PageResult(records=records, next_cursor=cursor)
