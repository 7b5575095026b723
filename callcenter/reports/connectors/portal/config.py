"""Shared reporting-portal connector constants and settings.

This module centralizes endpoint paths, field projections and the
environment-driven settings used by the REST connector so the endpoint
modules and the connector can stay small and focused.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from ...core import ReportKind
from ...core.exceptions import ValidationError
from ...utils.http import DEFAULT_TIMEOUT

# Upstream report paths, relative to the portal base URL
PATHS = {
    ReportKind.CDRS: "/api/v2/reports/cdrs/all",
    ReportKind.QUEUE_CALLS: "/api/v2/reports/queues_cdrs",
    ReportKind.QUEUE_OUTBOUND_CALLS: "/api/v2/reports/queues_outbound_cdrs",
    ReportKind.CAMPAIGNS_ACTIVITY: "/api/v2/reports/campaigns/leads/history",
    ReportKind.AGENT_STATUS: "/api/v2/reports/callcenter/agents/stats",
}

# Query parameter names used by the portal
START_DATE_PARAM = "startDate"
END_DATE_PARAM = "endDate"
LIMIT_PARAM = "limit"
CURSOR_PARAM = "start_key"
FIELDS_PARAM = "fields"

# Optional filters forwarded verbatim for agent status
AGENT_STATUS_FILTERS = ("name", "extension")

CDR_FIELDS = (
    "call_id",
    "caller_id_number",
    "callee_id_number",
    "disposition",
    "subdisposition",
    "follow_up_notes",
    "timestamp",
)

# Agent columns requested for both queue reports
_QUEUE_AGENT_FIELDS = (
    "agent_hangup",
    "call_id",
    "bleg_call_id",
    "event_timestamp",
    "agent_first_name",
    "agent_last_name",
    "agent_extension",
    "agent_email",
    "agent_talk_time",
    "agent_connect_time",
    "agent_action",
    "agent_transfer",
    "csat",
    "media_recording_id",
    "recording_filename",
)

QUEUE_CALL_FIELDS = (
    "called_time",
    "caller_id_number",
    "caller_id_name",
    "answered_time",
    "hangup_time",
    "wait_duration",
    "talked_duration",
    "queue_name",
    "abandoned",
    "queue_history",
    "agent_history",
    "agent_attempts",
    *_QUEUE_AGENT_FIELDS,
    "callee_id_number",
    "a_leg",
    "interaction_id",
    "agent_disposition",
    "agent_subdisposition1",
    "agent_subdisposition2",
)

QUEUE_OUTBOUND_CALL_FIELDS = (
    "called_time",
    "agent_name",
    "agent_ext",
    "destination",
    "answered_time",
    "hangup_time",
    "wait_duration",
    "talked_duration",
    "queue_name",
    "queue_history",
    "agent_history",
    *_QUEUE_AGENT_FIELDS,
    "caller_id_name",
    "caller_id_number",
    "a_leg",
    "to",
    "interaction_id",
    "agent_disposition",
    "agent_subdisposition1",
    "agent_subdisposition2",
)

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class PortalSettings:
    """Connection settings for the reporting portal.

    Attributes:
        base_url: Portal base URL
        account_id_header: Fixed X-Account-ID value (tenant id when unset)
        path_overrides: Per-report path replacing the default in PATHS
        verify_ssl: Verify the portal's TLS certificate
        timeout: Total request timeout in seconds
        token: Pre-issued bearer token, if any
    """

    base_url: str
    account_id_header: str | None = None
    path_overrides: Mapping[ReportKind, str] = field(default_factory=dict)
    verify_ssl: bool = True
    timeout: float = DEFAULT_TIMEOUT
    token: str | None = None

    def path_for(self, report: ReportKind) -> str:
        return self.path_overrides.get(report) or PATHS[report]


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValidationError(f"{name} must be a boolean flag, got {value!r}")


def load_settings(environ: Mapping[str, str] | None = None) -> PortalSettings:
    """Build PortalSettings from environment variables.

    Reads BASE_URL (required), ACCOUNT_ID_HEADER, AGENT_STATUS_ENDPOINT,
    PORTAL_VERIFY_SSL, PORTAL_TIMEOUT and PORTAL_TOKEN.

    Raises:
        ValidationError: If BASE_URL is missing or a value cannot be parsed
    """
    env = os.environ if environ is None else environ

    base_url = env.get("BASE_URL", "").strip()
    if not base_url:
        raise ValidationError("BASE_URL is not set")

    overrides: dict[ReportKind, str] = {}
    agent_status_path = env.get("AGENT_STATUS_ENDPOINT", "").strip()
    if agent_status_path:
        overrides[ReportKind.AGENT_STATUS] = agent_status_path

    timeout = DEFAULT_TIMEOUT
    raw_timeout = env.get("PORTAL_TIMEOUT")
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError as e:
            raise ValidationError(f"PORTAL_TIMEOUT must be a number, got {raw_timeout!r}") from e
        if timeout <= 0:
            raise ValidationError("PORTAL_TIMEOUT must be > 0")

    raw_verify = env.get("PORTAL_VERIFY_SSL")
    verify_ssl = _parse_bool("PORTAL_VERIFY_SSL", raw_verify) if raw_verify else True

    return PortalSettings(
        base_url=base_url,
        account_id_header=env.get("ACCOUNT_ID_HEADER") or None,
        path_overrides=overrides,
        verify_ssl=verify_ssl,
        timeout=timeout,
        token=env.get("PORTAL_TOKEN") or None,
    )
