"""Unit tests for the command-line export."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from callcenter.reports import cli
from callcenter.reports.connectors.portal import PortalSettings
from callcenter.reports.core import FetchMethod, ReportKind, StopReason
from callcenter.reports.models import AggregateResult


class TestParseArgs:
    """Test argument parsing."""

    def test_positional_window(self):
        """Test ISO datetimes parse and default to UTC."""
        args = cli.parse_args(["cdrs", "acme", "2025-07-02T00:00:00", "2025-07-02T16:00:00+00:00"])
        assert args.report == "cdrs"
        assert args.tenant == "acme"
        assert args.start == datetime(2025, 7, 2, tzinfo=UTC)
        assert args.end == datetime(2025, 7, 2, 16, tzinfo=UTC)
        assert args.limit is None

    def test_options(self, tmp_path):
        """Test limit, cursor and output options."""
        out = tmp_path / "r.csv"
        args = cli.parse_args(["queueCalls", "acme", "--limit", "1200", "--cursor", "k1", "--output", str(out)])
        assert args.limit == 1200
        assert args.cursor == "k1"
        assert args.output == out

    def test_invalid_date(self):
        """Test malformed dates are rejected by argparse."""
        with pytest.raises(SystemExit):
            cli.parse_args(["cdrs", "acme", "yesterday"])

    def test_time_range(self):
        """Test the window is built from start and end."""
        args = cli.parse_args(["cdrs", "acme", "2025-07-02T00:00:00", "2025-07-02T01:00:00"])
        window = cli._time_range(args)
        assert window.start == 1_751_414_400
        assert window.duration == 3600

    def test_no_window(self):
        """Test no start means no time range."""
        assert cli._time_range(cli.parse_args(["cdrs", "acme"])) is None


class TestWriteOutput:
    """Test file output."""

    def test_cdrs_csv_flattened(self, tmp_path):
        """Test CDR rows are flattened into columns."""
        path = tmp_path / "out" / "cdrs.csv"
        cli.write_output(path, ReportKind.CDRS, [{"call_id": "a", "fonoUC": {"disposition": "Sale"}}])
        assert path.read_text(encoding="utf-8").splitlines() == [
            "call_id,fonoUC_disposition",
            "a,Sale",
        ]

    def test_json(self, tmp_path):
        """Test other suffixes write JSON."""
        path = tmp_path / "agents.json"
        records = [{"extension": "101", "state": "idle"}]
        cli.write_output(path, ReportKind.AGENT_STATUS, records)
        assert json.loads(path.read_text(encoding="utf-8")) == records


class TestRun:
    """Test run() and main() wiring."""

    @pytest.mark.asyncio
    async def test_missing_token(self):
        """Test a missing token exits with status 2 before any request."""
        args = cli.parse_args(["cdrs", "acme"])
        with patch.object(cli, "PortalRESTConnector") as connector_cls:
            assert await cli.run(args, PortalSettings(base_url="https://p")) == 2
        connector_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_bounded_fetch(self, capsys):
        """Test --limit runs the bounded aggregator."""
        portal = MagicMock()
        portal.__aenter__ = AsyncMock(return_value=portal)
        portal.__aexit__ = AsyncMock(return_value=None)
        portal.aggregate = AsyncMock(
            return_value=AggregateResult(
                records=[{"call_id": "a"}],
                has_more=True,
                next_cursor="k1",
                fetch_method=FetchMethod.MULTI_PAGE,
                stop_reason=StopReason.LIMIT_REACHED,
                pages_fetched=1,
                limit=1,
            )
        )
        args = cli.parse_args(["cdrs", "acme", "--limit", "600"])

        with patch.object(cli, "PortalRESTConnector", return_value=portal):
            code = await cli.run(args, PortalSettings(base_url="https://p", token="t"))

        assert code == 0
        request = portal.aggregate.await_args.args[0]
        assert request.limit == 600
        assert request.report is ReportKind.CDRS
        assert "hasMore=True" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_full_export(self, tmp_path):
        """Test without --limit the full export is written."""
        portal = MagicMock()
        portal.__aenter__ = AsyncMock(return_value=portal)
        portal.__aexit__ = AsyncMock(return_value=None)
        portal.fetch_report = AsyncMock(return_value=[{"extension": "101"}])
        out = tmp_path / "agents.json"
        args = cli.parse_args(["agentStatus", "acme", "--output", str(out)])

        with patch.object(cli, "PortalRESTConnector", return_value=portal):
            code = await cli.run(args, PortalSettings(base_url="https://p", token="t"))

        assert code == 0
        assert portal.fetch_report.await_args.args[0] is ReportKind.AGENT_STATUS
        assert json.loads(out.read_text(encoding="utf-8")) == [{"extension": "101"}]

    def test_main_without_base_url(self, monkeypatch):
        """Test configuration errors exit with status 1."""
        monkeypatch.delenv("BASE_URL", raising=False)
        assert cli.main(["cdrs", "acme"]) == 1

    def test_main_unknown_report(self, monkeypatch):
        """Test unknown report names exit with status 1."""
        monkeypatch.setenv("BASE_URL", "https://p")
        monkeypatch.setenv("PORTAL_TOKEN", "t")
        monkeypatch.delenv("PORTAL_TIMEOUT", raising=False)
        monkeypatch.delenv("PORTAL_VERIFY_SSL", raising=False)
        assert cli.main(["voicemail", "acme"]) == 1
