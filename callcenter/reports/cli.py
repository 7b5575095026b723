"""Command-line report export.

Usage:
    python -m callcenter.reports <report> <tenant> [startISO] [endISO]
        [--limit N] [--cursor KEY] [--output file.{csv|json}]

Reads BASE_URL, PORTAL_TOKEN and the other portal settings from the
environment. With --limit the bounded aggregator runs; otherwise every
record is exported.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .connectors.portal import PortalRESTConnector, PortalSettings, list_endpoints, load_settings
from .core import ReportKind, StaticTokenProvider
from .core.exceptions import ReportError
from .models import FetchRequest, TimeRange
from .utils.export import flatten_record, to_csv

logger = logging.getLogger(__name__)

_PREVIEW_ROWS = 20


def _parse_time(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid ISO date/time: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="callcenter-reports",
        description="Fetch a call-center report from the reporting portal",
    )
    p.add_argument("report", help=f"report = {' | '.join(list_endpoints())} (camelCase accepted)")
    p.add_argument("tenant", help="tenant / account id")
    p.add_argument("start", nargs="?", type=_parse_time, help="window start (ISO 8601)")
    p.add_argument("end", nargs="?", type=_parse_time, help="window end (ISO 8601, default now)")
    p.add_argument("--limit", type=int, default=None, help="maximum records (bounded fetch)")
    p.add_argument("--cursor", default=None, help="resume cursor from a previous run")
    p.add_argument("--output", type=Path, default=None, help="write .csv or .json instead of printing")
    p.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    return p.parse_args(argv)


def _time_range(args: argparse.Namespace) -> TimeRange | None:
    if args.start is None:
        return None
    end = args.end or datetime.now(UTC)
    return TimeRange.from_datetimes(args.start, end)


def write_output(path: Path, report: ReportKind, records: list[dict[str, Any]]) -> None:
    """Write records as CSV (by suffix) or JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".csv":
        rows = [flatten_record(r) for r in records] if report is ReportKind.CDRS else records
        path.write_text(to_csv(rows), encoding="utf-8")
    else:
        path.write_text(json.dumps(records, indent=2, default=str), encoding="utf-8")


def _print_preview(records: list[dict[str, Any]]) -> None:
    for record in records[:_PREVIEW_ROWS]:
        print(json.dumps(record, default=str))
    if len(records) > _PREVIEW_ROWS:
        print(f"... {len(records) - _PREVIEW_ROWS} more")


async def run(args: argparse.Namespace, settings: PortalSettings) -> int:
    if not settings.token:
        logger.error("PORTAL_TOKEN is not set")
        return 2

    report = ReportKind.parse(args.report)
    time_range = _time_range(args)
    tokens = StaticTokenProvider(settings.token)

    async with PortalRESTConnector(settings, tokens) as portal:
        if args.limit is not None:
            result = await portal.aggregate(
                FetchRequest(
                    report=report,
                    tenant_id=args.tenant,
                    time_range=time_range,
                    limit=args.limit,
                    resume_cursor=args.cursor,
                )
            )
            records = result.records
            print(
                f"Fetched {result.total} rows for {report.value} "
                f"({result.fetch_method.value}, hasMore={result.has_more}, "
                f"nextCursor={result.next_cursor})"
            )
        else:
            records = await portal.fetch_report(report, args.tenant, time_range, cursor=args.cursor)
            print(f"Fetched {len(records)} rows for {report.value}")

    if args.output:
        write_output(args.output, report, records)
        print(f"Saved to {args.output}")
    else:
        _print_preview(records)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        settings = load_settings()
        return asyncio.run(run(args, settings))
    except (ReportError, ValueError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
