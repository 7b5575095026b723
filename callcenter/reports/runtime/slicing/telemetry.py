"""Structured logging for time-slicing operations."""

from __future__ import annotations

import logging

from .definitions import SlicePlan, SliceResult

logger = logging.getLogger(__name__)


def log_slice_plan(
    *,
    report: str,
    total_slices: int,
    start: int,
    end: int,
    total_limit: int | None = None,
) -> None:
    """Log slice plan creation.

    Args:
        report: Report identifier
        total_slices: Number of sub-windows planned
        start: Window start (epoch seconds)
        end: Window end (epoch seconds)
        total_limit: Records still wanted
    """
    logger.info(
        "slice_plan_created",
        extra={
            "report": report,
            "total_slices": total_slices,
            "window_seconds": end - start,
            "total_limit": total_limit,
            "start": start,
            "end": end,
        },
    )


def log_slice_completed(
    *,
    report: str,
    plan: SlicePlan,
    rows_fetched: int,
    rows_added: int,
    latency_ms: float | None = None,
) -> None:
    """Log completion of a single slice."""
    logger.info(
        "slice_completed",
        extra={
            "report": report,
            "slice_index": plan.slice_index,
            "slice_start": plan.start_time.isoformat(),
            "slice_end": plan.end_time.isoformat(),
            "rows_fetched": rows_fetched,
            "rows_added": rows_added,
            "latency_ms": latency_ms,
        },
    )


def log_slice_saturated(*, report: str, plan: SlicePlan, rows_fetched: int) -> None:
    """Log a slice that hit the per-request cap; records beyond it are lost."""
    logger.warning(
        "slice_saturated",
        extra={
            "report": report,
            "slice_index": plan.slice_index,
            "slice_start": plan.start_time.isoformat(),
            "slice_end": plan.end_time.isoformat(),
            "rows_fetched": rows_fetched,
            "cap": plan.limit,
        },
    )


def log_slice_error(
    *,
    report: str,
    slice_index: int,
    error_type: str,
    error_message: str,
) -> None:
    """Log a slice that failed after exhausting retries."""
    logger.error(
        "slice_error",
        extra={
            "report": report,
            "slice_index": slice_index,
            "error_type": error_type,
            "error_message": error_message,
        },
    )


def log_slicing_complete(*, report: str, result: SliceResult) -> None:
    """Log completion of a slice plan."""
    logger.info(
        "slicing_complete",
        extra={
            "report": report,
            "slices_used": result.slices_used,
            "slices_failed": result.slices_failed,
            "records_fetched": result.records_fetched,
            "records_added": result.records_added,
            "saturated_slices": result.saturated_slices,
            "limit_reached": result.limit_reached,
        },
    )
