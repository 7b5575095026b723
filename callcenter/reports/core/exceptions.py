"""Custom exception hierarchy."""

from __future__ import annotations

from typing import Any


class ReportError(Exception):
    """Base exception for all library errors."""

    pass


class TransportError(ReportError):
    """Network or HTTP failure talking to the upstream reporting API.

    Transport errors are treated as transient and retried up to the attempt
    budget by the retry wrapper.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamShapeError(ReportError):
    """Payload shape not recognised, even by the fallback interpretation.

    Never propagated past the normalizer: it is logged and the page is
    treated as carrying zero records.
    """

    def __init__(self, message: str, payload_type: str | None = None) -> None:
        super().__init__(message)
        self.payload_type = payload_type


class ExhaustedRetriesError(ReportError):
    """The final attempt of a page fetch failed.

    This is the single terminal error surfaced to callers of the aggregator.
    The message carries the last underlying error's message.
    """

    def __init__(
        self,
        message: str,
        last_error: BaseException | None = None,
        attempts: int | None = None,
    ) -> None:
        super().__init__(message)
        self.last_error = last_error
        self.attempts = attempts


class LoopDetected(ReportError):
    """Internal signal that cursor pagination stopped producing new records.

    Causes a strategy switch inside the aggregator and never reaches callers.
    """

    def __init__(self, message: str, reason: str, pages: int = 0) -> None:
        super().__init__(message)
        self.reason = reason
        self.pages = pages


class UnknownReportError(ReportError, ValueError):
    """Report kind has no registered endpoint."""

    pass


class ValidationError(ReportError):
    """Invalid request or configuration value."""

    pass
