"""Reporting portal REST connector.

Architecture:
    This connector uses the endpoint registry to look up specs and adapters,
    then uses RestRunner to execute page requests. Aggregation (strategy
    selection, cursor following, deduplication and time slicing) is handed
    to ReportAggregator with the report kind's record profile.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

from ...core import AggregatorConfig, ReportKind, TokenProvider
from ...core.exceptions import UnknownReportError
from ...models import AggregateResult, FetchRequest, PageQuery, PageResult, TimeRange
from ...runtime import ReportAggregator
from ...runtime.records import Record
from ...runtime.rest import ResponseAdapter, RestEndpointSpec, RestRunner, RESTTransport
from .config import PortalSettings
from .endpoints import get_endpoint_adapter, get_endpoint_spec

logger = logging.getLogger(__name__)


class PortalRESTConnector:
    """Fetches call-center reports for tenants from the reporting portal.

    Each call builds fresh aggregation state; one connector may serve
    concurrent requests for different tenants.
    """

    def __init__(
        self,
        settings: PortalSettings,
        token_provider: TokenProvider,
        *,
        config: AggregatorConfig | None = None,
        transport: RESTTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize portal connector.

        Args:
            settings: Portal connection settings
            token_provider: Source of bearer tokens per tenant
            config: Retry, pagination and slicing parameters
            transport: Pre-built transport (tests)
            sleep: Awaitable sleep function (injectable for tests)
        """
        self._settings = settings
        self._transport = transport or RESTTransport(
            base_url=settings.base_url,
            token_provider=token_provider,
            account_id_header=settings.account_id_header,
            timeout=settings.timeout,
            ssl=None if settings.verify_ssl else False,
        )
        self._runner = RestRunner(self._transport)
        self._config = config or AggregatorConfig()
        self._sleep = sleep

    def _resolve(self, report: ReportKind | str) -> tuple[ReportKind, RestEndpointSpec, ResponseAdapter]:
        spec = get_endpoint_spec(report)
        adapter_cls = get_endpoint_adapter(report)
        if spec is None or adapter_cls is None:
            raise UnknownReportError(f"Unknown report type: {report}")
        return ReportKind.parse(report), spec, adapter_cls()

    async def fetch_page(
        self,
        report: ReportKind | str,
        tenant_id: str,
        query: PageQuery,
    ) -> PageResult:
        """Issue one upstream request for report and return its records.

        Raises:
            UnknownReportError: If report names no registered endpoint
            TransportError: On network or HTTP failure (not retried here)
        """
        kind, spec, adapter = self._resolve(report)
        return await self._run(kind, spec, adapter, tenant_id, query)

    async def _run(
        self,
        kind: ReportKind,
        spec: RestEndpointSpec,
        adapter: ResponseAdapter,
        tenant_id: str,
        query: PageQuery,
    ) -> PageResult:
        params: dict[str, Any] = query.as_params()
        params["path"] = self._settings.path_for(kind)
        return await self._runner.run(spec=spec, adapter=adapter, params=params, tenant_id=tenant_id)

    def _aggregator(self, request: FetchRequest) -> tuple[ReportAggregator, ResponseAdapter]:
        kind, spec, adapter = self._resolve(request.report)
        fetch = partial(self._run, kind, spec, adapter, request.tenant_id)
        aggregator = ReportAggregator(
            fetch,
            profile=adapter.profile,
            config=self._config,
            sleep=self._sleep,
            report=kind.value,
        )
        return aggregator, adapter

    async def aggregate(self, request: FetchRequest) -> AggregateResult:
        """Collect up to request.limit unique records.

        Raises:
            UnknownReportError: If the report kind is not registered
            ExhaustedRetriesError: If the first upstream request fails
        """
        aggregator, _ = self._aggregator(request)
        result = await aggregator.aggregate(request)
        logger.info(
            "Aggregated %d %s records via %s",
            result.total,
            request.report.value,
            result.fetch_method.value,
            extra={
                "tenant_id": request.tenant_id,
                "has_more": result.has_more,
                "stop_reason": result.stop_reason.value,
                "pages": result.pages_fetched,
            },
        )
        return result

    async def fetch_report(
        self,
        report: ReportKind | str,
        tenant_id: str,
        time_range: TimeRange | None = None,
        *,
        filters: dict[str, str] | None = None,
        cursor: str | None = None,
    ) -> list[Record]:
        """Export every record of a report, with report-specific post-processing.

        Raises:
            UnknownReportError: If the report kind is not registered
            ExhaustedRetriesError: If the first upstream request fails
        """
        request = FetchRequest(
            report=report,
            tenant_id=tenant_id,
            time_range=time_range,
            filters=filters or {},
            resume_cursor=cursor,
        )
        aggregator, adapter = self._aggregator(request)
        result = await aggregator.export(request)
        if result.has_more:
            logger.warning(
                "Export of %s stopped early (%s); %d records collected",
                request.report.value,
                result.stop_reason.value,
                result.total,
                extra={"tenant_id": tenant_id, "next_cursor": result.next_cursor},
            )
        return adapter.finalize(result.records)

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> PortalRESTConnector:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
