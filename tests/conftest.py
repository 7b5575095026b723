"""Shared fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from callcenter.reports.core import AggregatorConfig


@pytest.fixture
def fast_config() -> AggregatorConfig:
    """Aggregator config with every delay disabled."""
    return AggregatorConfig(base_delay=0.0, page_delay=0.0, slice_delay=0.0)


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Awaitable stand-in for asyncio.sleep that records delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def make_records() -> Callable[..., list[dict]]:
    """Factory for distinct records identified by call_id."""

    def factory(count: int, start: int = 0, prefix: str = "c") -> list[dict]:
        return [
            {"call_id": f"{prefix}{i}", "caller_id_number": f"1000{i}"}
            for i in range(start, start + count)
        ]

    return factory
