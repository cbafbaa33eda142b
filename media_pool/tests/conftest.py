"""Shared fixtures for media pool tests."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from prometheus_client import CollectorRegistry

from media_pool.config import PoolConfig
from media_pool.metrics import PoolMetrics


def make_response(status: int = 200, payload=None):
    """Build a mock aiohttp response usable as ``async with``."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload if payload is not None else {})
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


def make_failing_response(exc: BaseException):
    """Build a mock response whose ``async with`` raises ``exc``."""
    response = MagicMock()
    response.__aenter__ = AsyncMock(side_effect=exc)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


def make_session(responses_by_url: dict):
    """Build a mock aiohttp session routing GETs by URL."""
    session = MagicMock()
    session.get = MagicMock(side_effect=lambda url, **kwargs: responses_by_url[url])
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return session


@pytest.fixture
def config():
    """Create test configuration."""
    return PoolConfig(
        media_servers=["http://10.0.0.1:3001", "http://10.0.0.2:3001"],
        health_check_interval=10.0,
        health_check_timeout=5.0,
    )


@pytest.fixture
def metrics():
    """Create PoolMetrics on an isolated registry."""
    return PoolMetrics(registry=CollectorRegistry())


@pytest.fixture
def http_mocks():
    """Factories for mock aiohttp sessions and responses."""
    return SimpleNamespace(
        response=make_response,
        failing=make_failing_response,
        session=make_session,
    )
