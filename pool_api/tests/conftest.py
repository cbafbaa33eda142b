"""Shared fixtures for pool API tests."""

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from media_pool import MediaServerPool, PoolConfig, PoolMetrics
from pool_api.config import Settings
from pool_api.main import create_app

API_TOKEN = "test-api-token-0123456789abcdef"


@pytest.fixture
def settings():
    """Provide test settings."""
    return Settings(api_token=API_TOKEN, environment="test")


@pytest.fixture
def pool():
    """Create a pool whose health checks never fire during a test."""
    config = PoolConfig(
        media_servers=["http://10.0.0.1:3001", "http://10.0.0.2:3001"],
        health_check_interval=3600.0,
        health_check_timeout=5.0,
    )
    return MediaServerPool.from_config(config, PoolMetrics(registry=CollectorRegistry()))


@pytest.fixture
def client(settings, pool):
    """Create a test client with the app lifespan running."""
    with TestClient(create_app(settings, pool)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    """Provide a valid Authorization header."""
    return {"Authorization": f"Bearer {API_TOKEN}"}
