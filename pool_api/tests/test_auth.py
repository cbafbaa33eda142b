"""
Tests for API token authentication.
"""

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from fastapi.testclient import TestClient

from pool_api.auth import APIAuthError, check_api_token
from pool_api.config import Settings
from pool_api.main import create_app


class TestCheckApiToken:
    """Tests for token validation."""

    def test_valid_token(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="a" * 32)

        assert check_api_token(credentials, "a" * 32) is True

    def test_invalid_token(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="wrong")

        with pytest.raises(APIAuthError, match="Invalid API token"):
            check_api_token(credentials, "a" * 32)

    def test_missing_token(self):
        with pytest.raises(APIAuthError, match="Missing Authorization header"):
            check_api_token(None, "a" * 32)

    def test_auth_disabled(self):
        assert check_api_token(None, None) is True

    def test_error_status(self):
        error = APIAuthError()

        assert error.status_code == 401
        assert error.headers == {"WWW-Authenticate": "Bearer"}


def test_unauthenticated_mode(pool):
    """Test routes are open when no API token is configured."""
    with TestClient(create_app(Settings(api_token=None), pool)) as client:
        response = client.get("/api/v1/media-servers/")

    assert response.status_code == 200
    assert len(response.json()) == 2
