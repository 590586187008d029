"""Tests for X-Request-ID middleware.

Tests cover:
- Request ID generation when missing
- Request ID preservation when valid
- Request ID normalization (UUID lowercase)
- Request ID replacement when invalid
- Request ID presence on auth failures
- Request ID in error response body
"""

from uuid import UUID

import httpx
import pytest
import pytest_asyncio

from loom.app import add_request_id_middleware
from loom.middleware.request_id import resolve_request_id
from tests.factories import create_test_team, create_test_user
from tests.helpers import auth_headers

URL = "/suggestions.mention"


@pytest_asyncio.fixture
async def auth_client(authenticated_app):
    """Create a client with auth + request-id middleware."""
    # Add request-id middleware LAST (so it runs FIRST, outermost)
    add_request_id_middleware(authenticated_app, log_requests=False)
    transport = httpx.ASGITransport(app=authenticated_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def member_headers(db_session):
    team = await create_test_team(db_session)
    member = await create_test_user(db_session, team)
    return auth_headers(member.id)


class TestResolveRequestId:
    @pytest.mark.parametrize("value", [None, "", "bad id with spaces", "a" * 200, "ünïcode"])
    def test_invalid_values_are_replaced(self, value):
        UUID(resolve_request_id(value))

    def test_valid_value_is_kept(self):
        assert resolve_request_id("abc_def-123") == "abc_def-123"


class TestRequestIdMiddleware:
    """Tests for X-Request-ID middleware."""

    @pytest.mark.asyncio
    async def test_request_id_generated_when_missing(self, auth_client, member_headers):
        response = await auth_client.post(URL, json={}, headers=member_headers)

        assert response.status_code == 200
        UUID(response.headers["X-Request-ID"])

    @pytest.mark.asyncio
    async def test_request_id_preserved_when_valid(self, auth_client, member_headers):
        response = await auth_client.post(
            URL, json={}, headers={**member_headers, "X-Request-ID": "abc_def-123"}
        )

        assert response.headers["X-Request-ID"] == "abc_def-123"

    @pytest.mark.asyncio
    async def test_request_id_uuid_normalized_to_lowercase(self, auth_client, member_headers):
        response = await auth_client.post(
            URL,
            json={},
            headers={**member_headers, "X-Request-ID": "550E8400-E29B-41D4-A716-446655440000"},
        )

        assert response.headers["X-Request-ID"] == "550e8400-e29b-41d4-a716-446655440000"

    @pytest.mark.asyncio
    async def test_request_id_replaced_when_invalid(self, auth_client, member_headers):
        response = await auth_client.post(
            URL, json={}, headers={**member_headers, "X-Request-ID": "bad id with spaces"}
        )

        new_id = response.headers["X-Request-ID"]
        assert new_id != "bad id with spaces"
        UUID(new_id)

    @pytest.mark.asyncio
    async def test_request_id_present_on_auth_failure(self, auth_client):
        response = await auth_client.post(URL, json={})

        assert response.status_code == 401
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_error_response_includes_request_id_in_body(self, auth_client, member_headers):
        response = await auth_client.post(
            URL,
            json={"limit": 0},
            headers={**member_headers, "X-Request-ID": "trace-42"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["request_id"] == "trace-42"
