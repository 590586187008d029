"""Tests for POST /suggestions.mention.

Verifies:
- Response envelope and redaction over HTTP
- Request validation returns E_INVALID_REQUEST (400)
- Missing or invalid tokens, unknown and suspended users return 401
- Store failures return E_LOOKUP_FAILED (500)
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from loom.db.models import UserRole
from loom.services import suggestions
from tests.factories import create_test_group, create_test_team, create_test_user
from tests.helpers import auth_headers, mint_test_token

URL = "/suggestions.mention"


class TestSuggestionsMention:
    @pytest.mark.asyncio
    async def test_returns_envelope(self, authenticated_client, db_session):
        team = await create_test_team(db_session)
        admin = await create_test_user(db_session, team, role=UserRole.admin, name="Ada")
        await create_test_user(db_session, team, name="Bea", email="bea@x.io")
        await create_test_group(db_session, team, name="Builders", members=[admin])

        response = await authenticated_client.post(
            URL, json={"query": "b"}, headers=auth_headers(admin.id)
        )

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"offset": 0, "limit": 25}
        assert set(body["data"]) == {"documents", "users", "groups", "collections"}
        (user,) = body["data"]["users"]
        assert user["name"] == "Bea"
        assert user["email"] == "bea@x.io"
        assert body["data"]["groups"][0]["member_count"] == 1

    @pytest.mark.asyncio
    async def test_empty_body_uses_defaults(self, authenticated_client, db_session):
        team = await create_test_team(db_session)
        member = await create_test_user(db_session, team)

        response = await authenticated_client.post(URL, json={}, headers=auth_headers(member.id))

        assert response.status_code == 200
        assert response.json()["pagination"] == {"offset": 0, "limit": 25}

    @pytest.mark.asyncio
    async def test_redacted_fields_are_omitted(self, authenticated_client, db_session):
        team = await create_test_team(db_session)
        viewer = await create_test_user(db_session, team, role=UserRole.viewer, name="Vee")
        await create_test_user(db_session, team, name="Other")

        response = await authenticated_client.post(
            URL, json={"query": "other"}, headers=auth_headers(viewer.id)
        )

        (user,) = response.json()["data"]["users"]
        assert "email" not in user
        assert "language" not in user
        assert "preferences" not in user
        assert user["role"] == "member"

    @pytest.mark.asyncio
    async def test_pagination_is_echoed(self, authenticated_client, db_session):
        team = await create_test_team(db_session)
        member = await create_test_user(db_session, team)

        response = await authenticated_client.post(
            URL, json={"offset": 10, "limit": 5}, headers=auth_headers(member.id)
        )

        assert response.json()["pagination"] == {"offset": 10, "limit": 5}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"offset": -1},
            {"limit": 0},
            {"limit": 101},
            {"query": "x" * 256},
            {"limit": "many"},
            {"unexpected": True},
        ],
    )
    async def test_invalid_body_returns_400(self, authenticated_client, db_session, body):
        team = await create_test_team(db_session)
        member = await create_test_user(db_session, team)

        response = await authenticated_client.post(URL, json=body, headers=auth_headers(member.id))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E_INVALID_REQUEST"

    @pytest.mark.asyncio
    async def test_store_failure_returns_lookup_failed(self, authenticated_client, db_session):
        team = await create_test_team(db_session)
        member = await create_test_user(db_session, team)
        failing = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))

        with patch.object(suggestions.search, "search_collections_for_user", failing):
            response = await authenticated_client.post(
                URL, json={}, headers=auth_headers(member.id)
            )

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "E_LOOKUP_FAILED"


class TestSuggestionsAuthentication:
    @pytest.mark.asyncio
    async def test_missing_token_returns_401(self, authenticated_client):
        response = await authenticated_client.post(URL, json={})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "E_UNAUTHENTICATED"

    @pytest.mark.asyncio
    async def test_malformed_header_returns_401(self, authenticated_client):
        response = await authenticated_client.post(
            URL, json={}, headers={"Authorization": "Token abc"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_bad_signature_returns_401(self, authenticated_client, db_session):
        team = await create_test_team(db_session)
        member = await create_test_user(db_session, team)
        token = mint_test_token(member.id, secret="a-different-secret-of-decent-length")

        response = await authenticated_client.post(
            URL, json={}, headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_token_returns_401(self, authenticated_client, db_session):
        team = await create_test_team(db_session)
        member = await create_test_user(db_session, team)

        response = await authenticated_client.post(
            URL, json={}, headers=auth_headers(member.id, expires_in=-3600)
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Token expired"

    @pytest.mark.asyncio
    async def test_unknown_user_returns_401(self, authenticated_client):
        response = await authenticated_client.post(URL, json={}, headers=auth_headers(uuid4()))

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_suspended_user_returns_401(self, authenticated_client, db_session):
        team = await create_test_team(db_session)
        suspended = await create_test_user(db_session, team, suspended=True)

        response = await authenticated_client.post(
            URL, json={}, headers=auth_headers(suspended.id)
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_health_is_public(self, authenticated_client):
        response = await authenticated_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"data": {"status": "ok"}}


class TestSuggestionsMalformedBody:
    @pytest.mark.asyncio
    async def test_malformed_json_returns_400(self, authenticated_client, db_session):
        team = await create_test_team(db_session)
        member = await create_test_user(db_session, team)

        response = await authenticated_client.post(
            URL,
            content="{invalid json",
            headers={**auth_headers(member.id), "content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E_INVALID_REQUEST"
