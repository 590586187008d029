"""Unit tests for the HS256 token verifier."""

from uuid import uuid4

import pytest

from loom.auth.verifier import JwtVerifier
from loom.errors import ApiError, ApiErrorCode
from tests.helpers import TEST_AUDIENCE, TEST_ISSUER, TEST_SECRET, mint_test_token


@pytest.fixture
def verifier() -> JwtVerifier:
    return JwtVerifier(secret=TEST_SECRET, issuer=TEST_ISSUER + "/", audiences=[TEST_AUDIENCE])


class TestJwtVerifier:
    def test_valid_token_returns_claims(self, verifier):
        user_id = str(uuid4())

        claims = verifier.verify(mint_test_token(user_id))

        assert claims["sub"] == user_id

    def test_issuer_trailing_slash_is_normalized(self, verifier):
        assert verifier.issuer == TEST_ISSUER

    def test_clock_skew_is_tolerated(self, verifier):
        claims = verifier.verify(mint_test_token(uuid4(), expires_in=-30))

        assert "sub" in claims

    @pytest.mark.parametrize(
        "token_kwargs,message",
        [
            ({"expires_in": -3600}, "Token expired"),
            ({"secret": "another-secret-another-secret-!!"}, "Invalid token signature"),
            ({"issuer": "someone-else"}, "Invalid token issuer"),
            ({"audience": "other-api"}, "Invalid token audience"),
        ],
    )
    def test_rejected_tokens(self, verifier, token_kwargs, message):
        with pytest.raises(ApiError) as exc_info:
            verifier.verify(mint_test_token(uuid4(), **token_kwargs))

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED
        assert exc_info.value.message == message

    def test_garbage_token_rejected(self, verifier):
        with pytest.raises(ApiError) as exc_info:
            verifier.verify("not-a-jwt")

        assert exc_info.value.message == "Invalid token format"

    def test_non_uuid_sub_rejected(self, verifier):
        with pytest.raises(ApiError) as exc_info:
            verifier.verify(mint_test_token("not-a-uuid"))

        assert "sub" in exc_info.value.message
