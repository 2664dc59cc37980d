"""
Tests for access token verification.
"""

from datetime import timedelta

import pytest
from jose import jwt

from core.config import settings
from core.security import create_access_token, decode_token


@pytest.mark.unit
class TestAccessTokens:
    def test_round_trip(self) -> None:
        token = create_access_token("user-1")
        payload = decode_token(token)

        assert payload is not None
        assert payload["sub"] == "user-1"
        assert payload["aud"] == settings.AUTH_JWT_AUDIENCE

    def test_expired_token_rejected(self) -> None:
        token = create_access_token("user-1", expires_delta=timedelta(seconds=-5))
        assert decode_token(token) is None

    def test_wrong_audience_rejected(self) -> None:
        token = create_access_token("user-1", extra_claims={"aud": "anon"})
        assert decode_token(token) is None

    def test_wrong_secret_rejected(self) -> None:
        token = jwt.encode(
            {"sub": "user-1", "aud": settings.AUTH_JWT_AUDIENCE},
            "some-other-secret",
            algorithm="HS256",
        )
        assert decode_token(token) is None

    def test_garbage_rejected(self) -> None:
        assert decode_token("not-a-jwt") is None


@pytest.mark.unit
class TestSettings:
    def test_postgres_url_uses_asyncpg(self) -> None:
        assert settings.POSTGRES_URL.startswith("postgresql+asyncpg://")

    def test_cors_origins_list(self) -> None:
        assert isinstance(settings.cors_origins_list, list)
