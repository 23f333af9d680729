"""
Tests for access token verification.
"""

from datetime import timedelta

import pytest
from jose import jwt

from dsa_tutor.config.settings import AuthConfig
from dsa_tutor.exceptions import AuthenticationError
from dsa_tutor.services.auth_service import (
    authenticate,
    decode_access_token,
    extract_token,
    user_id_from_claims
)


CONFIG = AuthConfig(secret_key="test-jwt-secret")


class TestExtractToken:

    def test_cookie_wins(self):
        assert extract_token("cookie-token", "Bearer header-token") == "cookie-token"

    def test_bearer_header(self):
        assert extract_token(None, "Bearer header-token") == "header-token"

    def test_other_scheme_ignored(self):
        assert extract_token(None, "Basic dXNlcjpwYXNz") is None

    def test_nothing(self):
        assert extract_token(None, None) is None


class TestDecode:

    def test_valid_token(self, token_factory):
        claims = decode_access_token(token_factory("user-1"), CONFIG)
        assert claims["userId"] == "user-1"

    def test_expired_token(self, token_factory):
        token = token_factory("user-1", expires_in=timedelta(minutes=-5))

        with pytest.raises(AuthenticationError) as exc_info:
            decode_access_token(token, CONFIG)

        assert exc_info.value.message == "Token has expired"

    def test_wrong_key(self, token_factory):
        token = token_factory("user-1", key="another-secret")

        with pytest.raises(AuthenticationError):
            decode_access_token(token, CONFIG)

    def test_garbage_token(self):
        with pytest.raises(AuthenticationError):
            decode_access_token("not-a-jwt", CONFIG)

    def test_missing_secret(self, token_factory):
        with pytest.raises(AuthenticationError):
            decode_access_token(token_factory("user-1"), AuthConfig(secret_key=None))


class TestUserId:

    def test_user_id_claim(self):
        assert user_id_from_claims({"userId": "abc", "sub": "ignored"}) == "abc"

    def test_sub_claim(self):
        assert user_id_from_claims({"sub": "abc"}) == "abc"

    def test_numeric_user_id(self):
        assert user_id_from_claims({"userId": 42}) == "42"

    def test_no_user(self):
        with pytest.raises(AuthenticationError):
            user_id_from_claims({"role": "admin"})

    def test_authenticate_end_to_end(self):
        token = jwt.encode({"sub": "user-9"}, "test-jwt-secret", algorithm="HS256")
        assert authenticate(None, f"Bearer {token}", CONFIG) == "user-9"

    def test_authenticate_without_token(self):
        with pytest.raises(AuthenticationError):
            authenticate(None, None, CONFIG)
