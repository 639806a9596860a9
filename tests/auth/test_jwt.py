"""Tests for session token issuing and validation."""

from datetime import timedelta

import jwt
import pytest

from authsvc.auth.errors import TokenExpiredError, TokenInvalidError
from authsvc.auth.jwt import TokenIssuer
from authsvc.config import Settings


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer("unit-secret")


class TestIssue:
    def test_issue_and_validate(self, issuer: TokenIssuer):
        token = issuer.issue({"user_id": 7, "user_type": "tenant", "email": "a@x.com"})
        claims = issuer.validate(token)
        assert claims["user_id"] == 7
        assert claims["sub"] == "7"
        assert claims["user_type"] == "tenant"
        assert claims["email"] == "a@x.com"
        assert claims["iss"] == "authsvc"

    def test_default_expiry_is_twelve_hours(self, issuer: TokenIssuer):
        claims = issuer.validate(issuer.issue({"user_id": 1}))
        assert claims["exp"] - claims["iat"] == 12 * 60 * 60

    def test_custom_ttl(self, issuer: TokenIssuer):
        claims = issuer.validate(issuer.issue({"user_id": 1}, ttl=timedelta(minutes=5)))
        assert claims["exp"] - claims["iat"] == 300

    def test_missing_user_id_rejected(self, issuer: TokenIssuer):
        with pytest.raises(TokenInvalidError):
            issuer.issue({"email": "a@x.com"})

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError, match="secret"):
            TokenIssuer("")

    def test_from_settings(self):
        settings = Settings(jwt_secret="s3cret", jwt_expire_minutes=30, jwt_issuer="other")
        issuer = TokenIssuer.from_settings(settings)
        claims = issuer.validate(issuer.issue({"user_id": 3}))
        assert claims["iss"] == "other"
        assert claims["exp"] - claims["iat"] == 30 * 60


class TestValidate:
    def test_expired_token(self, issuer: TokenIssuer):
        token = issuer.issue({"user_id": 1}, ttl=timedelta(seconds=-10))
        with pytest.raises(TokenExpiredError):
            issuer.validate(token)

    def test_wrong_secret(self, issuer: TokenIssuer):
        token = TokenIssuer("other-secret").issue({"user_id": 1})
        with pytest.raises(TokenInvalidError):
            issuer.validate(token)

    def test_wrong_issuer(self, issuer: TokenIssuer):
        token = TokenIssuer("unit-secret", issuer="someone-else").issue({"user_id": 1})
        with pytest.raises(TokenInvalidError):
            issuer.validate(token)

    def test_garbage_token(self, issuer: TokenIssuer):
        with pytest.raises(TokenInvalidError):
            issuer.validate("not.a.token")

    def test_token_without_user_id_claim(self, issuer: TokenIssuer):
        token = jwt.encode(
            {"sub": "1", "iat": 1_700_000_000, "exp": 4_000_000_000, "iss": "authsvc"},
            "unit-secret",
            algorithm="HS256",
        )
        with pytest.raises(TokenInvalidError, match="user_id"):
            issuer.validate(token)
