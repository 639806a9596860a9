"""Tests for Google ID token verification against a local signing key."""

from __future__ import annotations

import time
from types import SimpleNamespace
from typing import Any

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from authsvc.auth.errors import ExternalIdentityError
from authsvc.auth.google import GoogleIdentityVerifier

CLIENT_ID = "test-client.apps.googleusercontent.com"

_signing_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
_foreign_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)


class StaticKeySource:
    """Stands in for the JWKS client: always returns the same public key."""

    def __init__(self, private_key: rsa.RSAPrivateKey) -> None:
        self._key = SimpleNamespace(key=private_key.public_key())

    def get_signing_key_from_jwt(self, token: str) -> SimpleNamespace:
        return self._key


def _assertion(key: rsa.RSAPrivateKey = _signing_key, **overrides: Any) -> str:
    now = int(time.time())
    claims: dict[str, Any] = {
        "iss": "https://accounts.google.com",
        "aud": CLIENT_ID,
        "sub": "1234567890",
        "iat": now,
        "exp": now + 3600,
        "email": "Ann@Example.com",
        "email_verified": True,
        "name": "Ann",
        "picture": "https://example.com/ann.png",
    }
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(claims, key, algorithm="RS256")


@pytest.fixture
def verifier() -> GoogleIdentityVerifier:
    return GoogleIdentityVerifier(CLIENT_ID, key_source=StaticKeySource(_signing_key))


class TestGoogleIdentityVerifier:
    async def test_valid_assertion(self, verifier: GoogleIdentityVerifier):
        claims = await verifier.verify(_assertion())
        assert claims.email == "ann@example.com"
        assert claims.email_verified is True
        assert claims.name == "Ann"
        assert claims.picture == "https://example.com/ann.png"
        assert claims.gender is None

    async def test_bare_issuer_accepted(self, verifier: GoogleIdentityVerifier):
        claims = await verifier.verify(_assertion(iss="accounts.google.com"))
        assert claims.email == "ann@example.com"

    async def test_email_verified_as_string(self, verifier: GoogleIdentityVerifier):
        assert (await verifier.verify(_assertion(email_verified="true"))).email_verified is True
        assert (await verifier.verify(_assertion(email_verified="false"))).email_verified is False

    async def test_email_verified_absent_means_unverified(self, verifier: GoogleIdentityVerifier):
        claims = await verifier.verify(_assertion(email_verified=None))
        assert claims.email_verified is False

    async def test_wrong_audience(self, verifier: GoogleIdentityVerifier):
        with pytest.raises(ExternalIdentityError):
            await verifier.verify(_assertion(aud="another-client"))

    async def test_wrong_issuer(self, verifier: GoogleIdentityVerifier):
        with pytest.raises(ExternalIdentityError, match="issuer"):
            await verifier.verify(_assertion(iss="https://evil.example.com"))

    async def test_expired(self, verifier: GoogleIdentityVerifier):
        past = int(time.time()) - 7200
        with pytest.raises(ExternalIdentityError):
            await verifier.verify(_assertion(iat=past, exp=past + 60))

    async def test_foreign_signature(self, verifier: GoogleIdentityVerifier):
        with pytest.raises(ExternalIdentityError):
            await verifier.verify(_assertion(key=_foreign_key))

    async def test_missing_email(self, verifier: GoogleIdentityVerifier):
        with pytest.raises(ExternalIdentityError, match="email"):
            await verifier.verify(_assertion(email=None))

    async def test_malformed_assertion(self, verifier: GoogleIdentityVerifier):
        with pytest.raises(ExternalIdentityError):
            await verifier.verify("garbage")

    async def test_unconfigured_client_id(self):
        verifier = GoogleIdentityVerifier("", key_source=StaticKeySource(_signing_key))
        with pytest.raises(ExternalIdentityError, match="not configured"):
            await verifier.verify(_assertion())
