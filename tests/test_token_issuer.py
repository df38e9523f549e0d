"""
Tests for session token issuing and verification.
"""

import json
from base64 import urlsafe_b64decode, urlsafe_b64encode

import pytest

from auth.jwt import InvalidToken, TokenIssuer

WEEK = 7 * 24 * 3600


def _b64(obj) -> str:
    return urlsafe_b64encode(json.dumps(obj).encode()).decode().rstrip("=")


class TestTokenIssuer:
    def test_verify_right_after_issue(self, clock):
        issuer = TokenIssuer("secret", WEEK, clock=clock)
        token = issuer.issue("u1", "a@x.com")
        claims = issuer.verify(token)
        assert claims.user_id == "u1"
        assert claims.email == "a@x.com"
        assert claims.expires_at == int(clock.now) + WEEK

    def test_token_is_compact_jws(self, clock):
        token = TokenIssuer("secret", WEEK, clock=clock).issue("u1", "a@x.com")
        header_b64, payload_b64, _ = token.split(".")
        header = json.loads(urlsafe_b64decode(header_b64 + "=" * (-len(header_b64) % 4)))
        payload = json.loads(urlsafe_b64decode(payload_b64 + "=" * (-len(payload_b64) % 4)))
        assert header == {"alg": "HS256", "typ": "JWT"}
        assert payload["userId"] == "u1"
        assert "password" not in payload

    def test_valid_until_window_elapses(self, clock):
        issuer = TokenIssuer("secret", WEEK, clock=clock)
        token = issuer.issue("u1", "a@x.com")

        clock.advance(WEEK - 1)
        assert issuer.verify(token).user_id == "u1"

        clock.advance(1)
        with pytest.raises(InvalidToken, match="expired"):
            issuer.verify(token)

    def test_wrong_secret_rejected(self, clock):
        token = TokenIssuer("secret", WEEK, clock=clock).issue("u1", "a@x.com")
        with pytest.raises(InvalidToken, match="signature"):
            TokenIssuer("other-secret", WEEK, clock=clock).verify(token)

    def test_tampered_payload_rejected(self, clock):
        issuer = TokenIssuer("secret", WEEK, clock=clock)
        header, _, sig = issuer.issue("u1", "a@x.com").split(".")
        forged = _b64({"userId": "admin", "email": "a@x.com", "iat": 0, "exp": 10**12})
        with pytest.raises(InvalidToken):
            issuer.verify(f"{header}.{forged}.{sig}")

    @pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c.d", "é.é.é", "....."])
    def test_malformed_rejected(self, token):
        with pytest.raises(InvalidToken):
            TokenIssuer("secret").verify(token)

    def test_signed_payload_without_claims_rejected(self, clock):
        import hashlib
        import hmac

        header = _b64({"alg": "HS256", "typ": "JWT"})
        payload = _b64(["not", "a", "dict"])
        sig = hmac.new(b"secret", f"{header}.{payload}".encode(), hashlib.sha256).digest()
        sig_b64 = urlsafe_b64encode(sig).decode().rstrip("=")
        with pytest.raises(InvalidToken, match="payload"):
            TokenIssuer("secret", clock=clock).verify(f"{header}.{payload}.{sig_b64}")

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            TokenIssuer("")
