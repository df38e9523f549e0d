"""
JWT session token creation and verification.

Tokens are compact HS256 JWTs (``header.payload.signature``, base64url)
carrying ``userId``, ``email``, ``iat`` and ``exp``.  Nothing is stored
server-side: a correctly signed, unexpired token is the only proof of
authentication, and there is no revocation list.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from dataclasses import dataclass
from typing import Any, Callable, Dict

_HEADER = {"alg": "HS256", "typ": "JWT"}


class InvalidToken(Exception):
    """Signature mismatch, malformed payload, or expired token."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    issued_at: int
    expires_at: int


def _b64url_encode(data: bytes) -> str:
    return urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    pad = "=" * (-len(data) % 4)
    return urlsafe_b64decode((data + pad).encode("ascii"))


def _encode_segment(obj: Dict[str, Any]) -> str:
    return _b64url_encode(json.dumps(obj, separators=(",", ":")).encode())


class TokenIssuer:
    """Mints and verifies signed session tokens with a fixed validity window."""

    def __init__(
        self,
        secret: str,
        expiry_seconds: int = 604800,
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self._secret = secret.encode()
        self._expiry_seconds = expiry_seconds
        self._clock = clock

    def _sign(self, signing_input: bytes) -> bytes:
        return hmac.new(self._secret, signing_input, hashlib.sha256).digest()

    def issue(self, user_id: str, email: str) -> str:
        """Create a signed token for ``user_id`` / ``email``."""
        now = int(self._clock())
        payload = {
            "userId": user_id,
            "email": email,
            "iat": now,
            "exp": now + self._expiry_seconds,
        }
        signing_input = f"{_encode_segment(_HEADER)}.{_encode_segment(payload)}"
        signature = _b64url_encode(self._sign(signing_input.encode("ascii")))
        return f"{signing_input}.{signature}"

    def verify(self, token: str) -> TokenClaims:
        """
        Verify ``token`` and return its claims.

        Raises ``InvalidToken`` on a bad signature, a malformed payload, or
        once the expiry has passed (checked against the clock now, not at
        issuance).
        """
        try:
            header_b64, payload_b64, sig_b64 = token.split(".")
            signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
            if not hmac.compare_digest(self._sign(signing_input), _b64url_decode(sig_b64)):
                raise InvalidToken("bad signature")
            header = json.loads(_b64url_decode(header_b64))
            payload = json.loads(_b64url_decode(payload_b64))
        except InvalidToken:
            raise
        except (ValueError, UnicodeError, AttributeError) as exc:
            raise InvalidToken("malformed token") from exc

        if not isinstance(header, dict) or header.get("alg") != "HS256":
            raise InvalidToken("unsupported token header")
        if not isinstance(payload, dict):
            raise InvalidToken("malformed payload")

        user_id = payload.get("userId")
        email = payload.get("email")
        exp = payload.get("exp")
        iat = payload.get("iat", 0)
        if not isinstance(user_id, str) or not isinstance(email, str):
            raise InvalidToken("missing claims")
        if not isinstance(exp, int) or not isinstance(iat, int):
            raise InvalidToken("missing expiry")
        if exp <= self._clock():
            raise InvalidToken("token expired")

        return TokenClaims(user_id=user_id, email=email, issued_at=iat, expires_at=exp)
