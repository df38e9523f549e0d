"""
FastAPI dependencies for authentication.

Provides ``db_session``, ``get_token_issuer`` and ``get_token_claims``,
the bearer-token guard used by every protected route.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import AsyncGenerator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from api.errors import AuthenticationError, ForbiddenError
from auth.jwt import InvalidToken, TokenClaims, TokenIssuer
from config.settings import config
from database.session import get_db_session

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported as 401 by us, not by FastAPI.
_bearer_scheme = HTTPBearer(auto_error=False)


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


@lru_cache(maxsize=1)
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer(config.signing_secret(), config.jwt_expiry_seconds)


async def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenClaims:
    """
    Extract and verify the Bearer token.

    No token → 401; a token that fails verification → 403.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Unauthorized")
    try:
        return issuer.verify(credentials.credentials)
    except InvalidToken as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise ForbiddenError() from exc
