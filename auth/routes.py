"""
Auth API routes — register, login, validate-session, user-profile.

Route prefix: /api
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.errors import (
    AppError,
    AuthenticationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from auth.dependencies import db_session, get_token_claims, get_token_issuer
from auth.jwt import TokenClaims, TokenIssuer
from auth.models import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    SessionStatus,
    UserProfile,
)
from auth.password import hash_password, verify_password
from auth.store import CredentialStore, DuplicateEmail

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _require_credentials(email: Optional[str], password: Optional[str]) -> None:
    if not email or not email.strip() or not password:
        raise ValidationError("Email and password are required")


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    req: RegisterRequest,
    session: AsyncSession = Depends(db_session),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthResponse:
    """Create an account and return a fresh session token."""
    _require_credentials(req.email, req.password)
    store = CredentialStore(session)
    try:
        if await store.find_by_email(req.email) is not None:
            raise ConflictError("Email already registered")

        password_hash = await asyncio.to_thread(hash_password, req.password)
        user = await store.create_account(
            req.email, password_hash, name=req.name, check_existing=False
        )
        token = issuer.issue(str(user.user_id), user.email)
    except DuplicateEmail as exc:
        raise ConflictError("Email already registered") from exc
    except AppError:
        raise
    except Exception as exc:
        logger.exception("Registration error")
        raise InternalError("Server error during registration") from exc

    logger.info("Registered user %s", user.user_id)
    return AuthResponse(
        user_id=str(user.user_id),
        name=user.name,
        token=token,
        language=user.language,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    session: AsyncSession = Depends(db_session),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthResponse:
    """Login with email + password."""
    _require_credentials(req.email, req.password)
    try:
        user = await CredentialStore(session).find_by_email(req.email)
        # Unknown email and wrong password must look identical to the caller.
        if user is None or not await asyncio.to_thread(
            verify_password, req.password, user.password_hash
        ):
            logger.info("Login rejected")
            raise AuthenticationError("Authentication failed")
        token = issuer.issue(str(user.user_id), user.email)
    except AppError:
        raise
    except Exception as exc:
        logger.exception("Login error")
        raise InternalError("Server error during login") from exc

    logger.info("Login: %s", user.user_id)
    return AuthResponse(
        user_id=str(user.user_id),
        name=user.name,
        token=token,
        language=user.language or "en",
    )


@router.post("/validate-session", response_model=SessionStatus)
async def validate_session(
    claims: TokenClaims = Depends(get_token_claims),
) -> SessionStatus:
    """The guard already verified the token; echo the account id."""
    return SessionStatus(valid=True, user_id=claims.user_id)


@router.get("/user-profile", response_model=UserProfile)
async def user_profile(
    claims: TokenClaims = Depends(get_token_claims),
    session: AsyncSession = Depends(db_session),
) -> UserProfile:
    try:
        profile = await CredentialStore(session).find_by_id(claims.user_id)
    except Exception as exc:
        logger.exception("Error fetching user profile")
        raise InternalError("Server error") from exc
    if profile is None:
        raise NotFoundError("User not found")
    return UserProfile.model_validate(profile)
