"""
Credential store — account lookup and creation on top of the ``users`` table.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User

logger = logging.getLogger(__name__)


class DuplicateEmail(Exception):
    """An account with this email already exists."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already registered")


def _to_uuid(value: str | uuid.UUID) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return None


def public_profile(user: User) -> Dict[str, Any]:
    """Account projection without the password hash."""
    return {
        "userId": str(user.user_id),
        "email": user.email,
        "name": user.name,
        "language": user.language or "en",
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


class CredentialStore:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: str | uuid.UUID) -> Optional[Dict[str, Any]]:
        """Return the public profile for ``user_id``, or None."""
        uid = _to_uuid(user_id)
        if uid is None:
            return None
        result = await self._session.execute(select(User).where(User.user_id == uid))
        user = result.scalar_one_or_none()
        return public_profile(user) if user else None

    async def create_account(
        self,
        email: str,
        password_hash: str,
        name: Optional[str] = None,
        language: str = "en",
        *,
        check_existing: bool = True,
    ) -> User:
        """
        Insert a new account and commit it.

        The lookup only gives a friendlier error; the unique index on
        ``users.email`` decides concurrent registrations, and its
        violation is reported as ``DuplicateEmail`` as well.  Callers that
        already looked the email up pass ``check_existing=False``.
        """
        if check_existing and await self.find_by_email(email) is not None:
            raise DuplicateEmail(email)

        user = User(
            user_id=uuid.uuid4(),
            email=email,
            password_hash=password_hash,
            name=name or email.split("@")[0],
            language=language,
        )
        self._session.add(user)
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            logger.info("Unique constraint rejected duplicate registration")
            raise DuplicateEmail(email) from exc
        return user
