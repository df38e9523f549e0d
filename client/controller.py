"""
Client session controller.

Owns the UI-facing ``AuthState`` and is its only writer.  It drives
login, registration and logout against the API, persists the resulting
identity through ``SessionStore``, and on startup reconciles the cached
identity with the server before trusting it.

Within one operation the store is always written before the new state is
published, so a subscriber that sees ``AUTHENTICATED`` can rely on the
token being on disk.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Hashable, List, Optional, Tuple

from auth.models import AuthResponse, UserProfile
from client.api import ApiError, AuthApiClient
from client.storage import SessionStore

logger = logging.getLogger(__name__)

Listener = Callable[["AuthState"], None]
Notifier = Callable[[str, str], None]


class AuthStatus(str, Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class AuthState:
    status: AuthStatus
    user_id: Optional[str] = None
    user_name: Optional[str] = None

    @classmethod
    def loading(cls) -> "AuthState":
        return cls(AuthStatus.LOADING)

    @classmethod
    def unauthenticated(cls) -> "AuthState":
        return cls(AuthStatus.UNAUTHENTICATED)

    @classmethod
    def authenticated(cls, user_id: str, user_name: Optional[str]) -> "AuthState":
        return cls(AuthStatus.AUTHENTICATED, user_id, user_name)

    @property
    def is_authenticated(self) -> bool:
        return self.status is AuthStatus.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.status is AuthStatus.LOADING


class SessionError(Exception):
    pass


class SessionBusyError(SessionError):
    """A different login/register/logout is still in flight."""


class NotSignedInError(SessionError):
    pass


def _describe(exc: Exception, fallback: str) -> str:
    if isinstance(exc, ApiError) and exc.message:
        return exc.message
    return fallback


class SessionController:
    def __init__(
        self,
        api: AuthApiClient,
        store: SessionStore,
        notify: Optional[Notifier] = None,
    ):
        self._api = api
        self._store = store
        self._notify = notify
        self._state = AuthState.loading()
        self._listeners: List[Listener] = []
        self._inflight: Optional[Tuple[Hashable, asyncio.Future]] = None
        self._restored = False

    # ── State exposure ──────────────────────────────────────────────────

    @property
    def state(self) -> AuthState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for state transitions; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, new_state: AuthState) -> None:
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("Auth state listener failed")

    # ── In-flight de-duplication ───────────────────────────────────────

    async def _run_exclusive(self, key: Hashable, operation: Callable[[], Awaitable[Any]]) -> Any:
        if self._inflight is not None:
            inflight_key, future = self._inflight
            if inflight_key == key:
                return await asyncio.shield(future)
            raise SessionBusyError(f"{inflight_key[0]} already in progress")

        future = asyncio.get_running_loop().create_future()
        self._inflight = (key, future)
        try:
            result = await operation()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Joiners re-raise it themselves; mark it retrieved for the loop.
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            self._inflight = None

    # ── Operations ──────────────────────────────────────────────────────

    async def restore(self) -> AuthState:
        """
        Startup session restoration; runs once.

        Cached identity is adopted only after the server confirms the
        token.  Any failure along the way demotes to unauthenticated and
        is never raised.
        """
        inflight = self._inflight
        if inflight is not None and inflight[0] != ("restore",):
            # A login/register/logout already talks to the server and will
            # settle the state; wait for it instead of racing it.
            try:
                await asyncio.shield(inflight[1])
            except Exception as exc:
                logger.info("Skipped session restore after concurrent operation failed: %s", exc)
            self._restored = True
            return self._state
        if self._restored:
            return self._state
        return await self._run_exclusive(("restore",), self._restore)

    async def _restore(self) -> AuthState:
        next_state = AuthState.unauthenticated()
        try:
            stored = await self._store.read()
            if stored.id and stored.token:
                try:
                    status = await self._api.validate_session(stored.token)
                    if not status.valid or status.user_id != stored.id:
                        raise ApiError(403, "Session does not match stored identity")
                    next_state = AuthState.authenticated(stored.id, stored.name)
                except Exception as exc:
                    logger.info("Session validation failed, clearing auth data: %s", exc)
                    await self._store.clear_session()
        except Exception:
            logger.exception("Error checking authentication")
        finally:
            self._restored = True
            self._set_state(next_state)
        return self._state

    async def login(self, email: str, password: str) -> AuthState:
        return await self._run_exclusive(
            ("login", email, password),
            lambda: self._sign_in(
                lambda: self._api.login(email, password),
                "Login Error",
                "Login failed. Please try again.",
            ),
        )

    async def register(self, email: str, password: str, name: Optional[str] = None) -> AuthState:
        return await self._run_exclusive(
            ("register", email, password, name),
            lambda: self._sign_in(
                lambda: self._api.register(email, password, name),
                "Registration Error",
                "Registration failed. Please try again.",
            ),
        )

    async def _sign_in(
        self,
        call: Callable[[], Awaitable[AuthResponse]],
        error_title: str,
        fallback_message: str,
    ) -> AuthState:
        previous = self._state
        persisting = False
        self._set_state(AuthState.loading())
        try:
            payload = await call()
            persisting = True
            await self._store.write(
                id=payload.user_id,
                name=payload.name,
                token=payload.token,
                language=payload.language,
            )
        except Exception as exc:
            logger.error("%s: %s", error_title, exc)
            if persisting:
                # A half-written session cannot be trusted at the next start.
                await self._discard_session()
            self._emit_notice(error_title, _describe(exc, fallback_message))
            raise
        else:
            self._set_state(AuthState.authenticated(payload.user_id, payload.name))
            return self._state
        finally:
            if self._state.is_loading:
                # Until the store was touched it still holds the previous
                # session, so the state falls back to match it.
                if previous.is_authenticated and not persisting:
                    self._set_state(previous)
                else:
                    self._set_state(AuthState.unauthenticated())

    async def _discard_session(self) -> None:
        try:
            await self._store.clear_session()
        except Exception:
            logger.exception("Could not clear partially written session")

    def _emit_notice(self, title: str, message: str) -> None:
        if self._notify is not None:
            self._notify(title, message)

    async def logout(self) -> AuthState:
        """
        Forget the local session.

        There is no server-side session to invalidate, so a storage failure
        is reported through ``notify`` but the state still becomes
        unauthenticated.
        """
        return await self._run_exclusive(("logout",), self._logout)

    async def _logout(self) -> AuthState:
        self._set_state(AuthState.loading())
        try:
            await self._store.clear_session()
        except Exception:
            logger.exception("Error during logout")
            self._emit_notice("Logout Error", "There was a problem logging out. Please try again.")
        finally:
            self._set_state(AuthState.unauthenticated())
        return self._state

    async def get_profile(self) -> UserProfile:
        stored = await self._store.read()
        if not stored.token:
            raise NotSignedInError("No token found")
        return await self._api.get_user_profile(stored.token)
