"""
HTTP client for the Sensitivv API.

Thin wrapper over ``httpx.AsyncClient``.  Non-2xx responses raise
``ApiError`` with the server's ``error`` message; transport failures
(connection refused, timeouts) propagate as ``httpx.HTTPError``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from auth.models import AuthResponse, SessionStatus, UserProfile
from config.settings import client_config

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class AuthApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url or client_config.api_base_url,
            timeout=timeout or client_config.request_timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AuthApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @staticmethod
    def _auth_headers(token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    async def _request(self, method: str, path: str, fallback_error: str, **kwargs: Any) -> Any:
        resp = await self._client.request(method, path, **kwargs)
        try:
            data = resp.json()
        except ValueError:
            data = None
        if resp.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            logger.debug("%s %s → %s", method, path, resp.status_code)
            raise ApiError(resp.status_code, message or fallback_error)
        return data

    async def login(self, email: str, password: str) -> AuthResponse:
        data = await self._request(
            "POST", "/api/login", "Authentication failed",
            json={"email": email, "password": password},
        )
        return AuthResponse.model_validate(data)

    async def register(self, email: str, password: str, name: Optional[str] = None) -> AuthResponse:
        body: Dict[str, Any] = {"email": email, "password": password}
        if name:
            body["name"] = name
        data = await self._request("POST", "/api/register", "Registration failed", json=body)
        return AuthResponse.model_validate(data)

    async def validate_session(self, token: str) -> SessionStatus:
        data = await self._request(
            "POST", "/api/validate-session", "Session validation failed",
            headers=self._auth_headers(token),
        )
        return SessionStatus.model_validate(data)

    async def get_user_profile(self, token: str) -> UserProfile:
        data = await self._request(
            "GET", "/api/user-profile", "Failed to fetch profile",
            headers=self._auth_headers(token),
        )
        return UserProfile.model_validate(data)

    async def get_food_items(
        self,
        category: Optional[str] = None,
        reaction_type: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {}
        if category:
            params["category"] = category
        if reaction_type:
            params["reactionType"] = reaction_type
        return await self._request(
            "GET", "/api/food-items", "Failed to fetch food items", params=params,
        )
