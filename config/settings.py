"""
Application settings loaded from environment variables.
"""

from __future__ import annotations

import logging
import secrets
from pathlib import Path
from typing import Optional

from pydantic import PrivateAttr
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the configuration is unusable for the current environment."""


class Settings(BaseSettings):
    environment: str = "development"   # "production" enables strict checks

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./sensitivv.db"

    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: Optional[str] = None          # HMAC secret for session tokens
    jwt_expiry_seconds: int = 604800           # 7 days
    bcrypt_rounds: int = 10

    _ephemeral_secret: Optional[str] = PrivateAttr(default=None)

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 5008
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    def signing_secret(self) -> str:
        """
        Return the HMAC secret used to sign session tokens.

        Outside production a missing ``JWT_SECRET`` is replaced by a random
        per-process secret, so tokens do not survive a restart.  In
        production it is a hard error.
        """
        if self.jwt_secret:
            return self.jwt_secret
        if self.is_production:
            raise ConfigError("JWT_SECRET must be set in production")
        if self._ephemeral_secret is None:
            logger.warning(
                "JWT_SECRET not set — using an ephemeral signing secret; "
                "issued tokens will be invalid after restart"
            )
            self._ephemeral_secret = secrets.token_urlsafe(48)
        return self._ephemeral_secret


class ClientSettings(BaseSettings):
    """On-device settings for the mobile client session layer."""

    api_base_url: str = "http://localhost:5008"
    session_file: Path = Path.home() / ".sensitivv" / "session.json"
    request_timeout: float = 15.0

    model_config = {
        "env_prefix": "SENSITIVV_",
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }


config = Settings()
client_config = ClientSettings()
