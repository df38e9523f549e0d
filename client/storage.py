"""
On-device session persistence.

``SessionStore`` keeps the signed-in identity in an opaque key-value
store under the same keys the mobile app has always used.  Every field is
independently optional: a partially written store is legal and it is up to
the session controller to decide what it means.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)

USER_ID = "userId"
USER_NAME = "userName"
USER_TOKEN = "userToken"
USER_LANGUAGE = "userLanguage"
THEME_MODE = "isDarkMode"   # owned by the theme layer, never touched here


class KeyValueStorage(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage, mostly for tests and previews."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStorage:
    """
    Key-value storage backed by a single JSON file.

    File I/O runs in a worker thread so the event loop never blocks; writes
    go to a temp file that replaces the original atomically.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()
        self._lock = asyncio.Lock()

    def _load(self) -> Dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Session file %s is corrupt; treating it as empty", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".session-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    async def get(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._load)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            data[key] = value
            await asyncio.to_thread(self._dump, data)

    async def remove(self, key: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            if key in data:
                del data[key]
                await asyncio.to_thread(self._dump, data)


@dataclass(frozen=True)
class StoredSession:
    id: Optional[str] = None
    name: Optional[str] = None
    token: Optional[str] = None
    language: Optional[str] = None


_FIELD_KEYS = {
    "id": USER_ID,
    "name": USER_NAME,
    "token": USER_TOKEN,
    "language": USER_LANGUAGE,
}


class SessionStore:
    def __init__(self, storage: KeyValueStorage):
        self._storage = storage

    async def read(self) -> StoredSession:
        values = {field: await self._storage.get(key) for field, key in _FIELD_KEYS.items()}
        return StoredSession(**values)

    async def write(
        self,
        *,
        id: Optional[str] = None,
        name: Optional[str] = None,
        token: Optional[str] = None,
        language: Optional[str] = None,
    ) -> None:
        """Persist the given fields; fields left as None are not touched."""
        given = {"id": id, "name": name, "token": token, "language": language}
        for field, value in given.items():
            if value is not None:
                await self._storage.set(_FIELD_KEYS[field], value)

    async def clear_session(self) -> None:
        """Forget the signed-in identity; the language preference stays."""
        for key in (USER_ID, USER_NAME, USER_TOKEN):
            await self._storage.remove(key)
