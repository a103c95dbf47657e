"""Persistent storage for the session token."""

import logging
import os
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    """Read/write/clear access to a persisted token."""

    def read(self) -> str | None: ...

    def write(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    """Token store that lives only as long as the process."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def read(self) -> str | None:
        return self._token

    def write(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore:
    """Token store backed by a single file readable only by the owner."""

    def __init__(self, path: str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> str | None:
        """Return the stored token, or None if absent or unreadable."""
        try:
            token = self._path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Failed to read token file %s: %s", self._path, e)
            return None
        return token or None

    def write(self, token: str) -> None:
        """Persist the token, creating parent directories as needed."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(token)
        logger.debug("Token written to %s", self._path)

    def clear(self) -> None:
        """Remove the persisted token. Missing files are ignored."""
        try:
            self._path.unlink()
            logger.debug("Token file %s removed", self._path)
        except FileNotFoundError:
            pass
