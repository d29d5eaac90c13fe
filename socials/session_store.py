# socials/session_store.py
"""
Where the exported Bluesky session string lives between runs.

Stores are interchangeable and can be chained: a `ChainedSessionStore` reads from
the first store that has a session, and writes/clears every store.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """
    All session backends implement this.

    MUST:
      - Return None from get() when nothing is stored
      - Never raise from set()/clear() for storage problems (log instead)
    """

    def get(self) -> Optional[str]: ...

    def set(self, session: str) -> None: ...

    def clear(self) -> None: ...


class MemorySessionStore:
    def __init__(self, session: Optional[str] = None):
        self._session = session

    def get(self) -> Optional[str]:
        return self._session

    def set(self, session: str) -> None:
        self._session = session

    def clear(self) -> None:
        self._session = None


class FileSessionStore:
    """Keeps the session in a single file readable by the owner only (0600)."""

    FILE_MODE = 0o600

    def __init__(self, path):
        self.path = Path(path)

    def get(self) -> Optional[str]:
        try:
            session = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read session file %s: %s", self.path, e)
            return None
        return session or None

    def set(self, session: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, self.FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(session)
            # os.open only applies the mode when it creates the file
            os.chmod(self.path, self.FILE_MODE)
            logger.info("Bluesky session saved to %s", self.path)
        except OSError as e:
            logger.warning("Could not write session file %s: %s", self.path, e)

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove session file %s: %s", self.path, e)


class ChainedSessionStore:
    """First store with a session wins on read; writes and clears go to all stores."""

    def __init__(self, stores: Iterable[SessionStore]):
        self.stores: List[SessionStore] = list(stores)

    def get(self) -> Optional[str]:
        for store in self.stores:
            session = store.get()
            if session:
                return session
        return None

    def set(self, session: str) -> None:
        for store in self.stores:
            store.set(session)

    def clear(self) -> None:
        for store in self.stores:
            store.clear()
