# socials/bluesky_client.py
# pylint: disable=wrong-import-position

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from pathlib import Path

# Silence noisy Pydantic v2 + atproto_client schema warnings
from pydantic.warnings import UnsupportedFieldAttributeWarning

warnings.filterwarnings("ignore", category=UnsupportedFieldAttributeWarning)

from atproto import Client, Session, SessionEvent
from atproto import models as at_models
from atproto_client.exceptions import NetworkError
from atproto_client.models.utils import get_model_as_dict

from socials.session_store import ChainedSessionStore, FileSessionStore, MemorySessionStore, SessionStore
from socials.types import PostRef
from utils.config import DEFAULT_SERVICE_URL, ConfigError
from utils.retry import retry

logger = logging.getLogger(__name__)

# How far up the reply chain getPostThread reports; replies below the entrance are not needed.
THREAD_PARENT_HEIGHT = 80
THREAD_DEPTH = 1


@dataclass
class BlueskyConfig:
    handle: str | None
    app_password: str | None
    service_url: str | None = None
    session_file: str | Path | None = None


def default_session_store(cfg: BlueskyConfig) -> SessionStore:
    stores: list[SessionStore] = []
    if cfg.session_file:
        stores.append(FileSessionStore(cfg.session_file))
    stores.append(MemorySessionStore())
    return ChainedSessionStore(stores)


class BlueskyClient:
    """
    Thin Bluesky client for the side-tracker bot:
      - Restores the saved session, falling back to a fresh login.
      - Writes every created/refreshed session back to the session store.
      - Fetches reply threads as plain dicts.
      - Creates reply records built elsewhere.
    """

    def __init__(self, cfg: BlueskyConfig, store: SessionStore | None = None, client: Client | None = None):
        self.cfg = cfg
        self.store = store if store is not None else default_session_store(cfg)
        self.client = client if client is not None else Client(cfg.service_url or DEFAULT_SERVICE_URL)
        self.client.on_session_change(self._on_session_change)

    # ---------------- Session helpers ----------------

    def _on_session_change(self, event: SessionEvent, session: Session) -> None:
        if event in (SessionEvent.CREATE, SessionEvent.REFRESH):
            logger.debug("Bluesky session %s; saving.", event)
            self.store.set(session.export())

    def _load_session(self) -> bool:
        session_string = self.store.get()
        if not session_string:
            return False
        try:
            self.client.login(session_string=session_string)
            logger.info("Bluesky session restored.")
            return True
        except Exception as e:
            logger.warning("Failed to restore Bluesky session (%s). Will re-login.", e)
            return False

    def login_or_restore(self) -> None:
        if self._load_session():
            return
        if not self.cfg.handle or not self.cfg.app_password:
            raise ConfigError("No saved Bluesky session and no handle/app password to log in with.")
        logger.info("Logging in to Bluesky as %s", self.cfg.handle)
        self.client.login(self.cfg.handle, self.cfg.app_password)

    # ---------------- API calls ----------------

    @retry(max_attempts=3, delay=1.0, exceptions=(NetworkError,))
    def get_post_thread(self, uri: str, depth: int = THREAD_DEPTH, parent_height: int = THREAD_PARENT_HEIGHT) -> dict:
        """Fetch the thread around `uri` and return its `thread` node as a plain dict."""
        logger.info("Fetching thread %s", uri)
        response = self.client.get_post_thread(uri=uri, depth=depth, parent_height=parent_height)
        return get_model_as_dict(response.thread)

    def create_reply(self, record: at_models.AppBskyFeedPost.Record) -> PostRef:
        """Write `record` to the logged-in account's repo and return a reference to it."""
        repo = self.client.me.did
        created = self.client.app.bsky.feed.post.create(repo, record)
        uri, cid = str(created.uri), str(created.cid)
        logger.info("Reply created: %s", uri)
        return PostRef(uri=uri, cid=cid)
