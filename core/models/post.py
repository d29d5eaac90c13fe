# core/models/post.py
from __future__ import annotations

from dataclasses import dataclass, replace

from core.locator import PostLocator
from socials.types import PostRef


@dataclass(frozen=True)
class Post:
    """
    One message in a thread, as captured at fetch time.

    Attributes:
        cid (str): Content hash of the stored record. Opaque, never parsed.
        did (str): Stable identifier of the author's account.
        handle (str): The author's display handle at fetch time.
        text (str): Trimmed body. Empty means a media-only post.
        uri (str): Canonical at:// address of the post.
        position (int): 1-based index in a flattened thread (oldest = 1).
            Stays 0 until the flattener numbers the sequence.
    """

    cid: str
    did: str
    handle: str
    text: str
    uri: str
    position: int = 0

    def with_position(self, position: int) -> Post:
        return replace(self, position=position)

    @property
    def locator(self) -> PostLocator:
        return PostLocator.parse(self.uri)

    @property
    def share_uri(self) -> str:
        """Public bsky.app URL of the post."""
        return self.locator.app_uri()

    @property
    def ref(self) -> PostRef:
        return PostRef(uri=self.uri, cid=self.cid)
