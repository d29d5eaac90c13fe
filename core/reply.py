# core/reply.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import grapheme
import pytz
from atproto import client_utils
from atproto import models as at_models

from core.models.post import Post

logger = logging.getLogger(__name__)

ACCUSED_PREFIX = "最有可能的歪楼犯："
EVIDENCE_PREFIX = "罪证："
NOT_FOUND_TEXT = "太好了，没有找到歪楼犯"
REPLY_LANGS = ("zh-CN", "en-US")
EXCERPT_LENGTH = 20
ELLIPSIS = "..."


def truncate_ellipsis(text: str, limit: int = EXCERPT_LENGTH) -> str:
    """Cut `text` to `limit` user-perceived characters, marking the cut with '...'."""
    if grapheme.length(text) <= limit:
        return text
    return grapheme.slice(text, 0, limit) + ELLIPSIS


class SideTracker:
    """
    Outcome of one side-track check, ready to be turned into a reply.

    Attributes:
        post (Post | None): The side-tracking post, or None if there isn't one.
        root (Post): Top post of the thread; the reply's thread root.
        entrance (Post): Post the check was started from; the reply's parent.
    """

    def __init__(self, post: Optional[Post], root: Post, entrance: Post):
        self.post = post
        self.root = root
        self.entrance = entrance

    def __eq__(self, other):
        if not isinstance(other, SideTracker):
            return NotImplemented
        return (self.post, self.root, self.entrance) == (other.post, other.root, other.entrance)

    def __repr__(self):
        return f"SideTracker(post={self.post!r}, root={self.root!r}, entrance={self.entrance!r})"

    def reply_ref(self) -> at_models.AppBskyFeedPost.ReplyRef:
        return at_models.AppBskyFeedPost.ReplyRef(
            parent=self.entrance.ref.strong_ref(),
            root=self.root.ref.strong_ref(),
        )

    def _accusation(self, post: Post) -> client_utils.TextBuilder:
        # TextBuilder records facet offsets in UTF-8 bytes of what it has written so far.
        share_uri = post.share_uri
        builder = client_utils.TextBuilder()
        builder.text(ACCUSED_PREFIX)
        builder.mention(f"@{post.handle}", post.did)
        builder.text("\n")
        builder.text(f"{EVIDENCE_PREFIX}{truncate_ellipsis(post.text)}\n")
        builder.link(share_uri, share_uri)
        return builder

    def build_reply(self) -> at_models.AppBskyFeedPost.Record:
        """
        Build the reply record: accusation text with a mention and a link facet, or
        the "nothing found" text with no facets. The reply always hangs off
        `entrance`, threaded under `root`.
        """
        facets = None
        if self.post is not None:
            builder = self._accusation(self.post)
            text = builder.build_text()
            facets = builder.build_facets() or None
        else:
            text = NOT_FOUND_TEXT

        logger.debug("Reply text: %r (facets=%s)", text, facets)
        return at_models.AppBskyFeedPost.Record(
            text=text,
            created_at=datetime.now(pytz.utc).isoformat(),
            facets=facets,
            langs=list(REPLY_LANGS),
            reply=self.reply_ref(),
        )
