# core/thread.py
"""
Flatten a Bluesky reply chain into a numbered, oldest-first sequence of posts.

Input is the `thread` node of an `app.bsky.feed.getPostThread` response, as a plain
dict: each node holds a `post` view and, unless it is the top of the chain, a
`parent` node. The walk runs leaf -> root and the result is reversed into
chronological order.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from core.models.post import Post

logger = logging.getLogger(__name__)

RECORD_WITH_MEDIA_VIEW = "app.bsky.embed.recordWithMedia#view"


@dataclass(frozen=True)
class FlattenedThread:
    """
    posts:     oldest-first, numbered 1..N
    root:      top of the real reply chain (never the quoted post)
    entrance:  the leaf the walk started from
    """

    posts: tuple[Post, ...]
    root: Post
    entrance: Post

    def __len__(self) -> int:
        return len(self.posts)

    def __iter__(self):
        return iter(self.posts)


def parse_post(post_view: Mapping[str, Any]) -> Post:
    """Build an unnumbered Post from a `postView` dict."""
    author = post_view["author"]
    record = post_view.get("record") or {}
    return Post(
        cid=post_view["cid"],
        did=author["did"],
        handle=author["handle"],
        text=(record.get("text") or "").strip(),
        uri=post_view["uri"],
    )


def _embedded_view_record(post_view: Mapping[str, Any]) -> Mapping[str, Any]:
    embed = post_view.get("embed") or {}
    record = embed.get("record") or {}
    # recordWithMedia nests the quoted post one level deeper
    if embed.get("$type") == RECORD_WITH_MEDIA_VIEW:
        record = record.get("record") or {}
    return record


def parse_embedded(post_view: Mapping[str, Any]) -> Optional[Post]:
    """
    Return the post quoted by `post_view`, or None.

    Deleted, blocked or non-post embeds (no text, missing author/uri/cid) count as
    no embedded post at all.
    """
    record = _embedded_view_record(post_view)
    if not isinstance(record, Mapping):
        return None

    value = record.get("value") or {}
    author = record.get("author") or {}
    text = value.get("text") if isinstance(value, Mapping) else None
    fields = (text, author.get("handle"), author.get("did"), record.get("uri"), record.get("cid"))
    if not all(isinstance(f, str) and f for f in fields) or not text.strip():
        return None

    return Post(
        cid=record["cid"],
        did=author["did"],
        handle=author["handle"],
        text=text.strip(),
        uri=record["uri"],
    )


def _parent_of(node: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    # notFoundPost / blockedPost parents carry no `post` and end the chain
    parent = node.get("parent")
    if isinstance(parent, Mapping) and "post" in parent:
        return parent
    return None


def flatten(leaf: Mapping[str, Any]) -> FlattenedThread:
    """
    Walk from `leaf` up through its parents and return the numbered thread.

    Posts without text are left out of the sequence but still walked through. If
    the top post quotes another post, the quoted post is put in front of the
    sequence; it is numbered like the others but never becomes `root`.
    """
    posts: deque[Post] = deque()
    entrance: Optional[Post] = None
    root: Optional[Post] = None

    node = leaf
    while True:
        post_view = node["post"]
        post = parse_post(post_view)
        if entrance is None:
            entrance = post
        if post.text:
            posts.appendleft(post)
        else:
            logger.debug("Skipping post without text: %s", post.uri)

        parent = _parent_of(node)
        if parent is None:
            root = posts[0] if posts else post
            embedded = parse_embedded(post_view)
            if embedded is not None:
                logger.debug("Top post %s quotes %s; adding it to the thread.", post.uri, embedded.uri)
                posts.appendleft(embedded)
            break
        node = parent

    numbered = []
    for position, post in enumerate(posts, start=1):
        numbered_post = post.with_position(position)
        if post is root:
            root = numbered_post
        if post is entrance:
            entrance = numbered_post
        numbered.append(numbered_post)

    logger.info("Flattened thread of %d posts (root=%s, entrance=%s).", len(numbered), root.uri, entrance.uri)
    return FlattenedThread(posts=tuple(numbered), root=root, entrance=entrance)
