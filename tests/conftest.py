"""Shared pytest fixtures and configuration

This file contains fixtures that can be used across all test files.
Pytest automatically discovers this file and makes fixtures available.
"""

import tempfile
from pathlib import Path

import pytest

from core.models.post import Post

THREAD_VIEW = "app.bsky.feed.defs#threadViewPost"

# ==================== Payload Builders ====================


def _post_view(rkey, text, handle="alice.bsky.social", did="did:plc:alice", embed=None):
    view = {
        "$type": "app.bsky.feed.defs#postView",
        "uri": f"at://{did}/app.bsky.feed.post/{rkey}",
        "cid": f"bafyrei{rkey}",
        "author": {"did": did, "handle": handle},
        "record": {"$type": "app.bsky.feed.post", "text": text, "createdAt": "2025-01-01T00:00:00.000Z"},
    }
    if embed is not None:
        view["embed"] = embed
    return view


def _quote_embed(rkey, text, handle="quoted.bsky.social", did="did:plc:quoted"):
    return {
        "$type": "app.bsky.embed.record#view",
        "record": {
            "$type": "app.bsky.embed.record#viewRecord",
            "uri": f"at://{did}/app.bsky.feed.post/{rkey}",
            "cid": f"bafyrei{rkey}",
            "author": {"did": did, "handle": handle},
            "value": {"$type": "app.bsky.feed.post", "text": text, "createdAt": "2024-12-31T00:00:00.000Z"},
        },
    }


def _chain(*views):
    """Link post views (oldest first) into a thread and return the leaf node."""
    node = None
    for view in views:
        next_node = {"$type": THREAD_VIEW, "post": view}
        if node is not None:
            next_node["parent"] = node
        node = next_node
    return node


@pytest.fixture
def make_post_view():
    return _post_view


@pytest.fixture
def make_quote_embed():
    return _quote_embed


@pytest.fixture
def make_chain():
    return _chain


# ==================== API Response Fixtures ====================


@pytest.fixture
def sample_thread():
    """
    A getPostThread `thread` node shaped like the real API output:

      (quoted) 3le73kidz7k2e  以前有个同事...        <- quoted by the top post
      1        3leb3root0001  这个同事后来怎么样了？  <- top of the reply chain
      2        3leb3rep00002  他后来去卖保险了
      -        3leb3media003  (image only)
      3        3leb3rep00004  说到保险，大家买重疾险了吗\n求推荐
      4        3leb44umzuc2l  猛吃！                   <- entrance
    """
    quote = _quote_embed(
        "3le73kidz7k2e",
        "  以前有个同事每天中午都吃两份饭  ",
        handle="cotranedolphy.bsky.social",
        did="did:plc:fkjudld5cg4ailkuyec65wvg",
    )
    return _chain(
        _post_view("3leb3root0001", "这个同事后来怎么样了？", handle="root.bsky.social", did="did:plc:root", embed=quote),
        _post_view("3leb3rep00002", "他后来去卖保险了", handle="bob.bsky.social", did="did:plc:bob"),
        _post_view("3leb3media003", "   ", handle="carol.bsky.social", did="did:plc:carol"),
        _post_view("3leb3rep00004", "说到保险，大家买重疾险了吗\n求推荐", handle="dave.bsky.social", did="did:plc:dave"),
        _post_view("3leb44umzuc2l", "猛吃！", handle="nghua.me", did="did:plc:xn5b64qpivpq55wumwf6wdjg"),
    )


# ==================== Post Fixtures ====================


@pytest.fixture
def root_post():
    return Post(
        cid="bafyreihvgtbjqmyo2ocpfic3rgjtvepbopaaaaawcccccsxxxxxw3nnjly",
        did="did:plc:fkjudld5cgxxxxxxxxxxxxxx",
        handle="handle1",
        text="text_root",
        uri="at://did:plc:test/app.bsky.feed.post/root",
        position=1,
    )


@pytest.fixture
def entrance_post():
    return Post(
        cid="bafyreihvgtbjqmyo2ocpfic3rgjtvepbopbbbbbwaaaaasyyyyyw3nnjly",
        did="did:plc:fkjudld5cgyyyyyyyyyyyyyy",
        handle="handle2",
        text="text_entrance",
        uri="at://did:plc:test/app.bsky.feed.post/entrance",
        position=12,
    )


@pytest.fixture
def accused_post():
    return Post(
        cid="bafyreihvgtbjqmyo2ocpfic3rgjtvepbopbbbbbwaaaaaszzzzzw3nnjly",
        did="did:plc:fkjudld5cgzzzzzzzzzzzzzz",
        handle="handle3",
        text="text post but very very long",
        uri="at://did:plc:test/app.bsky.feed.post/post",
        position=6,
    )


# ==================== File System Fixtures ====================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
