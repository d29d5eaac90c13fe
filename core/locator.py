# core/locator.py
"""
Canonical addressing for Bluesky posts.

A post can be referenced three ways:

  at://did:plc:xxxx/app.bsky.feed.post/3lelut5loqs2u
  https://bsky.app/profile/did:plc:xxxx/post/3lelut5loqs2u
  PostLocator(repository="did:plc:xxxx", record_key="3lelut5loqs2u")

All of them collapse into one `PostLocator`, which can render either form back out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

POST_COLLECTION = "app.bsky.feed.post"
AT_SCHEME = "at"
WEB_SCHEMES = ("https", "http")
APP_URL = "https://bsky.app"

# Repositories are usually DIDs (did:plc:...), whose colons a URL parser would read
# as a host:port separator. They are swapped out before parsing and restored after.
_COLON_PLACEHOLDER = "%3A"


class InvalidAddress(ValueError):
    """Raised when a string cannot be read as a post address."""

    pass


def _escape(value: str) -> str:
    scheme, sep, rest = value.partition("://")
    if not sep:
        raise InvalidAddress(f"Missing scheme in post address: {value!r}")
    return f"{scheme}://{rest.replace(':', _COLON_PLACEHOLDER)}"


def _unescape(value: str) -> str:
    return value.replace(_COLON_PLACEHOLDER, ":")


@dataclass(frozen=True)
class PostLocator:
    """Identity of a post: the owning repository plus the record key inside it."""

    repository: str
    record_key: str

    @classmethod
    def parse(cls, value: str) -> PostLocator:
        """
        Parse an at:// URI or a bsky.app post URL.

        Raises:
            InvalidAddress: for an unknown scheme, the wrong number of path segments,
                or anything the URL parser rejects.
        """
        escaped = _escape((value or "").strip())
        try:
            parts = urlsplit(escaped)
        except ValueError as e:
            raise InvalidAddress(f"Unparseable post address: {value!r}") from e

        # Path always starts with "/", so the first split element is empty.
        segments = parts.path.split("/")[1:]
        scheme = parts.scheme.lower()

        if scheme == AT_SCHEME:
            # at://<repo>/<collection>/<rkey>
            if len(segments) != 2:
                raise InvalidAddress(f"Expected at://<repo>/<collection>/<rkey>, got {value!r}")
            repository, record_key = parts.netloc, segments[1]
        elif scheme in WEB_SCHEMES:
            # https://<host>/profile/<repo>/post/<rkey>
            if len(segments) != 4 or segments[0] != "profile" or segments[2] != "post":
                raise InvalidAddress(f"Expected https://<host>/profile/<repo>/post/<rkey>, got {value!r}")
            repository, record_key = segments[1], segments[-1]
        else:
            raise InvalidAddress(f"Unsupported scheme {parts.scheme!r} in post address: {value!r}")

        repository, record_key = _unescape(repository), _unescape(record_key)
        if not repository or not record_key:
            raise InvalidAddress(f"Empty repository or record key in post address: {value!r}")

        logger.debug("Parsed post address %s -> %s/%s", value, repository, record_key)
        return cls(repository=repository, record_key=record_key)

    def at_uri(self) -> str:
        return f"{AT_SCHEME}://{self.repository}/{POST_COLLECTION}/{self.record_key}"

    def app_uri(self) -> str:
        return f"{APP_URL}/profile/{self.repository}/post/{self.record_key}"

    def __str__(self) -> str:
        return self.at_uri()
