# socials/types.py
from __future__ import annotations

from dataclasses import dataclass

from atproto_client import models as atc_models


@dataclass(frozen=True)
class PostRef:
    """Reference to a stored Bluesky post: the uri + cid pair the API calls a strong ref.

    uri:  at:// address of the record
    cid:  content hash of the exact record version
    """

    uri: str
    cid: str

    def strong_ref(self) -> atc_models.ComAtprotoRepoStrongRef.Main:
        return atc_models.ComAtprotoRepoStrongRef.Main(uri=self.uri, cid=self.cid)
