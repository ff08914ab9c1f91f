from __future__ import annotations

import base64
import hashlib
import hmac

from anchor_blog.application.ports.token_hasher_port import TokenHasherPort


def hash_token(raw_token: str, secret: str) -> str:
    """Keyed digest used to look tokens up without storing them."""
    digest = hmac.new(secret.encode("utf-8"), raw_token.encode("utf-8"), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii")


class HmacTokenHasher(TokenHasherPort):
    def __init__(self, *, secret: str):
        if not secret:
            raise ValueError("HMAC secret is required.")
        self._secret = secret

    def hash(self, raw_token: str) -> str:
        return hash_token(raw_token, self._secret)

    def matches(self, token_hash: str, raw_token: str) -> bool:
        return hmac.compare_digest(token_hash.encode("ascii"), self.hash(raw_token).encode("ascii"))
