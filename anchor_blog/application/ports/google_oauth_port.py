from __future__ import annotations

from typing import Protocol

from anchor_blog.application.dto.auth import GoogleIdentityInfo


class GoogleOauthPort(Protocol):
    def build_authorization_url(self, *, state: str) -> str:
        ...

    def fetch_identity(self, *, code: str) -> GoogleIdentityInfo:
        ...
