from __future__ import annotations

from typing import Protocol


class TokenHasherPort(Protocol):
    def hash(self, raw_token: str) -> str:
        ...

    def matches(self, token_hash: str, raw_token: str) -> bool:
        ...
