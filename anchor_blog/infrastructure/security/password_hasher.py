from __future__ import annotations

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from anchor_blog.application.ports.password_hasher_port import PasswordHasherPort


# argon2 for new hashes; bcrypt hashes of older accounts still verify and get flagged for upgrade.
PASSWORD_SCHEMES = ("argon2", "bcrypt")

_default_context = CryptContext(schemes=list(PASSWORD_SCHEMES), deprecated="auto")


def hash_password(plain_password: str, *, context: CryptContext = _default_context) -> str:
    return context.hash(plain_password)


def compare_password(
    password_hash: str | None,
    plain_password: str,
    *,
    context: CryptContext = _default_context,
) -> bool:
    """False for a mismatch and for hashes no configured scheme recognizes."""
    if not password_hash:
        return False
    try:
        return bool(context.verify(plain_password, password_hash))
    except (UnknownHashError, ValueError):
        return False


def compare_and_upgrade(
    password_hash: str | None,
    plain_password: str,
    *,
    context: CryptContext = _default_context,
) -> tuple[bool, str | None]:
    if not password_hash:
        return False, None
    try:
        verified, replacement = context.verify_and_update(plain_password, password_hash)
    except (UnknownHashError, ValueError):
        return False, None
    return bool(verified), replacement if verified else None


class PasswordHasher(PasswordHasherPort):
    def __init__(self, *, schemes: tuple[str, ...] = PASSWORD_SCHEMES):
        if schemes == PASSWORD_SCHEMES:
            self._context = _default_context
        else:
            self._context = CryptContext(schemes=list(schemes), deprecated="auto")

    def hash(self, plain_password: str) -> str:
        return hash_password(plain_password, context=self._context)

    def verify(self, plain_password: str, password_hash: str) -> bool:
        return compare_password(password_hash, plain_password, context=self._context)

    def verify_and_update(self, plain_password: str, password_hash: str) -> tuple[bool, str | None]:
        return compare_and_upgrade(password_hash, plain_password, context=self._context)
