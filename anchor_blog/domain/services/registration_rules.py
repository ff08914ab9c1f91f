from __future__ import annotations

import re

from anchor_blog.domain.exceptions import (
    InvalidEmailError,
    InvalidNameError,
    InvalidPasswordError,
    InvalidUsernameError,
)


USERNAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MIN_USERNAME_LENGTH = 3
MIN_NAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_username(username: str) -> str:
    username = username.strip()
    if not username:
        raise InvalidUsernameError("username cannot be empty.")
    if len(username) < MIN_USERNAME_LENGTH or not USERNAME_PATTERN.match(username):
        raise InvalidUsernameError(
            "username must start with a letter, contain only letters, digits or underscores "
            f"and have at least {MIN_USERNAME_LENGTH} characters."
        )
    return username


def validate_email(email: str) -> str:
    email = normalize_email(email)
    if not email:
        raise InvalidEmailError("email cannot be empty.")
    if not EMAIL_PATTERN.match(email):
        raise InvalidEmailError("email is malformed.")
    return email


def validate_name(value: str, *, field_name: str) -> str:
    value = value.strip()
    if len(value) < MIN_NAME_LENGTH:
        raise InvalidNameError(f"{field_name} must have at least {MIN_NAME_LENGTH} characters.")
    return value


def validate_password(password: str) -> str:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidPasswordError(
            f"password must have at least {MIN_PASSWORD_LENGTH} characters."
        )
    return password
