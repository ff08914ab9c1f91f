from __future__ import annotations

from datetime import datetime
from typing import Protocol

from anchor_blog.domain.entities.user import Role, User, UserProfile


class UserPort(Protocol):
    def get_user_by_id(self, *, user_id: str) -> User | None:
        ...

    def get_user_by_username(self, *, username: str) -> User | None:
        ...

    def get_user_by_email(self, *, email: str) -> User | None:
        ...

    def username_exists(self, *, username: str) -> bool:
        ...

    def email_exists(self, *, email: str) -> bool:
        ...

    def count_users(self) -> int:
        ...

    def create_user(
        self,
        *,
        user_id: str,
        username: str,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str | None,
        role: Role,
        activated: bool,
        profile: UserProfile,
        created_at: datetime,
    ) -> User:
        ...

    def update_user_role(self, *, user_id: str, role: Role, updated_by: str, updated_at: datetime) -> None:
        ...

    def activate_user(self, *, user_id: str, role: Role, updated_at: datetime) -> None:
        ...

    def update_password_hash(self, *, user_id: str, password_hash: str, updated_at: datetime) -> None:
        ...

    def update_last_seen(self, *, user_id: str, last_seen: datetime) -> None:
        ...

    def update_profile(self, *, user_id: str, profile: UserProfile, updated_at: datetime) -> None:
        ...
