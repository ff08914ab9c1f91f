from __future__ import annotations

from datetime import datetime

from sqlalchemy import text

from anchor_blog.application.ports.user_port import UserPort
from anchor_blog.domain.entities.user import Role, User, UserProfile
from anchor_blog.domain.exceptions import EmailAlreadyExistsError, UsernameTakenError
from anchor_blog.infrastructure.db.errors import translate_db_errors
from anchor_blog.infrastructure.db.mappers.accounts_mapper import map_row_to_user, profile_to_json

USER_COLUMNS = """
    id, username, first_name, last_name, email, password_hash, role, activated,
    last_seen, profile, updated_by, created_at, updated_at
"""

UNIQUE_VIOLATIONS = {
    "uq_users_username": lambda: UsernameTakenError("Username is already taken."),
    "uq_users_email": lambda: EmailAlreadyExistsError("Email is already registered."),
}


class SqlUserRepository(UserPort):
    def __init__(self, engine):
        self._engine = engine

    def _fetch_one(self, sql: str, params: dict, *, operation: str) -> User | None:
        with translate_db_errors(operation):
            with self._engine.connect() as conn:
                row = conn.execute(text(sql), params).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_user_by_id(self, *, user_id: str) -> User | None:
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM public.users
            WHERE id = :user_id
            LIMIT 1
        """
        return self._fetch_one(sql, {"user_id": user_id}, operation="get_user_by_id")

    def get_user_by_username(self, *, username: str) -> User | None:
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM public.users
            WHERE username = :username
            LIMIT 1
        """
        return self._fetch_one(sql, {"username": username}, operation="get_user_by_username")

    def get_user_by_email(self, *, email: str) -> User | None:
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM public.users
            WHERE lower(email) = :email
            LIMIT 1
        """
        return self._fetch_one(sql, {"email": email.strip().lower()}, operation="get_user_by_email")

    def username_exists(self, *, username: str) -> bool:
        sql = """
            SELECT 1
            FROM public.users
            WHERE username = :username
            LIMIT 1
        """
        with translate_db_errors("username_exists"):
            with self._engine.connect() as conn:
                row = conn.execute(text(sql), {"username": username}).first()
        return row is not None

    def email_exists(self, *, email: str) -> bool:
        sql = """
            SELECT 1
            FROM public.users
            WHERE lower(email) = :email
            LIMIT 1
        """
        with translate_db_errors("email_exists"):
            with self._engine.connect() as conn:
                row = conn.execute(text(sql), {"email": email.strip().lower()}).first()
        return row is not None

    def count_users(self) -> int:
        with translate_db_errors("count_users"):
            with self._engine.connect() as conn:
                value = conn.execute(text("SELECT count(*) FROM public.users")).scalar_one()
        return int(value)

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
        sql = f"""
            INSERT INTO public.users (
                id, username, first_name, last_name, email, password_hash, role,
                activated, profile, created_at, updated_at
            ) VALUES (
                :id, :username, :first_name, :last_name, :email, :password_hash, :role,
                :activated, CAST(:profile AS jsonb), :created_at, :created_at
            )
            RETURNING {USER_COLUMNS}
        """
        params = {
            "id": user_id,
            "username": username,
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "password_hash": password_hash,
            "role": role.value,
            "activated": activated,
            "profile": profile_to_json(profile),
            "created_at": created_at,
        }
        with translate_db_errors("create_user", unique_violations=UNIQUE_VIOLATIONS):
            with self._engine.begin() as conn:
                row = conn.execute(text(sql), params).mappings().one()
        return map_row_to_user(row)

    def update_user_role(self, *, user_id: str, role: Role, updated_by: str, updated_at: datetime) -> None:
        sql = """
            UPDATE public.users
            SET role = :role,
                updated_by = :updated_by,
                updated_at = :updated_at
            WHERE id = :user_id
        """
        with translate_db_errors("update_user_role"):
            with self._engine.begin() as conn:
                conn.execute(
                    text(sql),
                    {
                        "user_id": user_id,
                        "role": role.value,
                        "updated_by": updated_by,
                        "updated_at": updated_at,
                    },
                )

    def activate_user(self, *, user_id: str, role: Role, updated_at: datetime) -> None:
        sql = """
            UPDATE public.users
            SET activated = true,
                role = :role,
                updated_at = :updated_at
            WHERE id = :user_id
        """
        with translate_db_errors("activate_user"):
            with self._engine.begin() as conn:
                conn.execute(text(sql), {"user_id": user_id, "role": role.value, "updated_at": updated_at})

    def update_password_hash(self, *, user_id: str, password_hash: str, updated_at: datetime) -> None:
        sql = """
            UPDATE public.users
            SET password_hash = :password_hash,
                updated_at = :updated_at
            WHERE id = :user_id
        """
        with translate_db_errors("update_password_hash"):
            with self._engine.begin() as conn:
                conn.execute(
                    text(sql),
                    {"user_id": user_id, "password_hash": password_hash, "updated_at": updated_at},
                )

    def update_last_seen(self, *, user_id: str, last_seen: datetime) -> None:
        sql = """
            UPDATE public.users
            SET last_seen = :last_seen
            WHERE id = :user_id
        """
        with translate_db_errors("update_last_seen"):
            with self._engine.begin() as conn:
                conn.execute(text(sql), {"user_id": user_id, "last_seen": last_seen})

    def update_profile(self, *, user_id: str, profile: UserProfile, updated_at: datetime) -> None:
        sql = """
            UPDATE public.users
            SET profile = CAST(:profile AS jsonb),
                updated_at = :updated_at
            WHERE id = :user_id
        """
        with translate_db_errors("update_profile"):
            with self._engine.begin() as conn:
                conn.execute(
                    text(sql),
                    {"user_id": user_id, "profile": profile_to_json(profile), "updated_at": updated_at},
                )
