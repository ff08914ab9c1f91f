from __future__ import annotations

import logging
from uuid import uuid4

from anchor_blog.application.dto.auth import RegisterUserInput, RegisterUserOutput
from anchor_blog.application.ports.password_hasher_port import PasswordHasherPort
from anchor_blog.application.ports.user_port import UserPort
from anchor_blog.domain.entities.user import FirstUserPolicy, Role, UserProfile
from anchor_blog.domain.exceptions import EmailAlreadyExistsError, UsernameTakenError
from anchor_blog.domain.services.registration_rules import (
    validate_email,
    validate_name,
    validate_password,
    validate_username,
)

from .auth_common import Clock, build_auth_user_output, utcnow


logger = logging.getLogger(__name__)


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        user_port: UserPort,
        password_hasher: PasswordHasherPort,
        first_user_policy: FirstUserPolicy = FirstUserPolicy.UNVERIFIED,
        clock: Clock = utcnow,
    ):
        self._user_port = user_port
        self._password_hasher = password_hasher
        self._first_user_policy = first_user_policy
        self._clock = clock

    def execute(self, command: RegisterUserInput) -> RegisterUserOutput:
        username = validate_username(command.username)
        email = validate_email(command.email)
        first_name = validate_name(command.first_name, field_name="first_name")
        last_name = validate_name(command.last_name, field_name="last_name")
        password = validate_password(command.password)

        if self._user_port.username_exists(username=username):
            raise UsernameTakenError("Username already taken.")
        if self._user_port.email_exists(email=email):
            raise EmailAlreadyExistsError("Email already in use.")

        role, activated = self._initial_role()
        user = self._user_port.create_user(
            user_id=str(uuid4()),
            username=username,
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=self._password_hasher.hash(password),
            role=role,
            activated=activated,
            profile=UserProfile(),
            created_at=self._clock(),
        )
        logger.info(
            "register_user: created user_id=%s username=%s role=%s",
            user.id,
            user.username,
            user.role.value,
        )
        return RegisterUserOutput(user=build_auth_user_output(user))

    def _initial_role(self) -> tuple[Role, bool]:
        if self._first_user_policy is FirstUserPolicy.SUPERADMIN_BYPASS:
            if self._user_port.count_users() == 0:
                logger.warning("register_user: bootstrapping first user as superadmin")
                return Role.SUPERADMIN, True
        return Role.UNVERIFIED, False
