from __future__ import annotations

from anchor_blog.domain.entities.user import Role
from anchor_blog.domain.exceptions import (
    CannotDemoteSelfError,
    RoleChangeNotAllowedError,
    UserAlreadyAdminError,
    UserIsUnverifiedError,
    UserNotAdminError,
)


def role_after_promotion(current: Role) -> Role:
    if current is Role.USER:
        return Role.ADMIN
    if current is Role.ADMIN:
        raise UserAlreadyAdminError("User is already an admin.")
    if current is Role.UNVERIFIED:
        raise UserIsUnverifiedError("User is unverified.")
    if current is Role.SUPERADMIN:
        raise RoleChangeNotAllowedError("A superadmin cannot be promoted.")
    raise ValueError(f"Unknown role: {current!r}")


def role_after_demotion(*, actor_id: str, target_id: str, current: Role) -> Role:
    # Checked before the target's role so self-demotion fails regardless of role.
    if actor_id == target_id:
        raise CannotDemoteSelfError("An admin cannot demote themselves.")
    if current is Role.ADMIN:
        return Role.USER
    if current in (Role.USER, Role.UNVERIFIED, Role.SUPERADMIN):
        raise UserNotAdminError("User is not an admin.")
    raise ValueError(f"Unknown role: {current!r}")


def role_after_activation(current: Role) -> Role:
    if current is Role.UNVERIFIED:
        return Role.USER
    if current in (Role.USER, Role.ADMIN, Role.SUPERADMIN):
        return current
    raise ValueError(f"Unknown role: {current!r}")
