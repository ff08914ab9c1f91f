from __future__ import annotations

from fastapi import APIRouter, Depends

from anchor_blog.api.deps import (
    get_demote_to_user_use_case,
    get_promote_to_admin_use_case,
    require_roles,
)
from anchor_blog.api.schemas.admin import RoleChangeResponse
from anchor_blog.application.dto.auth import AuthContext, ChangeRoleInput
from anchor_blog.application.use_cases.change_role import DemoteToUserUseCase, PromoteToAdminUseCase
from anchor_blog.domain.entities.user import Role


router = APIRouter()

require_superadmin = require_roles(Role.SUPERADMIN)


@router.patch("/v1/admin/users/{user_id}/promote", response_model=RoleChangeResponse)
def promote_user(
    user_id: str,
    identity: AuthContext = Depends(require_superadmin),
    use_case: PromoteToAdminUseCase = Depends(get_promote_to_admin_use_case),
):
    role = use_case.execute(ChangeRoleInput(actor_id=identity.user_id, target_id=user_id))
    return RoleChangeResponse(user_id=user_id, role=role.value)


@router.patch("/v1/admin/users/{user_id}/demote", response_model=RoleChangeResponse)
def demote_user(
    user_id: str,
    identity: AuthContext = Depends(require_superadmin),
    use_case: DemoteToUserUseCase = Depends(get_demote_to_user_use_case),
):
    role = use_case.execute(ChangeRoleInput(actor_id=identity.user_id, target_id=user_id))
    return RoleChangeResponse(user_id=user_id, role=role.value)
