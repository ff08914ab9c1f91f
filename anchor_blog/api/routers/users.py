from __future__ import annotations

from fastapi import APIRouter, Depends, status

from anchor_blog.api.deps import (
    get_activate_account_use_case,
    get_confirm_password_reset_use_case,
    get_current_identity,
    get_get_me_use_case,
    get_get_profile_use_case,
    get_request_activation_use_case,
    get_request_password_reset_use_case,
    get_update_profile_use_case,
    get_validate_password_reset_token_use_case,
)
from anchor_blog.api.schemas.auth import to_auth_user_response
from anchor_blog.api.schemas.users import (
    ActivateResponse,
    EmailRequest,
    MeResponse,
    OkResponse,
    ProfileResponse,
    ResetPasswordRequest,
    SocialLinkSchema,
    TokenValidityResponse,
    UpdateProfileRequest,
)
from anchor_blog.application.dto.auth import AuthContext, ConfirmPasswordResetInput
from anchor_blog.application.dto.profile import ProfileOutput, UpdateProfileInput
from anchor_blog.application.use_cases.activate_account import ActivateAccountUseCase
from anchor_blog.application.use_cases.password_reset import (
    ConfirmPasswordResetUseCase,
    RequestPasswordResetUseCase,
    ValidatePasswordResetTokenUseCase,
)
from anchor_blog.application.use_cases.profile import GetMeUseCase, GetProfileUseCase, UpdateProfileUseCase
from anchor_blog.application.use_cases.request_activation import RequestActivationUseCase
from anchor_blog.domain.entities.user import SocialLink


router = APIRouter()


def _profile_response(output: ProfileOutput) -> ProfileResponse:
    return ProfileResponse(
        bio=output.bio,
        picture_url=output.picture_url,
        social_links=[
            SocialLinkSchema(platform=link.platform, url=link.url) for link in output.social_links
        ],
    )


@router.get("/v1/users/activate", response_model=ActivateResponse)
def activate_account(
    token: str = "",
    use_case: ActivateAccountUseCase = Depends(get_activate_account_use_case),
):
    output = use_case.execute(token=token)
    return ActivateResponse(user=to_auth_user_response(output.user))


@router.post(
    "/v1/users/activation/resend",
    response_model=OkResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def resend_activation(
    req: EmailRequest,
    use_case: RequestActivationUseCase = Depends(get_request_activation_use_case),
):
    use_case.resend_by_email(email=req.email)
    return OkResponse(ok=True)


@router.post("/v1/users/forgot-password", response_model=OkResponse, status_code=status.HTTP_202_ACCEPTED)
def forgot_password(
    req: EmailRequest,
    use_case: RequestPasswordResetUseCase = Depends(get_request_password_reset_use_case),
):
    use_case.execute(email=req.email)
    return OkResponse(ok=True)


@router.get("/v1/users/reset-password/validate", response_model=TokenValidityResponse)
def validate_reset_token(
    token: str = "",
    use_case: ValidatePasswordResetTokenUseCase = Depends(get_validate_password_reset_token_use_case),
):
    return TokenValidityResponse(valid=use_case.execute(token=token))


@router.post("/v1/users/reset-password", response_model=OkResponse)
def reset_password(
    req: ResetPasswordRequest,
    use_case: ConfirmPasswordResetUseCase = Depends(get_confirm_password_reset_use_case),
):
    use_case.execute(ConfirmPasswordResetInput(token=req.token, new_password=req.new_password))
    return OkResponse(ok=True)


@router.get("/v1/users/me", response_model=MeResponse)
def get_me(
    identity: AuthContext = Depends(get_current_identity),
    use_case: GetMeUseCase = Depends(get_get_me_use_case),
):
    output = use_case.execute(user_id=identity.user_id)
    return MeResponse(
        id=output.id,
        username=output.username,
        first_name=output.first_name,
        last_name=output.last_name,
        email=output.email,
        role=output.role.value,
        activated=output.activated,
        last_seen=output.last_seen,
        created_at=output.created_at,
    )


@router.get("/v1/users/me/profile", response_model=ProfileResponse)
def get_profile(
    identity: AuthContext = Depends(get_current_identity),
    use_case: GetProfileUseCase = Depends(get_get_profile_use_case),
):
    return _profile_response(use_case.execute(user_id=identity.user_id))


@router.put("/v1/users/me/profile", response_model=ProfileResponse)
def update_profile(
    req: UpdateProfileRequest,
    identity: AuthContext = Depends(get_current_identity),
    use_case: UpdateProfileUseCase = Depends(get_update_profile_use_case),
):
    social_links = None
    if req.social_links is not None:
        social_links = tuple(SocialLink(platform=link.platform, url=link.url) for link in req.social_links)
    output = use_case.execute(
        UpdateProfileInput(
            user_id=identity.user_id,
            bio=req.bio,
            picture_url=req.picture_url,
            social_links=social_links,
        )
    )
    return _profile_response(output)
