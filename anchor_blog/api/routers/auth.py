from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone

from fastapi import APIRouter, Cookie, Depends, Response, status
from fastapi.responses import RedirectResponse

from anchor_blog.api.deps import (
    get_current_identity,
    get_google_oauth_port,
    get_login_google_use_case,
    get_login_local_use_case,
    get_logout_session_use_case,
    get_refresh_session_use_case,
    get_register_user_use_case,
    get_request_activation_use_case,
)
from anchor_blog.api.schemas.auth import (
    AuthTokenResponse,
    LoginRequest,
    LogoutResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    to_auth_user_response,
)
from anchor_blog.application.dto.auth import (
    AuthContext,
    AuthTokensOutput,
    LoginGoogleInput,
    LoginLocalInput,
    LogoutInput,
    RefreshSessionInput,
    RegisterUserInput,
)
from anchor_blog.application.ports.google_oauth_port import GoogleOauthPort
from anchor_blog.application.use_cases.login_google import LoginGoogleUseCase
from anchor_blog.application.use_cases.login_local import LoginLocalUseCase
from anchor_blog.application.use_cases.logout_session import LogoutSessionUseCase
from anchor_blog.application.use_cases.refresh_session import RefreshSessionUseCase
from anchor_blog.application.use_cases.register_user import RegisterUserUseCase
from anchor_blog.application.use_cases.request_activation import RequestActivationUseCase
from anchor_blog.domain.exceptions import InvalidTokenError, OAuthStateMismatchError, StorageError


logger = logging.getLogger(__name__)

router = APIRouter()

REFRESH_COOKIE_NAME = "refresh_token"
REFRESH_COOKIE_PATH = "/v1/auth"
OAUTH_STATE_COOKIE_NAME = "oauthstate"
OAUTH_STATE_MAX_AGE_SECONDS = 600


def _set_refresh_cookie(response: Response, refresh_token: str, max_age_seconds: int) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=refresh_token,
        httponly=True,
        samesite="lax",
        secure=False,
        max_age=max_age_seconds,
        path=REFRESH_COOKIE_PATH,
    )


def _cookie_max_age_seconds(refresh_expires_at: datetime) -> int:
    now = datetime.now(timezone.utc)
    return max(int((refresh_expires_at - now).total_seconds()), 0)


def _token_response(response: Response, output: AuthTokensOutput) -> AuthTokenResponse:
    _set_refresh_cookie(
        response,
        output.refresh_token,
        max_age_seconds=_cookie_max_age_seconds(output.refresh_expires_at),
    )
    return AuthTokenResponse(
        access_token=output.access_token,
        refresh_token=output.refresh_token,
        access_expires_at=output.access_expires_at,
        refresh_expires_at=output.refresh_expires_at,
        user=to_auth_user_response(output.user),
    )


@router.post("/v1/auth/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register_user(
    req: RegisterRequest,
    use_case: RegisterUserUseCase = Depends(get_register_user_use_case),
    activation_use_case: RequestActivationUseCase = Depends(get_request_activation_use_case),
):
    output = use_case.execute(
        RegisterUserInput(
            username=req.username,
            email=req.email,
            password=req.password,
            first_name=req.first_name,
            last_name=req.last_name,
        )
    )

    activation_sent = False
    if not output.user.activated:
        try:
            activation = activation_use_case.execute(user_id=output.user.id)
            activation_sent = activation.delivered
        except StorageError as exc:
            logger.warning(
                "auth_router: activation not issued user_id=%s error=%s",
                output.user.id,
                exc,
            )

    return RegisterResponse(user=to_auth_user_response(output.user), activation_sent=activation_sent)


@router.post("/v1/auth/login", response_model=AuthTokenResponse)
def login_local(
    req: LoginRequest,
    response: Response,
    use_case: LoginLocalUseCase = Depends(get_login_local_use_case),
):
    output = use_case.execute(LoginLocalInput(username=req.username, password=req.password))
    return _token_response(response, output)


@router.post("/v1/auth/refresh", response_model=AuthTokenResponse)
def refresh_auth(
    response: Response,
    req: RefreshRequest | None = None,
    refresh_token_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE_NAME),
    use_case: RefreshSessionUseCase = Depends(get_refresh_session_use_case),
):
    refresh_token = (req.refresh_token if req else None) or refresh_token_cookie
    if not refresh_token:
        raise InvalidTokenError("Missing refresh token.")

    output = use_case.execute(RefreshSessionInput(refresh_token=refresh_token))
    return _token_response(response, output)


@router.post("/v1/auth/logout", response_model=LogoutResponse)
def logout_auth(
    response: Response,
    identity: AuthContext = Depends(get_current_identity),
    use_case: LogoutSessionUseCase = Depends(get_logout_session_use_case),
):
    use_case.execute(LogoutInput(user_id=identity.user_id))
    response.delete_cookie(key=REFRESH_COOKIE_NAME, path=REFRESH_COOKIE_PATH)
    return LogoutResponse(ok=True)


@router.get("/v1/auth/google/login")
def google_login(google_oauth: GoogleOauthPort = Depends(get_google_oauth_port)):
    state = secrets.token_urlsafe(32)
    redirect = RedirectResponse(
        url=google_oauth.build_authorization_url(state=state),
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )
    redirect.set_cookie(
        key=OAUTH_STATE_COOKIE_NAME,
        value=state,
        httponly=True,
        samesite="lax",
        secure=False,
        max_age=OAUTH_STATE_MAX_AGE_SECONDS,
    )
    return redirect


@router.get("/v1/auth/google/callback", response_model=AuthTokenResponse)
def google_callback(
    response: Response,
    code: str = "",
    state: str = "",
    oauth_state_cookie: str | None = Cookie(default=None, alias=OAUTH_STATE_COOKIE_NAME),
    use_case: LoginGoogleUseCase = Depends(get_login_google_use_case),
):
    if not state or not oauth_state_cookie or not secrets.compare_digest(
        state.encode("utf-8"), oauth_state_cookie.encode("utf-8")
    ):
        raise OAuthStateMismatchError("Invalid OAuth state.")

    output = use_case.execute(LoginGoogleInput(code=code))
    response.delete_cookie(key=OAUTH_STATE_COOKIE_NAME)
    return _token_response(response, output)
