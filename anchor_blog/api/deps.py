from __future__ import annotations

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, Request

from anchor_blog.application.dto.auth import AuthContext
from anchor_blog.application.use_cases.activate_account import ActivateAccountUseCase
from anchor_blog.application.use_cases.authenticate_request import (
    AuthenticateRequestUseCase,
    require_role,
)
from anchor_blog.application.use_cases.change_role import DemoteToUserUseCase, PromoteToAdminUseCase
from anchor_blog.application.use_cases.login_google import LoginGoogleUseCase
from anchor_blog.application.use_cases.login_local import LoginLocalUseCase
from anchor_blog.application.use_cases.logout_session import LogoutSessionUseCase
from anchor_blog.application.use_cases.one_time_token import OneTimeTokenService
from anchor_blog.application.use_cases.password_reset import (
    ConfirmPasswordResetUseCase,
    RequestPasswordResetUseCase,
    ValidatePasswordResetTokenUseCase,
)
from anchor_blog.application.use_cases.post_reactions import (
    GetReactionStatusUseCase,
    ReactToPostUseCase,
    RemoveReactionUseCase,
)
from anchor_blog.application.use_cases.posts import (
    CreatePostUseCase,
    DeletePostUseCase,
    FilterPostsUseCase,
    GetPopularPostsUseCase,
    GetPostUseCase,
    GetPostViewCountUseCase,
    GetViewStatsUseCase,
    ListPostsUseCase,
    SearchPostsUseCase,
    UpdatePostUseCase,
)
from anchor_blog.application.use_cases.profile import GetMeUseCase, GetProfileUseCase, UpdateProfileUseCase
from anchor_blog.application.use_cases.refresh_session import RefreshSessionUseCase
from anchor_blog.application.use_cases.register_user import RegisterUserUseCase
from anchor_blog.application.use_cases.request_activation import RequestActivationUseCase
from anchor_blog.domain.entities.token import TokenPurpose
from anchor_blog.domain.entities.user import Role
from anchor_blog.infrastructure.clients.google_oauth_client import (
    GoogleOauthClient,
    GoogleOauthClientSettings,
)
from anchor_blog.infrastructure.clients.logging_notifier import LoggingNotifier
from anchor_blog.infrastructure.db.engine import get_engine
from anchor_blog.infrastructure.db.repositories.one_time_token_repository import (
    SqlOneTimeTokenRepository,
)
from anchor_blog.infrastructure.db.repositories.post_repository import SqlPostRepository
from anchor_blog.infrastructure.db.repositories.refresh_token_repository import (
    SqlRefreshTokenRepository,
)
from anchor_blog.infrastructure.db.repositories.user_repository import SqlUserRepository
from anchor_blog.infrastructure.security.password_hasher import PasswordHasher
from anchor_blog.infrastructure.security.token_hasher import HmacTokenHasher
from anchor_blog.infrastructure.security.token_service import JwtTokenService
from anchor_blog.shared.config import get_settings


def _get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    return get_engine(
        settings.postgres_dsn,
        statement_timeout_ms=settings.db_statement_timeout_ms,
        pool_timeout_seconds=settings.db_pool_timeout_seconds,
    )


def _get_user_repository() -> SqlUserRepository:
    return SqlUserRepository(_get_db_engine())


def _get_refresh_token_repository() -> SqlRefreshTokenRepository:
    return SqlRefreshTokenRepository(_get_db_engine())


def _get_post_repository() -> SqlPostRepository:
    return SqlPostRepository(_get_db_engine())


@lru_cache(maxsize=1)
def _get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@lru_cache(maxsize=1)
def _get_token_service() -> JwtTokenService:
    settings = get_settings()
    if not settings.jwt_access_secret:
        raise HTTPException(status_code=500, detail="JWT_ACCESS_SECRET is required.")
    if not settings.jwt_refresh_secret:
        raise HTTPException(status_code=500, detail="JWT_REFRESH_SECRET is required.")
    return JwtTokenService(
        access_secret=settings.jwt_access_secret,
        refresh_secret=settings.jwt_refresh_secret,
        access_ttl_minutes=settings.jwt_access_ttl_minutes,
        refresh_ttl_days=settings.jwt_refresh_ttl_days,
    )


@lru_cache(maxsize=1)
def _get_token_hasher() -> HmacTokenHasher:
    settings = get_settings()
    if not settings.hmac_secret:
        raise HTTPException(status_code=500, detail="HMAC_SECRET is required.")
    return HmacTokenHasher(secret=settings.hmac_secret)


@lru_cache(maxsize=1)
def _get_google_oauth_client() -> GoogleOauthClient:
    settings = get_settings()
    if not settings.google_client_id:
        raise HTTPException(status_code=500, detail="GOOGLE_CLIENT_ID is required.")
    if not settings.google_client_secret:
        raise HTTPException(status_code=500, detail="GOOGLE_CLIENT_SECRET is required.")
    return GoogleOauthClient(
        GoogleOauthClientSettings(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            redirect_uri=settings.google_redirect_uri,
        )
    )


@lru_cache(maxsize=1)
def _get_notifier() -> LoggingNotifier:
    return LoggingNotifier()


def _get_activation_tokens() -> OneTimeTokenService:
    settings = get_settings()
    return OneTimeTokenService(
        purpose=TokenPurpose.ACTIVATION,
        token_port=SqlOneTimeTokenRepository(_get_db_engine(), purpose=TokenPurpose.ACTIVATION),
        default_ttl=timedelta(hours=settings.activation_token_ttl_hours),
    )


def _get_reset_tokens() -> OneTimeTokenService:
    settings = get_settings()
    return OneTimeTokenService(
        purpose=TokenPurpose.PASSWORD_RESET,
        token_port=SqlOneTimeTokenRepository(_get_db_engine(), purpose=TokenPurpose.PASSWORD_RESET),
        default_ttl=timedelta(minutes=settings.password_reset_token_ttl_minutes),
    )


def get_google_oauth_port() -> GoogleOauthClient:
    return _get_google_oauth_client()


def get_register_user_use_case() -> RegisterUserUseCase:
    return RegisterUserUseCase(
        user_port=_get_user_repository(),
        password_hasher=_get_password_hasher(),
        first_user_policy=get_settings().first_user_policy,
    )


def get_login_local_use_case() -> LoginLocalUseCase:
    return LoginLocalUseCase(
        user_port=_get_user_repository(),
        password_hasher=_get_password_hasher(),
        token_port=_get_token_service(),
        token_hasher=_get_token_hasher(),
        refresh_token_port=_get_refresh_token_repository(),
    )


def get_login_google_use_case() -> LoginGoogleUseCase:
    return LoginGoogleUseCase(
        user_port=_get_user_repository(),
        google_oauth_port=_get_google_oauth_client(),
        token_port=_get_token_service(),
        token_hasher=_get_token_hasher(),
        refresh_token_port=_get_refresh_token_repository(),
    )


def get_refresh_session_use_case() -> RefreshSessionUseCase:
    return RefreshSessionUseCase(
        user_port=_get_user_repository(),
        token_port=_get_token_service(),
        token_hasher=_get_token_hasher(),
        refresh_token_port=_get_refresh_token_repository(),
    )


def get_logout_session_use_case() -> LogoutSessionUseCase:
    return LogoutSessionUseCase(refresh_token_port=_get_refresh_token_repository())


def get_request_activation_use_case() -> RequestActivationUseCase:
    return RequestActivationUseCase(
        user_port=_get_user_repository(),
        activation_tokens=_get_activation_tokens(),
        notifier=_get_notifier(),
        public_base_url=get_settings().public_base_url,
    )


def get_activate_account_use_case() -> ActivateAccountUseCase:
    return ActivateAccountUseCase(
        user_port=_get_user_repository(),
        activation_tokens=_get_activation_tokens(),
    )


def get_request_password_reset_use_case() -> RequestPasswordResetUseCase:
    return RequestPasswordResetUseCase(
        user_port=_get_user_repository(),
        reset_tokens=_get_reset_tokens(),
        notifier=_get_notifier(),
        public_base_url=get_settings().public_base_url,
    )


def get_validate_password_reset_token_use_case() -> ValidatePasswordResetTokenUseCase:
    return ValidatePasswordResetTokenUseCase(reset_tokens=_get_reset_tokens())


def get_confirm_password_reset_use_case() -> ConfirmPasswordResetUseCase:
    return ConfirmPasswordResetUseCase(
        user_port=_get_user_repository(),
        reset_tokens=_get_reset_tokens(),
        password_hasher=_get_password_hasher(),
        refresh_token_port=_get_refresh_token_repository(),
    )


def get_promote_to_admin_use_case() -> PromoteToAdminUseCase:
    return PromoteToAdminUseCase(user_port=_get_user_repository())


def get_demote_to_user_use_case() -> DemoteToUserUseCase:
    return DemoteToUserUseCase(user_port=_get_user_repository())


def get_get_me_use_case() -> GetMeUseCase:
    return GetMeUseCase(user_port=_get_user_repository())


def get_get_profile_use_case() -> GetProfileUseCase:
    return GetProfileUseCase(user_port=_get_user_repository())


def get_update_profile_use_case() -> UpdateProfileUseCase:
    return UpdateProfileUseCase(user_port=_get_user_repository())


def get_create_post_use_case() -> CreatePostUseCase:
    return CreatePostUseCase(post_port=_get_post_repository())


def get_get_post_use_case() -> GetPostUseCase:
    return GetPostUseCase(post_port=_get_post_repository())


def get_list_posts_use_case() -> ListPostsUseCase:
    return ListPostsUseCase(post_port=_get_post_repository())


def get_search_posts_use_case() -> SearchPostsUseCase:
    return SearchPostsUseCase(post_port=_get_post_repository())


def get_filter_posts_use_case() -> FilterPostsUseCase:
    return FilterPostsUseCase(post_port=_get_post_repository())


def get_update_post_use_case() -> UpdatePostUseCase:
    return UpdatePostUseCase(post_port=_get_post_repository())


def get_delete_post_use_case() -> DeletePostUseCase:
    return DeletePostUseCase(post_port=_get_post_repository())


def get_post_view_count_use_case() -> GetPostViewCountUseCase:
    return GetPostViewCountUseCase(post_port=_get_post_repository())


def get_popular_posts_use_case() -> GetPopularPostsUseCase:
    return GetPopularPostsUseCase(post_port=_get_post_repository())


def get_view_stats_use_case() -> GetViewStatsUseCase:
    return GetViewStatsUseCase(post_port=_get_post_repository())


def get_react_to_post_use_case() -> ReactToPostUseCase:
    return ReactToPostUseCase(post_port=_get_post_repository())


def get_remove_reaction_use_case() -> RemoveReactionUseCase:
    return RemoveReactionUseCase(post_port=_get_post_repository())


def get_reaction_status_use_case() -> GetReactionStatusUseCase:
    return GetReactionStatusUseCase(post_port=_get_post_repository())


def get_authenticate_request_use_case() -> AuthenticateRequestUseCase:
    return AuthenticateRequestUseCase(token_port=_get_token_service())


def get_current_identity(
    request: Request,
    authorization: str | None = Header(default=None),
    use_case: AuthenticateRequestUseCase = Depends(get_authenticate_request_use_case),
) -> AuthContext:
    context = use_case.execute(authorization=authorization)
    request.state.identity = context
    return context


def require_roles(*roles: Role):
    def _dependency(identity: AuthContext = Depends(get_current_identity)) -> AuthContext:
        return require_role(identity, roles)

    return _dependency
