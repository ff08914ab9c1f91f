from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class NotFoundError(DomainError):
    """The requested resource does not exist."""


class UserNotFoundError(NotFoundError):
    """No identity matches the given key."""


class RefreshTokenNotFoundError(NotFoundError):
    """No refresh token record matches the given hash."""


class OneTimeTokenNotFoundError(NotFoundError):
    """No activation or reset token matches the given value."""


class InvalidCredentialsError(DomainError):
    """Username or password did not match."""


class InvalidTokenError(DomainError):
    """Token is malformed, badly signed, expired or unknown."""


class ExpiredTokenError(DomainError):
    """One-time token is past its expiry."""


class TokenAlreadyUsedError(DomainError):
    """One-time token was already consumed."""


class TokenSigningError(DomainError):
    """Token could not be signed or verified with the configured key."""


class UnauthorizedError(DomainError):
    """Request carries no usable credentials."""


class ForbiddenError(DomainError):
    """Authenticated identity lacks the required role."""


class ConflictError(DomainError):
    """A unique field is already in use."""


class UsernameTakenError(ConflictError):
    """Username already taken."""


class EmailAlreadyExistsError(ConflictError):
    """Email already registered."""


class ValidationFailedError(DomainError):
    """Input failed validation."""


class InvalidUsernameError(ValidationFailedError):
    """Username must start with a letter and contain only letters, digits and underscores."""


class InvalidNameError(ValidationFailedError):
    """First and last name must have at least three characters."""


class InvalidEmailError(ValidationFailedError):
    """Email is empty or malformed."""


class InvalidPasswordError(ValidationFailedError):
    """Password does not meet the minimum length."""


class RoleChangeError(DomainError):
    """Role transition rejected."""


class UserAlreadyAdminError(RoleChangeError):
    """Target is already an admin."""


class UserNotAdminError(RoleChangeError):
    """Target is not an admin."""


class UserIsUnverifiedError(RoleChangeError):
    """Target has not activated the account."""


class CannotDemoteSelfError(RoleChangeError):
    """An admin cannot demote themselves."""


class RoleChangeNotAllowedError(RoleChangeError):
    """Target role cannot take part in this transition."""


class StorageError(DomainError):
    """Unexpected storage failure."""


class StorageTimeoutError(StorageError):
    """Storage call exceeded its deadline or was cancelled."""


class ExternalIdentityError(DomainError):
    """External identity provider rejected the login."""


class GoogleTokenValidationError(ExternalIdentityError):
    """Google id_token could not be validated."""


class OAuthStateMismatchError(ExternalIdentityError):
    """OAuth state parameter does not match the state cookie."""


class NotificationDeliveryError(DomainError):
    """Out-of-band message could not be delivered."""


class PostNotFoundError(NotFoundError):
    """No post matches the given id."""


class InvalidPostError(ValidationFailedError):
    """Post title, content, tags or query parameters are malformed."""


class PostAccessDeniedError(ForbiddenError):
    """Only the author or an admin may change a post."""


class AlreadyReactedError(ConflictError):
    """The identity already left this reaction on the post."""
