from __future__ import annotations

from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import pytest

from anchor_blog.application.dto.auth import (
    ConfirmPasswordResetInput,
    LoginLocalInput,
    RegisterUserInput,
)
from anchor_blog.application.use_cases.activate_account import ActivateAccountUseCase
from anchor_blog.application.use_cases.login_local import LoginLocalUseCase
from anchor_blog.application.use_cases.one_time_token import OneTimeTokenService
from anchor_blog.application.use_cases.password_reset import (
    ConfirmPasswordResetUseCase,
    RequestPasswordResetUseCase,
    ValidatePasswordResetTokenUseCase,
)
from anchor_blog.application.use_cases.register_user import RegisterUserUseCase
from anchor_blog.application.use_cases.request_activation import RequestActivationUseCase
from anchor_blog.domain.entities.token import TokenPurpose
from anchor_blog.domain.entities.user import Role
from anchor_blog.domain.exceptions import (
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidPasswordError,
    OneTimeTokenNotFoundError,
    StorageError,
    TokenAlreadyUsedError,
)


@pytest.fixture
def activation_tokens(activation_store, clock):
    return OneTimeTokenService(
        purpose=TokenPurpose.ACTIVATION,
        token_port=activation_store,
        default_ttl=timedelta(hours=24),
        clock=clock,
    )


@pytest.fixture
def reset_tokens(reset_store, clock):
    return OneTimeTokenService(
        purpose=TokenPurpose.PASSWORD_RESET,
        token_port=reset_store,
        default_ttl=timedelta(minutes=60),
        clock=clock,
    )


def _token_from_link(link: str) -> str:
    return parse_qs(urlparse(link).query)["token"][0]


def test_issue_persists_unused_random_token(activation_tokens, activation_store, clock):
    issued = activation_tokens.issue(user_id="user-1")

    record = activation_store.tokens[issued.token]
    assert len(issued.token) == 64
    assert record.used is False
    assert record.user_id == "user-1"
    assert record.expires_at == clock.now + timedelta(hours=24)
    assert issued.expires_at == record.expires_at


def test_issued_tokens_are_unique(activation_tokens):
    tokens = {activation_tokens.issue(user_id="user-1").token for _ in range(20)}

    assert len(tokens) == 20


def test_issue_accepts_explicit_ttl(activation_tokens, clock):
    issued = activation_tokens.issue(user_id="user-1", ttl=timedelta(minutes=5))

    assert issued.expires_at == clock.now + timedelta(minutes=5)


def test_is_valid_until_expiry(activation_tokens, clock):
    issued = activation_tokens.issue(user_id="user-1", ttl=timedelta(minutes=10))

    assert activation_tokens.is_valid(token=issued.token) is True
    clock.advance(timedelta(minutes=10) - timedelta(microseconds=1))
    assert activation_tokens.is_valid(token=issued.token) is True
    clock.advance(timedelta(microseconds=1))
    assert activation_tokens.is_valid(token=issued.token) is False


def test_is_valid_false_after_consumption(activation_tokens):
    issued = activation_tokens.issue(user_id="user-1")

    activation_tokens.consume(token=issued.token)

    assert activation_tokens.is_valid(token=issued.token) is False


def test_is_valid_false_for_unknown_or_empty_token(activation_tokens):
    assert activation_tokens.is_valid(token="missing") is False
    assert activation_tokens.is_valid(token="") is False


def test_is_valid_propagates_storage_failure(clock):
    class BrokenStore:
        purpose = TokenPurpose.PASSWORD_RESET

        def get_by_token(self, *, token):
            raise StorageError("connection reset")

    service = OneTimeTokenService(
        purpose=TokenPurpose.PASSWORD_RESET,
        token_port=BrokenStore(),
        default_ttl=timedelta(hours=1),
        clock=clock,
    )

    with pytest.raises(StorageError):
        service.is_valid(token="abc")


def test_consume_succeeds_once(activation_tokens, activation_store):
    issued = activation_tokens.issue(user_id="user-1")

    assert activation_tokens.consume(token=issued.token) == "user-1"
    assert activation_store.tokens[issued.token].used is True
    with pytest.raises(TokenAlreadyUsedError):
        activation_tokens.consume(token=issued.token)


def test_consume_expired_token(activation_tokens, clock):
    issued = activation_tokens.issue(user_id="user-1", ttl=timedelta(minutes=1))
    clock.advance(timedelta(minutes=1))

    with pytest.raises(ExpiredTokenError):
        activation_tokens.consume(token=issued.token)


def test_consume_unknown_token(activation_tokens):
    with pytest.raises(OneTimeTokenNotFoundError):
        activation_tokens.consume(token="does-not-exist")
    with pytest.raises(OneTimeTokenNotFoundError):
        activation_tokens.consume(token="")


def test_token_kinds_do_not_cross_validate(activation_tokens, reset_tokens):
    activation = activation_tokens.issue(user_id="user-1")
    reset = reset_tokens.issue(user_id="user-1")

    assert reset_tokens.is_valid(token=activation.token) is False
    assert activation_tokens.is_valid(token=reset.token) is False
    with pytest.raises(OneTimeTokenNotFoundError):
        reset_tokens.consume(token=activation.token)
    assert activation_tokens.consume(token=activation.token) == "user-1"


def test_service_rejects_store_of_other_purpose(reset_store):
    with pytest.raises(ValueError):
        OneTimeTokenService(
            purpose=TokenPurpose.ACTIVATION,
            token_port=reset_store,
            default_ttl=timedelta(hours=1),
        )


def test_activate_account_rejects_reset_token_service(user_repo, reset_tokens):
    with pytest.raises(ValueError):
        ActivateAccountUseCase(user_port=user_repo, activation_tokens=reset_tokens)


def test_registration_then_activation_scenario(
    user_repo, password_hasher, activation_tokens, notifier, clock, make_user
):
    user_repo.add(make_user(id="first", username="first", email="first@x.com"))
    register = RegisterUserUseCase(user_port=user_repo, password_hasher=password_hasher, clock=clock)
    request_activation = RequestActivationUseCase(
        user_port=user_repo,
        activation_tokens=activation_tokens,
        notifier=notifier,
        public_base_url="https://blog.example.com/",
    )
    activate = ActivateAccountUseCase(user_port=user_repo, activation_tokens=activation_tokens, clock=clock)

    registered = register.execute(
        RegisterUserInput(
            username="alice",
            email="alice@x.com",
            password="secret1",
            first_name="Alice",
            last_name="Doe",
        )
    )
    assert registered.user.role is Role.UNVERIFIED
    assert registered.user.activated is False

    requested = request_activation.execute(user_id=registered.user.id)
    assert requested.delivered is True
    link = notifier.sent[0]["link"]
    assert link.startswith("https://blog.example.com/v1/users/activate?token=")
    assert notifier.sent[0]["recipient"] == "alice@x.com"

    activated = activate.execute(token=_token_from_link(link))
    assert activated.user.role is Role.USER
    assert activated.user.activated is True
    stored = user_repo.get_user_by_id(user_id=registered.user.id)
    assert stored.role is Role.USER
    assert stored.activated is True

    with pytest.raises(TokenAlreadyUsedError):
        activate.execute(token=_token_from_link(link))


def test_activation_keeps_non_unverified_role(user_repo, activation_tokens, make_user):
    user_repo.add(make_user(role=Role.ADMIN, activated=False))
    issued = activation_tokens.issue(user_id="user-1")

    output = ActivateAccountUseCase(user_port=user_repo, activation_tokens=activation_tokens).execute(
        token=issued.token
    )

    assert output.user.role is Role.ADMIN
    assert user_repo.get_user_by_id(user_id="user-1").activated is True


def test_activation_delivery_failure_is_reported_not_raised(
    user_repo, activation_tokens, activation_store, failing_notifier, make_user
):
    user_repo.add(make_user(role=Role.UNVERIFIED, activated=False))
    use_case = RequestActivationUseCase(
        user_port=user_repo,
        activation_tokens=activation_tokens,
        notifier=failing_notifier,
        public_base_url="http://localhost:8080",
    )

    output = use_case.execute(user_id="user-1")

    assert output.delivered is False
    assert len(activation_store.tokens) == 1


def test_resend_activation_skips_activated_and_unknown(user_repo, activation_tokens, notifier, make_user):
    user_repo.add(make_user(activated=True))
    user_repo.add(
        make_user(id="user-2", username="bob", email="bob@x.com", role=Role.UNVERIFIED, activated=False)
    )
    use_case = RequestActivationUseCase(
        user_port=user_repo,
        activation_tokens=activation_tokens,
        notifier=notifier,
        public_base_url="http://localhost:8080",
    )

    assert use_case.resend_by_email(email="alice@x.com") is None
    assert use_case.resend_by_email(email="ghost@x.com") is None
    resent = use_case.resend_by_email(email=" BOB@x.com ")

    assert resent.user_id == "user-2"
    assert [item["recipient"] for item in notifier.sent] == ["bob@x.com"]


def test_password_reset_flow_changes_password_and_revokes_sessions(
    user_repo,
    password_hasher,
    reset_tokens,
    notifier,
    token_service,
    token_hasher,
    refresh_store,
    clock,
    make_user,
):
    user_repo.add(make_user())
    login = LoginLocalUseCase(
        user_port=user_repo,
        password_hasher=password_hasher,
        token_port=token_service,
        token_hasher=token_hasher,
        refresh_token_port=refresh_store,
        clock=clock,
    )
    login.execute(LoginLocalInput(username="alice", password="secret1"))
    assert len(refresh_store.records) == 1

    requested = RequestPasswordResetUseCase(
        user_port=user_repo,
        reset_tokens=reset_tokens,
        notifier=notifier,
        public_base_url="http://localhost:8080",
    ).execute(email="Alice@x.com")
    assert requested is True
    link = notifier.sent[0]["link"]
    assert link.startswith("http://localhost:8080/v1/users/reset-password?token=")
    token = _token_from_link(link)

    validate = ValidatePasswordResetTokenUseCase(reset_tokens=reset_tokens)
    assert validate.execute(token=token) is True

    confirm = ConfirmPasswordResetUseCase(
        user_port=user_repo,
        reset_tokens=reset_tokens,
        password_hasher=password_hasher,
        refresh_token_port=refresh_store,
        clock=clock,
    )
    assert confirm.execute(ConfirmPasswordResetInput(token=token, new_password="new-secret")) == "user-1"

    assert refresh_store.records == {}
    assert validate.execute(token=token) is False
    with pytest.raises(InvalidCredentialsError):
        login.execute(LoginLocalInput(username="alice", password="secret1"))
    login.execute(LoginLocalInput(username="alice", password="new-secret"))


def test_password_reset_for_unknown_email_is_silent(user_repo, reset_tokens, reset_store, notifier):
    use_case = RequestPasswordResetUseCase(
        user_port=user_repo,
        reset_tokens=reset_tokens,
        notifier=notifier,
        public_base_url="http://localhost:8080",
    )

    assert use_case.execute(email="ghost@x.com") is False
    assert notifier.sent == []
    assert reset_store.tokens == {}


def test_password_reset_rejects_short_password_without_consuming(
    user_repo, password_hasher, reset_tokens, refresh_store, make_user
):
    user_repo.add(make_user())
    issued = reset_tokens.issue(user_id="user-1")
    confirm = ConfirmPasswordResetUseCase(
        user_port=user_repo,
        reset_tokens=reset_tokens,
        password_hasher=password_hasher,
        refresh_token_port=refresh_store,
    )

    with pytest.raises(InvalidPasswordError):
        confirm.execute(ConfirmPasswordResetInput(token=issued.token, new_password="12345"))
    assert reset_tokens.is_valid(token=issued.token) is True


def test_password_reset_with_expired_token(
    user_repo, password_hasher, reset_tokens, refresh_store, clock, make_user
):
    user_repo.add(make_user())
    issued = reset_tokens.issue(user_id="user-1")
    clock.advance(timedelta(hours=2))
    confirm = ConfirmPasswordResetUseCase(
        user_port=user_repo,
        reset_tokens=reset_tokens,
        password_hasher=password_hasher,
        refresh_token_port=refresh_store,
        clock=clock,
    )

    with pytest.raises(ExpiredTokenError):
        confirm.execute(ConfirmPasswordResetInput(token=issued.token, new_password="new-secret"))
    assert user_repo.get_user_by_id(user_id="user-1").password_hash == "hashed::secret1"
