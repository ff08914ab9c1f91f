from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from anchor_blog.application.dto.auth import (
    LoginGoogleInput,
    LoginLocalInput,
    LogoutInput,
    RefreshSessionInput,
    RegisterUserInput,
)
from anchor_blog.application.use_cases.login_google import LoginGoogleUseCase
from anchor_blog.application.use_cases.login_local import LoginLocalUseCase
from anchor_blog.application.use_cases.logout_session import LogoutSessionUseCase
from anchor_blog.application.use_cases.refresh_session import RefreshSessionUseCase
from anchor_blog.application.use_cases.register_user import RegisterUserUseCase
from anchor_blog.domain.entities.user import FirstUserPolicy, Role
from anchor_blog.domain.exceptions import (
    EmailAlreadyExistsError,
    GoogleTokenValidationError,
    InvalidCredentialsError,
    InvalidEmailError,
    InvalidNameError,
    InvalidPasswordError,
    InvalidTokenError,
    InvalidUsernameError,
    UsernameTakenError,
)


def _alice(**overrides) -> RegisterUserInput:
    values = {
        "username": "alice",
        "email": "alice@x.com",
        "password": "secret1",
        "first_name": "Alice",
        "last_name": "Doe",
    }
    values.update(overrides)
    return RegisterUserInput(**values)


@pytest.fixture
def register_use_case(user_repo, password_hasher, clock):
    return RegisterUserUseCase(user_port=user_repo, password_hasher=password_hasher, clock=clock)


@pytest.fixture
def login_use_case(user_repo, password_hasher, token_service, token_hasher, refresh_store, clock):
    return LoginLocalUseCase(
        user_port=user_repo,
        password_hasher=password_hasher,
        token_port=token_service,
        token_hasher=token_hasher,
        refresh_token_port=refresh_store,
        clock=clock,
    )


@pytest.fixture
def refresh_use_case(user_repo, token_service, token_hasher, refresh_store, clock):
    return RefreshSessionUseCase(
        user_port=user_repo,
        token_port=token_service,
        token_hasher=token_hasher,
        refresh_token_port=refresh_store,
        clock=clock,
    )


def test_register_user_starts_unverified(register_use_case, user_repo, make_user):
    user_repo.add(make_user(id="existing", username="zed", email="zed@x.com"))

    output = register_use_case.execute(_alice())

    assert output.user.role is Role.UNVERIFIED
    assert output.user.activated is False
    stored = user_repo.get_user_by_id(user_id=output.user.id)
    assert stored.password_hash == "hashed::secret1"
    assert stored.first_name == "Alice"


def test_register_user_normalizes_email(register_use_case):
    output = register_use_case.execute(_alice(email="  Alice@X.com "))

    assert output.user.email == "alice@x.com"


def test_first_user_is_unverified_by_default(register_use_case):
    output = register_use_case.execute(_alice())

    assert output.user.role is Role.UNVERIFIED
    assert output.user.activated is False


def test_first_user_bypass_policy_creates_superadmin(user_repo, password_hasher, clock):
    use_case = RegisterUserUseCase(
        user_port=user_repo,
        password_hasher=password_hasher,
        first_user_policy=FirstUserPolicy.SUPERADMIN_BYPASS,
        clock=clock,
    )

    first = use_case.execute(_alice())
    second = use_case.execute(_alice(username="bob", email="bob@x.com"))

    assert first.user.role is Role.SUPERADMIN
    assert first.user.activated is True
    assert second.user.role is Role.UNVERIFIED
    assert second.user.activated is False


def test_register_rejects_duplicate_username(register_use_case):
    register_use_case.execute(_alice())

    with pytest.raises(UsernameTakenError):
        register_use_case.execute(_alice(email="other@x.com"))


def test_username_uniqueness_is_case_sensitive(register_use_case):
    register_use_case.execute(_alice())

    output = register_use_case.execute(_alice(username="Alice", email="other@x.com"))

    assert output.user.username == "Alice"


def test_register_rejects_duplicate_email(register_use_case):
    register_use_case.execute(_alice())

    with pytest.raises(EmailAlreadyExistsError):
        register_use_case.execute(_alice(username="alice2", email="ALICE@x.com"))


@pytest.mark.parametrize(
    ("overrides", "error"),
    [
        ({"username": "al"}, InvalidUsernameError),
        ({"username": "1alice"}, InvalidUsernameError),
        ({"username": "ali ce"}, InvalidUsernameError),
        ({"email": "not-an-email"}, InvalidEmailError),
        ({"first_name": "Al"}, InvalidNameError),
        ({"last_name": ""}, InvalidNameError),
        ({"password": "12345"}, InvalidPasswordError),
    ],
)
def test_register_validates_fields(register_use_case, user_repo, overrides, error):
    with pytest.raises(error):
        register_use_case.execute(_alice(**overrides))
    assert user_repo.users == {}


def test_login_returns_token_pair_and_stores_refresh_hash(
    login_use_case, user_repo, refresh_store, token_service, make_user, clock
):
    user_repo.add(make_user())

    output = login_use_case.execute(LoginLocalInput(username="alice", password="secret1"))

    claims = token_service.decode_access_token(token=output.access_token)
    assert claims.user_id == "user-1"
    assert claims.role is Role.USER
    assert list(refresh_store.records) == [f"hash::{output.refresh_token}"]
    assert output.refresh_token not in refresh_store.records
    assert user_repo.get_user_by_id(user_id="user-1").last_seen == clock.now


def test_login_with_wrong_password_fails(login_use_case, user_repo, refresh_store, make_user):
    user_repo.add(make_user())

    with pytest.raises(InvalidCredentialsError):
        login_use_case.execute(LoginLocalInput(username="alice", password="wrong-password"))
    assert refresh_store.records == {}


def test_login_with_unknown_username_collapses_to_invalid_credentials(login_use_case, password_hasher):
    with pytest.raises(InvalidCredentialsError) as exc_info:
        login_use_case.execute(LoginLocalInput(username="ghost", password="secret1"))

    assert str(exc_info.value) == "Invalid credentials."
    assert password_hasher.verify_calls == 1


def test_login_without_local_password_fails(login_use_case, user_repo, make_user):
    user_repo.add(make_user(password_hash=None))

    with pytest.raises(InvalidCredentialsError):
        login_use_case.execute(LoginLocalInput(username="alice", password="secret1"))


def test_login_rehashes_legacy_password(login_use_case, user_repo, make_user):
    user_repo.add(make_user(password_hash="legacy::secret1"))

    login_use_case.execute(LoginLocalInput(username="alice", password="secret1"))

    assert user_repo.get_user_by_id(user_id="user-1").password_hash == "hashed::secret1"


def test_refresh_rotates_token_pair(login_use_case, refresh_use_case, user_repo, refresh_store, make_user):
    user_repo.add(make_user())
    login = login_use_case.execute(LoginLocalInput(username="alice", password="secret1"))

    rotated = refresh_use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))

    assert rotated.refresh_token != login.refresh_token
    assert list(refresh_store.records) == [f"hash::{rotated.refresh_token}"]


def test_refresh_token_is_single_use(login_use_case, refresh_use_case, user_repo, make_user):
    user_repo.add(make_user())
    login = login_use_case.execute(LoginLocalInput(username="alice", password="secret1"))
    refresh_use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))

    with pytest.raises(InvalidTokenError):
        refresh_use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))


class InterleavingRefreshStore:
    """Lets a competing refresh run between the lookup and the delete."""

    def __init__(self, inner):
        self._inner = inner
        self.competitor = None
        self.competitor_result = None

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def find_by_hash(self, *, token_hash):
        record = self._inner.find_by_hash(token_hash=token_hash)
        competitor, self.competitor = self.competitor, None
        if competitor is not None:
            self.competitor_result = competitor()
        return record


def test_concurrent_refreshes_with_one_token_rotate_once(
    login_use_case, user_repo, token_service, token_hasher, refresh_store, make_user, clock
):
    user_repo.add(make_user())
    login = login_use_case.execute(LoginLocalInput(username="alice", password="secret1"))
    store = InterleavingRefreshStore(refresh_store)
    use_case = RefreshSessionUseCase(
        user_port=user_repo,
        token_port=token_service,
        token_hasher=token_hasher,
        refresh_token_port=store,
        clock=clock,
    )
    command = RefreshSessionInput(refresh_token=login.refresh_token)
    store.competitor = lambda: use_case.execute(command)

    with pytest.raises(InvalidTokenError):
        use_case.execute(command)

    assert store.competitor_result is not None
    assert list(refresh_store.records) == [f"hash::{store.competitor_result.refresh_token}"]


def test_refresh_rejects_record_whose_digest_does_not_match(
    login_use_case, refresh_use_case, user_repo, token_hasher, refresh_store, make_user, monkeypatch
):
    user_repo.add(make_user())
    login = login_use_case.execute(LoginLocalInput(username="alice", password="secret1"))
    monkeypatch.setattr(token_hasher, "matches", lambda token_hash, raw_token: False)

    with pytest.raises(InvalidTokenError):
        refresh_use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))
    assert len(refresh_store.records) == 1


def test_refresh_picks_up_current_role(
    login_use_case, refresh_use_case, user_repo, token_service, make_user, clock
):
    user_repo.add(make_user())
    login = login_use_case.execute(LoginLocalInput(username="alice", password="secret1"))
    user_repo.update_user_role(user_id="user-1", role=Role.ADMIN, updated_by="root", updated_at=clock.now)

    rotated = refresh_use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))

    assert token_service.decode_access_token(token=rotated.access_token).role is Role.ADMIN


def test_refresh_rejects_expired_record(
    login_use_case, refresh_use_case, user_repo, refresh_store, make_user, clock
):
    user_repo.add(make_user())
    login = login_use_case.execute(LoginLocalInput(username="alice", password="secret1"))
    clock.advance(timedelta(days=8))

    with pytest.raises(InvalidTokenError):
        refresh_use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))
    assert refresh_store.records == {}


def test_refresh_rejects_access_token(login_use_case, refresh_use_case, user_repo, make_user):
    user_repo.add(make_user())
    login = login_use_case.execute(LoginLocalInput(username="alice", password="secret1"))

    with pytest.raises(InvalidTokenError):
        refresh_use_case.execute(RefreshSessionInput(refresh_token=login.access_token))


def test_refresh_rejects_empty_token(refresh_use_case):
    with pytest.raises(InvalidTokenError):
        refresh_use_case.execute(RefreshSessionInput(refresh_token="  "))


def test_refresh_fails_when_user_was_removed(login_use_case, refresh_use_case, user_repo, make_user):
    user_repo.add(make_user())
    login = login_use_case.execute(LoginLocalInput(username="alice", password="secret1"))
    del user_repo.users["user-1"]

    with pytest.raises(InvalidTokenError):
        refresh_use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))


def test_logout_revokes_every_refresh_token_of_the_user(login_use_case, user_repo, refresh_store, make_user):
    user_repo.add(make_user())
    user_repo.add(make_user(id="user-2", username="bob", email="bob@x.com"))
    login_use_case.execute(LoginLocalInput(username="alice", password="secret1"))
    login_use_case.execute(LoginLocalInput(username="alice", password="secret1"))
    bob = login_use_case.execute(LoginLocalInput(username="bob", password="secret1"))

    LogoutSessionUseCase(refresh_token_port=refresh_store).execute(LogoutInput(user_id="user-1"))

    assert list(refresh_store.records) == [f"hash::{bob.refresh_token}"]


def test_logout_is_idempotent(refresh_store):
    use_case = LogoutSessionUseCase(refresh_token_port=refresh_store)

    use_case.execute(LogoutInput(user_id="nobody"))
    use_case.execute(LogoutInput(user_id="nobody"))

    assert refresh_store.records == {}


def test_login_google_provisions_activated_user(
    user_repo, google_port, token_service, token_hasher, refresh_store, clock
):
    use_case = LoginGoogleUseCase(
        user_port=user_repo,
        google_oauth_port=google_port,
        token_port=token_service,
        token_hasher=token_hasher,
        refresh_token_port=refresh_store,
        clock=clock,
    )

    output = use_case.execute(LoginGoogleInput(code="auth-code"))

    assert google_port.codes == ["auth-code"]
    assert output.user.email == "carol@example.com"
    assert output.user.username == "carol@example.com"
    assert output.user.role is Role.USER
    assert output.user.activated is True
    stored = user_repo.get_user_by_id(user_id=output.user.id)
    assert stored.password_hash is None
    assert stored.profile.picture_url == "https://images.example.com/carol.png"
    assert stored.last_seen == clock.now
    assert len(refresh_store.records) == 1


def test_login_google_reuses_existing_user(
    user_repo, google_port, token_service, token_hasher, refresh_store, make_user, clock
):
    user_repo.add(make_user(id="carol-id", username="carol", email="carol@example.com", role=Role.ADMIN))
    use_case = LoginGoogleUseCase(
        user_port=user_repo,
        google_oauth_port=google_port,
        token_port=token_service,
        token_hasher=token_hasher,
        refresh_token_port=refresh_store,
        clock=clock,
    )

    output = use_case.execute(LoginGoogleInput(code="auth-code"))

    assert output.user.id == "carol-id"
    assert output.user.role is Role.ADMIN
    assert len(user_repo.users) == 1


def test_login_google_requires_verified_email(
    user_repo, google_port, google_identity, token_service, token_hasher, refresh_store
):
    google_port.identity = replace(google_identity, email_verified=False)
    use_case = LoginGoogleUseCase(
        user_port=user_repo,
        google_oauth_port=google_port,
        token_port=token_service,
        token_hasher=token_hasher,
        refresh_token_port=refresh_store,
    )

    with pytest.raises(GoogleTokenValidationError):
        use_case.execute(LoginGoogleInput(code="auth-code"))
    assert user_repo.users == {}
