from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from anchor_blog.application.dto.auth import GoogleIdentityInfo
from anchor_blog.domain.entities.post import PageRequest, Post, Reaction
from anchor_blog.domain.entities.token import OneTimeToken, RefreshTokenRecord, TokenPurpose
from anchor_blog.domain.entities.user import Role, User, UserProfile
from anchor_blog.domain.exceptions import (
    EmailAlreadyExistsError,
    NotificationDeliveryError,
    PostNotFoundError,
    RefreshTokenNotFoundError,
    UsernameTakenError,
)
from anchor_blog.infrastructure.security.token_service import JwtTokenService


ACCESS_SECRET = "access-secret-for-tests-0123456789abcdef"
REFRESH_SECRET = "refresh-secret-for-tests-0123456789abcdef"


class MutableClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class FakeUserRepository:
    def __init__(self):
        self.users: dict[str, User] = {}

    def add(self, user: User) -> User:
        self.users[user.id] = user
        return user

    def get_user_by_id(self, *, user_id: str) -> User | None:
        return self.users.get(user_id)

    def get_user_by_username(self, *, username: str) -> User | None:
        for user in self.users.values():
            if user.username == username:
                return user
        return None

    def get_user_by_email(self, *, email: str) -> User | None:
        email_l = email.lower()
        for user in self.users.values():
            if user.email.lower() == email_l:
                return user
        return None

    def username_exists(self, *, username: str) -> bool:
        return self.get_user_by_username(username=username) is not None

    def email_exists(self, *, email: str) -> bool:
        return self.get_user_by_email(email=email) is not None

    def count_users(self) -> int:
        return len(self.users)

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
        if self.username_exists(username=username):
            raise UsernameTakenError("Username is already taken.")
        if self.email_exists(email=email):
            raise EmailAlreadyExistsError("Email is already registered.")
        return self.add(
            User(
                id=user_id,
                username=username,
                first_name=first_name,
                last_name=last_name,
                email=email,
                password_hash=password_hash,
                role=role,
                activated=activated,
                last_seen=None,
                profile=profile,
                updated_by=None,
                created_at=created_at,
                updated_at=created_at,
            )
        )

    def update_user_role(self, *, user_id: str, role: Role, updated_by: str, updated_at: datetime) -> None:
        user = self.users[user_id]
        self.users[user_id] = replace(user, role=role, updated_by=updated_by, updated_at=updated_at)

    def activate_user(self, *, user_id: str, role: Role, updated_at: datetime) -> None:
        user = self.users[user_id]
        self.users[user_id] = replace(user, role=role, activated=True, updated_at=updated_at)

    def update_password_hash(self, *, user_id: str, password_hash: str, updated_at: datetime) -> None:
        user = self.users[user_id]
        self.users[user_id] = replace(user, password_hash=password_hash, updated_at=updated_at)

    def update_last_seen(self, *, user_id: str, last_seen: datetime) -> None:
        user = self.users[user_id]
        self.users[user_id] = replace(user, last_seen=last_seen)

    def update_profile(self, *, user_id: str, profile: UserProfile, updated_at: datetime) -> None:
        user = self.users[user_id]
        self.users[user_id] = replace(user, profile=profile, updated_at=updated_at)


class FakeRefreshTokenStore:
    def __init__(self):
        self.records: dict[str, RefreshTokenRecord] = {}

    def store_refresh_token(self, record: RefreshTokenRecord) -> None:
        assert record.token_hash not in self.records
        self.records[record.token_hash] = record

    def find_by_hash(self, *, token_hash: str) -> RefreshTokenRecord:
        record = self.records.get(token_hash)
        if record is None:
            raise RefreshTokenNotFoundError("Refresh token not found.")
        return record

    def delete_by_hash(self, *, token_hash: str) -> bool:
        return self.records.pop(token_hash, None) is not None

    def delete_all_by_user(self, *, user_id: str) -> None:
        for token_hash in [h for h, r in self.records.items() if r.user_id == user_id]:
            del self.records[token_hash]


class FakePostRepository:
    def __init__(self):
        self.posts: dict[str, Post] = {}
        self.reactions: dict[str, dict[str, Reaction]] = {}

    def _with_reactions(self, post: Post) -> Post:
        reactions = self.reactions.get(post.id, {})
        return replace(
            post,
            likes=tuple(u for u, r in reactions.items() if r is Reaction.LIKE),
            dislikes=tuple(u for u, r in reactions.items() if r is Reaction.DISLIKE),
        )

    def _page(self, posts, page: PageRequest, key=None) -> list[Post]:
        ordered = sorted(posts, key=key or (lambda p: p.created_at), reverse=True)
        return [self._with_reactions(p) for p in ordered[page.offset : page.offset + page.limit]]

    def add(self, post: Post) -> Post:
        self.posts[post.id] = replace(post, likes=(), dislikes=())
        for user_id in post.likes:
            self.reactions.setdefault(post.id, {})[user_id] = Reaction.LIKE
        for user_id in post.dislikes:
            self.reactions.setdefault(post.id, {})[user_id] = Reaction.DISLIKE
        return post

    def create_post(self, post: Post) -> Post:
        return self.add(post)

    def get_post(self, *, post_id: str) -> Post | None:
        post = self.posts.get(post_id)
        return self._with_reactions(post) if post else None

    def list_posts(self, *, page: PageRequest) -> list[Post]:
        return self._page(self.posts.values(), page)

    def search_by_title(self, *, query: str, page: PageRequest) -> list[Post]:
        return self._page([p for p in self.posts.values() if query.lower() in p.title.lower()], page)

    def list_by_author(self, *, author_id: str, page: PageRequest) -> list[Post]:
        return self._page([p for p in self.posts.values() if p.author_id == author_id], page)

    def filter_by_tags(self, *, tags: tuple[str, ...], page: PageRequest) -> list[Post]:
        return self._page([p for p in self.posts.values() if set(p.tags) & set(tags)], page)

    def filter_by_created_range(self, *, start: datetime, end: datetime, page: PageRequest) -> list[Post]:
        return self._page([p for p in self.posts.values() if start <= p.created_at < end], page)

    def update_post(self, *, post_id, title, content, tags, updated_at) -> Post | None:
        post = self.posts.get(post_id)
        if post is None:
            return None
        self.posts[post_id] = replace(post, title=title, content=content, tags=tags, updated_at=updated_at)
        return self.get_post(post_id=post_id)

    def delete_post(self, *, post_id: str) -> bool:
        self.reactions.pop(post_id, None)
        return self.posts.pop(post_id, None) is not None

    def set_reaction(self, *, post_id: str, user_id: str, reaction: Reaction, reacted_at: datetime) -> bool:
        if post_id not in self.posts:
            raise PostNotFoundError("Post not found.")
        current = self.reactions.setdefault(post_id, {})
        if current.get(user_id) is reaction:
            return False
        current[user_id] = reaction
        return True

    def remove_reaction(self, *, post_id: str, user_id: str, reaction: Reaction) -> bool:
        current = self.reactions.get(post_id, {})
        if current.get(user_id) is not reaction:
            return False
        del current[user_id]
        return True

    def increment_view_count(self, *, post_id: str) -> int | None:
        post = self.posts.get(post_id)
        if post is None:
            return None
        self.posts[post_id] = replace(post, view_count=post.view_count + 1)
        return post.view_count + 1

    def most_viewed(self, *, limit: int) -> list[Post]:
        return self._page(
            self.posts.values(),
            PageRequest(page=1, limit=limit),
            key=lambda p: (p.view_count, p.created_at),
        )

    def total_views(self) -> int:
        return sum(p.view_count for p in self.posts.values())


class FakeOneTimeTokenStore:
    def __init__(self, purpose: TokenPurpose):
        self.purpose = purpose
        self.tokens: dict[str, OneTimeToken] = {}

    def create_token(self, token: OneTimeToken) -> None:
        self.tokens[token.token] = token

    def get_by_token(self, *, token: str) -> OneTimeToken | None:
        return self.tokens.get(token)

    def mark_used(self, *, token: str, now: datetime) -> OneTimeToken | None:
        record = self.tokens.get(token)
        if record is None or record.used or now >= record.expires_at:
            return None
        record = replace(record, used=True)
        self.tokens[token] = record
        return record


class FakePasswordHasher:
    def __init__(self):
        self.verify_calls = 0

    def hash(self, plain_password: str) -> str:
        return f"hashed::{plain_password}"

    def verify(self, plain_password: str, password_hash: str) -> bool:
        self.verify_calls += 1
        return password_hash == f"hashed::{plain_password}"

    def verify_and_update(self, plain_password: str, password_hash: str) -> tuple[bool, str | None]:
        if password_hash == f"legacy::{plain_password}":
            self.verify_calls += 1
            return True, self.hash(plain_password)
        return self.verify(plain_password, password_hash), None


class FakeTokenHasher:
    def hash(self, raw_token: str) -> str:
        return f"hash::{raw_token}"

    def matches(self, token_hash: str, raw_token: str) -> bool:
        return token_hash == self.hash(raw_token)


class FakeNotifier:
    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    def send_link(self, *, recipient: str, subject: str, link: str, expires_at: datetime) -> None:
        if self.fail:
            raise NotificationDeliveryError("SMTP relay unavailable.")
        self.sent.append(
            {"recipient": recipient, "subject": subject, "link": link, "expires_at": expires_at}
        )


class FakeGoogleOauthPort:
    def __init__(self, identity: GoogleIdentityInfo):
        self.identity = identity
        self.codes: list[str] = []

    def build_authorization_url(self, *, state: str) -> str:
        return f"https://accounts.example.test/auth?state={state}"

    def fetch_identity(self, *, code: str) -> GoogleIdentityInfo:
        self.codes.append(code)
        return self.identity


def build_user(**overrides) -> User:
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    values = {
        "id": "user-1",
        "username": "alice",
        "first_name": "Alice",
        "last_name": "Doe",
        "email": "alice@x.com",
        "password_hash": "hashed::secret1",
        "role": Role.USER,
        "activated": True,
        "last_seen": None,
        "profile": UserProfile(),
        "updated_by": None,
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    return User(**values)


def build_post(**overrides) -> Post:
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    values = {
        "id": "7d4c2f0e-5b1a-4c3e-9f8d-1a2b3c4d5e6f",
        "title": "Anchoring in shallow water",
        "content": "Pick a sandy bottom.",
        "author_id": "user-1",
        "tags": ("sailing",),
        "view_count": 0,
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    return Post(**values)


@pytest.fixture
def clock() -> MutableClock:
    # Real time, so JWT exp/nbf checks made by PyJWT agree with the injected clock.
    return MutableClock(datetime.now(timezone.utc))


@pytest.fixture
def user_repo() -> FakeUserRepository:
    return FakeUserRepository()


@pytest.fixture
def make_user():
    return build_user


@pytest.fixture
def post_repo() -> FakePostRepository:
    return FakePostRepository()


@pytest.fixture
def make_post():
    return build_post


@pytest.fixture
def refresh_store() -> FakeRefreshTokenStore:
    return FakeRefreshTokenStore()


@pytest.fixture
def activation_store() -> FakeOneTimeTokenStore:
    return FakeOneTimeTokenStore(TokenPurpose.ACTIVATION)


@pytest.fixture
def reset_store() -> FakeOneTimeTokenStore:
    return FakeOneTimeTokenStore(TokenPurpose.PASSWORD_RESET)


@pytest.fixture
def password_hasher() -> FakePasswordHasher:
    return FakePasswordHasher()


@pytest.fixture
def token_hasher() -> FakeTokenHasher:
    return FakeTokenHasher()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def token_service() -> JwtTokenService:
    return JwtTokenService(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET)


@pytest.fixture
def google_identity() -> GoogleIdentityInfo:
    return GoogleIdentityInfo(
        subject="google-sub-1",
        email="Carol@Example.com",
        email_verified=True,
        first_name="Carol",
        last_name="Jones",
        picture_url="https://images.example.com/carol.png",
    )


@pytest.fixture
def google_port(google_identity) -> FakeGoogleOauthPort:
    return FakeGoogleOauthPort(google_identity)


@pytest.fixture
def failing_notifier() -> FakeNotifier:
    return FakeNotifier(fail=True)
