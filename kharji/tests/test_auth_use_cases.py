from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from kharji.application.services.tokens import TokenService
from kharji.application.use_cases.users.current_user import (
    GetCurrentUserUseCase,
    UpdateProfileUseCase,
)
from kharji.application.use_cases.users.login_user import LoginUserUseCase
from kharji.application.use_cases.users.register_user import RegisterUserUseCase
from kharji.application.use_cases.users.request_password_reset import (
    RequestPasswordResetUseCase,
)
from kharji.application.use_cases.users.reset_password import ResetPasswordUseCase
from kharji.domain.users.entities import PasswordResetToken, SessionClaims, User
from kharji.domain.users.exceptions import (
    InvalidCredentialsError,
    InvalidResetTokenError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from kharji.domain.users.repositories import (
    PasswordHasher,
    PasswordResetTokenRepository,
    ResetTokenDelivery,
    UserRepository,
)


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._seq = 1

    def find_by_email(self, email: str) -> User | None:
        return next((u for u in self._users.values() if u.email == email), None)

    def find_by_id(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def add(self, user: User) -> User:
        new_user = User(
            id=self._seq,
            email=user.email,
            password_hash=user.password_hash,
            created_at=user.created_at,
        )
        self._seq += 1
        self._users[new_user.id] = new_user
        return new_user

    def set_password(self, user_id: int, password_hash: str) -> None:
        user = self._users[user_id]
        self._users[user_id] = User(
            id=user.id,
            email=user.email,
            password_hash=password_hash,
            created_at=user.created_at,
            name=user.name,
        )

    def update_name(self, user_id: int, name: str) -> User | None:
        user = self._users.get(user_id)
        if user is None:
            return None
        self._users[user_id] = User(
            id=user.id,
            email=user.email,
            password_hash=user.password_hash,
            created_at=user.created_at,
            name=name,
        )
        return self._users[user_id]


class InMemoryResetTokenRepository(PasswordResetTokenRepository):
    def __init__(self, users: InMemoryUserRepository) -> None:
        self.tokens: dict[str, PasswordResetToken] = {}
        self._users = users

    def add(self, token: PasswordResetToken) -> None:
        self.tokens[token.token] = token

    def redeem(self, token: str, now: datetime, password_hash: str) -> int | None:
        found = self.tokens.get(token)
        if found is None or found.is_expired(now):
            return None
        del self.tokens[token]
        self._users.set_password(found.user_id, password_hash)
        return found.user_id


class DeterministicHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password}"


class RecordingDelivery(ResetTokenDelivery):
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, datetime]] = []

    def deliver(self, email: str, token: str, expires_at: datetime) -> None:
        self.sent.append((email, token, expires_at))


@pytest.fixture()
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def hasher() -> DeterministicHasher:
    return DeterministicHasher()


def _register(users: InMemoryUserRepository, hasher: DeterministicHasher) -> User:
    return RegisterUserUseCase(users=users, password_hasher=hasher).execute(
        "Alice@Example.com", "Secret123"
    )


def test_register_user_normalizes_email(
    users: InMemoryUserRepository, hasher: DeterministicHasher
) -> None:
    user = _register(users, hasher)

    assert user.id == 1
    assert user.email == "alice@example.com"
    assert user.password_hash == "hashed:Secret123"


def test_register_duplicate_email_fails(
    users: InMemoryUserRepository, hasher: DeterministicHasher
) -> None:
    _register(users, hasher)

    with pytest.raises(UserAlreadyExistsError):
        RegisterUserUseCase(users=users, password_hasher=hasher).execute(
            "alice@example.com", "Other1234"
        )


def test_login_success(users: InMemoryUserRepository, hasher: DeterministicHasher) -> None:
    _register(users, hasher)

    user = LoginUserUseCase(users=users, password_hasher=hasher).execute(
        "ALICE@example.com", "Secret123"
    )

    assert user.email == "alice@example.com"


@pytest.mark.parametrize(
    ("email", "password"),
    [("alice@example.com", "Wrong1234"), ("nobody@example.com", "Secret123")],
)
def test_login_failures_share_one_error(
    users: InMemoryUserRepository, hasher: DeterministicHasher, email: str, password: str
) -> None:
    _register(users, hasher)

    with pytest.raises(InvalidCredentialsError) as info:
        LoginUserUseCase(users=users, password_hasher=hasher).execute(email, password)

    assert info.value.message == "Invalid email or password"


def _reset_flow(users: InMemoryUserRepository, now: datetime):
    reset_tokens = InMemoryResetTokenRepository(users)
    delivery = RecordingDelivery()
    tokens = TokenService(
        secret="use-case-secret-with-enough-length-00000",
        issuer="kharji",
        audience="kharji-users",
        lifetime=timedelta(days=30),
    )
    request_reset = RequestPasswordResetUseCase(
        users=users,
        reset_tokens=reset_tokens,
        tokens=tokens,
        delivery=delivery,
        ttl=timedelta(hours=1),
        clock=lambda: now,
    )
    return request_reset, reset_tokens, delivery


def test_password_reset_round_trip(
    users: InMemoryUserRepository, hasher: DeterministicHasher
) -> None:
    user = _register(users, hasher)
    now = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
    request_reset, reset_tokens, delivery = _reset_flow(users, now)

    issued = request_reset.execute("alice@example.com")

    assert issued is not None
    assert issued.expires_at == now + timedelta(hours=1)
    assert delivery.sent == [("alice@example.com", issued.token, issued.expires_at)]

    reset = ResetPasswordUseCase(
        reset_tokens=reset_tokens,
        password_hasher=hasher,
        clock=lambda: now + timedelta(minutes=30),
    )
    assert reset.execute(issued.token, "NewSecret1") == user.id
    assert users.find_by_id(user.id).password_hash == "hashed:NewSecret1"

    # single use
    with pytest.raises(InvalidResetTokenError):
        reset.execute(issued.token, "Another123")


def test_password_reset_unknown_email_is_silent(users: InMemoryUserRepository) -> None:
    request_reset, reset_tokens, delivery = _reset_flow(users, datetime.now(UTC))

    assert request_reset.execute("ghost@example.com") is None
    assert reset_tokens.tokens == {}
    assert delivery.sent == []


def test_password_reset_rejects_expired_token(
    users: InMemoryUserRepository, hasher: DeterministicHasher
) -> None:
    _register(users, hasher)
    now = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
    request_reset, reset_tokens, _ = _reset_flow(users, now)
    issued = request_reset.execute("alice@example.com")

    reset = ResetPasswordUseCase(
        reset_tokens=reset_tokens,
        password_hasher=hasher,
        clock=lambda: now + timedelta(hours=2),
    )
    with pytest.raises(InvalidResetTokenError):
        reset.execute(issued.token, "NewSecret1")


def test_current_user_and_profile_update(
    users: InMemoryUserRepository, hasher: DeterministicHasher
) -> None:
    user = _register(users, hasher)
    now = datetime.now(UTC)
    claims = SessionClaims(
        user_id=user.id,
        email=user.email,
        issuer="kharji",
        audience="kharji-users",
        issued_at=now,
        expires_at=now + timedelta(days=30),
    )

    assert GetCurrentUserUseCase(users=users).execute(claims) == user
    assert GetCurrentUserUseCase(users=users).execute(None) is None

    updated = UpdateProfileUseCase(users=users).execute(user.id, "Alice")
    assert updated.name == "Alice"

    with pytest.raises(UserNotFoundError):
        UpdateProfileUseCase(users=users).execute(999, "Ghost")
