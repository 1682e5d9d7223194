from __future__ import annotations

from datetime import datetime

import pytest

from kharji.app import create_app
from kharji.infrastructure.container import Container
from kharji.infrastructure.db import ENGINE, Base, SessionLocal
from kharji.infrastructure.db.models import AuditLog, PasswordResetToken, User
from kharji.infrastructure.exchange_rate import ExchangeRateCache
from kharji.infrastructure.repositories.users import SqlAlchemyUserRepository

SIGNUP = {"email": "alice@example.com", "password": "Secret123", "passwordConfirm": "Secret123"}


class RecordingDelivery:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, datetime]] = []

    def deliver(self, email: str, token: str, expires_at: datetime) -> None:
        self.sent.append((email, token, expires_at))


class StaticFetcher:
    def fetch(self) -> dict:
        return {"usd": {"value": "589500"}}


@pytest.fixture(autouse=True)
def reset_database() -> None:
    Base.metadata.drop_all(bind=ENGINE)
    Base.metadata.create_all(bind=ENGINE)
    yield
    Base.metadata.drop_all(bind=ENGINE)


@pytest.fixture()
def deps() -> Container:
    deps = Container()
    deps.reset_token_delivery = RecordingDelivery()
    deps.exchange_rate_cache = ExchangeRateCache(StaticFetcher())
    return deps


def test_signup_me_logout_login_flow(deps: Container) -> None:
    app = create_app(deps)

    with app.test_client() as client:
        signup = client.post("/api/auth/signup", json=SIGNUP)
        assert signup.status_code == 201
        assert client.get_cookie("auth_token")

        me = client.get("/api/auth/me")
        assert me.get_json()["user"]["email"] == "alice@example.com"

        profile = client.put("/api/user/profile", json={"name": "Alice"})
        assert profile.status_code == 200
        assert profile.get_json()["user"]["name"] == "Alice"

        logout = client.post("/api/auth/logout")
        assert logout.status_code == 200
        assert client.get_cookie("auth_token") is None
        assert client.get("/api/auth/me").get_json() == {"user": None}

        wrong = client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "Wrong1234"}
        )
        assert wrong.status_code == 401

        login = client.post(
            "/api/auth/login", json={"email": "ALICE@example.com", "password": "Secret123"}
        )
        assert login.status_code == 200
        assert login.get_json()["message"] == "Logged in successfully"

    session = SessionLocal()
    try:
        assert session.query(User).count() == 1
        actions = {row.action for row in session.query(AuditLog).all()}
        assert {"signup", "login_failed", "login_success", "logout"} <= actions
    finally:
        session.close()


def test_duplicate_signup_conflicts(deps: Container) -> None:
    app = create_app(deps)

    with app.test_client() as client:
        assert client.post("/api/auth/signup", json=SIGNUP).status_code == 201
        duplicate = client.post("/api/auth/signup", json=SIGNUP)

    assert duplicate.status_code == 409
    assert duplicate.get_json() == {"error": "User already exists"}


def test_password_reset_flow(deps: Container) -> None:
    app = create_app(deps)

    with app.test_client() as client:
        client.post("/api/auth/signup", json=SIGNUP)
        client.post("/api/auth/logout")

        forgot = client.post("/api/auth/forgot-password", json={"email": "alice@example.com"})
        assert forgot.status_code == 200
        assert "token" not in forgot.get_json()

        email, token, _ = deps.reset_token_delivery.sent[0]
        assert email == "alice@example.com"

        reset = client.post(
            "/api/auth/reset-password",
            json={"token": token, "password": "NewSecret1", "passwordConfirm": "NewSecret1"},
        )
        assert reset.status_code == 200

        reused = client.post(
            "/api/auth/reset-password",
            json={"token": token, "password": "Other1234", "passwordConfirm": "Other1234"},
        )
        assert reused.status_code == 400
        assert reused.get_json() == {"error": "Invalid or expired reset token"}

        old = client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "Secret123"}
        )
        new = client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "NewSecret1"}
        )

    assert old.status_code == 401
    assert new.status_code == 200

    session = SessionLocal()
    try:
        assert session.query(PasswordResetToken).count() == 0
    finally:
        session.close()


def test_gate_protects_api_and_pages(deps: Container) -> None:
    app = create_app(deps)

    with app.test_client() as client:
        api = client.get("/api/exchange-rate")
        page = client.get("/transactions")
        root = client.get("/")
        health = client.get("/api/health")

        client.post("/api/auth/signup", json=SIGNUP)
        rate = client.get("/api/exchange-rate")
        login_page = client.get("/login")

    assert api.status_code == 401
    assert api.get_json() == {"error": "Unauthorized"}
    assert page.status_code == 307
    assert page.headers["Location"].endswith("/login?from=/transactions")
    assert root.status_code == 307
    assert root.headers["Location"].endswith("/login")
    assert health.status_code == 200
    assert health.get_json() == {"ok": True, "database": "ok"}

    assert rate.status_code == 200
    assert rate.get_json()["_meta"]["cached"] is False
    assert login_page.status_code == 307
    assert login_page.headers["Location"].endswith("/overview")


def test_forged_cookie_is_rejected_and_cleared(deps: Container) -> None:
    app = create_app(deps)

    with app.test_client() as client:
        client.set_cookie("auth_token", "forged.token.value")
        api = client.get("/api/exchange-rate")
        client.set_cookie("auth_token", "forged.token.value")
        page = client.get("/transactions")
        client.set_cookie("auth_token", "forged.token.value")
        me = client.get("/api/auth/me")

    assert api.status_code == 401
    assert "Max-Age=0" in api.headers["Set-Cookie"]
    assert page.status_code == 307
    assert "Max-Age=0" in page.headers["Set-Cookie"]
    assert me.get_json() == {"user": None}
    assert "Max-Age=0" in me.headers["Set-Cookie"]


def test_logout_with_invalid_cookie_clears_it(deps: Container) -> None:
    app = create_app(deps)

    with app.test_client() as client:
        client.set_cookie("auth_token", "expired.or.forged")
        logout = client.post("/api/auth/logout")
        remaining = client.get_cookie("auth_token")

    assert logout.status_code == 200
    assert logout.get_json() == {"message": "Logged out successfully"}
    assert "Max-Age=0" in logout.headers["Set-Cookie"]
    assert remaining is None


def test_security_headers_present(deps: Container) -> None:
    app = create_app(deps)

    with app.test_client() as client:
        response = client.get("/api/health")

    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_metrics_require_session_and_report_requests(deps: Container) -> None:
    app = create_app(deps)

    with app.test_client() as client:
        anonymous = client.get("/api/metrics")
        client.post("/api/auth/signup", json=SIGNUP)
        client.get("/api/exchange-rate")
        metrics = client.get("/api/metrics")

    assert anonymous.status_code == 401
    assert metrics.status_code == 200
    body = metrics.get_data(as_text=True)
    assert "kharji_requests_total" in body
    assert 'kharji_exchange_rate_lookups_total{outcome="miss"}' in body


class RacingUserRepository(SqlAlchemyUserRepository):
    """Another signup for the same email commits right after our lookup."""

    def find_by_email(self, email: str):
        found = super().find_by_email(email)
        if found is None:
            session = SessionLocal()
            try:
                session.add(User(email=email, password_hash="hashed:Racer1234"))
                session.commit()
            finally:
                session.close()
        return found


def test_signup_race_on_same_email_conflicts(deps: Container) -> None:
    deps.user_repository = RacingUserRepository()
    app = create_app(deps)

    with app.test_client() as client:
        response = client.post("/api/auth/signup", json=SIGNUP)

    assert response.status_code == 409
    assert response.get_json() == {"error": "User already exists"}
    assert "Set-Cookie" not in response.headers
