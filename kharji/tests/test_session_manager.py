from __future__ import annotations

from datetime import timedelta

import pytest
from flask import Flask, jsonify

from kharji.application.services.session_manager import SessionManager
from kharji.application.services.tokens import TokenService


@pytest.fixture()
def sessions() -> SessionManager:
    tokens = TokenService(
        secret="session-test-secret-with-enough-length-00",
        issuer="kharji",
        audience="kharji-users",
        lifetime=timedelta(days=30),
    )
    return SessionManager(tokens, cookie_name="auth_token", max_age=2592000)


@pytest.fixture()
def app(sessions: SessionManager) -> Flask:
    app = Flask(__name__)
    sessions.init_app(app)

    @app.post("/start")
    def start():
        response = jsonify({"ok": True})
        sessions.start(response, 5, "carol@example.com")
        return response

    @app.get("/whoami")
    def whoami():
        claims = sessions.read()
        return jsonify({"user_id": claims.user_id if claims else None})

    @app.post("/end")
    def end():
        response = jsonify({"ok": True})
        sessions.end(response)
        return response

    return app


def test_start_sets_http_only_cookie(app: Flask) -> None:
    with app.test_client() as client:
        response = client.post("/start")

    cookie = response.headers["Set-Cookie"]
    assert cookie.startswith("auth_token=")
    assert "HttpOnly" in cookie
    assert "SameSite=Lax" in cookie
    assert "Path=/" in cookie
    assert "Max-Age=2592000" in cookie
    assert "Secure" not in cookie


def test_read_returns_claims_for_issued_cookie(app: Flask) -> None:
    with app.test_client() as client:
        client.post("/start")
        response = client.get("/whoami")

    assert response.get_json() == {"user_id": 5}


def test_invalid_cookie_is_cleared(app: Flask) -> None:
    with app.test_client() as client:
        client.set_cookie("auth_token", "forged")
        response = client.get("/whoami")

    assert response.get_json() == {"user_id": None}
    cookie = response.headers["Set-Cookie"]
    assert cookie.startswith("auth_token=;")
    assert "Max-Age=0" in cookie


def test_missing_cookie_is_left_alone(app: Flask) -> None:
    with app.test_client() as client:
        response = client.get("/whoami")

    assert response.get_json() == {"user_id": None}
    assert "Set-Cookie" not in response.headers


def test_end_clears_cookie(app: Flask) -> None:
    with app.test_client() as client:
        client.post("/start")
        client.post("/end")
        response = client.get("/whoami")

    assert response.get_json() == {"user_id": None}


def test_secure_flag_follows_configuration() -> None:
    tokens = TokenService(
        secret="session-test-secret-with-enough-length-00",
        issuer="kharji",
        audience="kharji-users",
        lifetime=timedelta(days=1),
    )
    sessions = SessionManager(tokens, secure=True)
    app = Flask(__name__)

    @app.post("/start")
    def start():
        response = jsonify({"ok": True})
        sessions.start(response, 1, "a@example.com")
        return response

    with app.test_client() as client:
        response = client.post("/start")

    assert "Secure" in response.headers["Set-Cookie"]
