from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from kharji.application.services.tokens import TokenService

SECRET = "unit-test-secret-with-enough-length-0000"


def _service(**overrides) -> TokenService:
    params = {
        "secret": SECRET,
        "issuer": "kharji",
        "audience": "kharji-users",
        "lifetime": timedelta(days=30),
    }
    params.update(overrides)
    return TokenService(**params)


def test_issue_then_verify_returns_claims() -> None:
    service = _service()

    claims = service.verify(service.issue(7, "alice@example.com"))

    assert claims is not None
    assert claims.user_id == 7
    assert claims.email == "alice@example.com"
    assert claims.issuer == "kharji"
    assert claims.audience == "kharji-users"
    assert claims.expires_at - claims.issued_at == timedelta(days=30)


def test_token_payload_uses_expected_claim_names() -> None:
    token = _service().issue(3, "bob@example.com")

    payload = jwt.decode(token, SECRET, algorithms=["HS256"], audience="kharji-users")

    assert payload["userId"] == 3
    assert payload["email"] == "bob@example.com"
    assert payload["iss"] == "kharji"
    assert payload["aud"] == "kharji-users"


def test_expired_token_is_rejected() -> None:
    past = datetime.now(UTC) - timedelta(days=31)
    token = _service(clock=lambda: past).issue(1, "a@example.com")

    assert _service().verify(token) is None


def test_tampered_signature_is_rejected() -> None:
    token = _service().issue(1, "a@example.com")
    head, payload, signature = token.split(".")
    flipped = ("A" if signature[0] != "A" else "B") + signature[1:]

    assert _service().verify(f"{head}.{payload}.{flipped}") is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"secret": "another-secret-with-enough-length-111111"},
        {"issuer": "someone-else"},
        {"audience": "other-users"},
    ],
)
def test_foreign_tokens_are_rejected(overrides: dict) -> None:
    token = _service(**overrides).issue(1, "a@example.com")

    assert _service().verify(token) is None


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_tokens_are_rejected(token: str) -> None:
    assert _service().verify(token) is None


def test_token_without_user_id_is_rejected() -> None:
    now = datetime.now(UTC)
    token = jwt.encode(
        {
            "email": "a@example.com",
            "iss": "kharji",
            "aud": "kharji-users",
            "iat": now,
            "exp": now + timedelta(hours=1),
        },
        SECRET,
        algorithm="HS256",
    )

    assert _service().verify(token) is None


def test_reset_tokens_are_random_hex() -> None:
    service = _service()

    first = service.issue_reset_token()
    second = service.issue_reset_token()

    assert len(first) == 64
    int(first, 16)
    assert first != second
