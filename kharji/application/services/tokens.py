# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Signed session tokens and opaque password-reset tokens."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import jwt

from kharji.domain.users.entities import SessionClaims
from kharji.shared.logging import logger

ALGORITHM = "HS256"
RESET_TOKEN_BYTES = 32


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenService:
    def __init__(
        self,
        *,
        secret: str,
        issuer: str,
        audience: str,
        lifetime: timedelta,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._secret = secret
        self._issuer = issuer
        self._audience = audience
        self._lifetime = lifetime
        self._clock = clock

    def issue(self, user_id: int, email: str) -> str:
        issued_at = self._clock()
        payload = {
            "userId": int(user_id),
            "email": email,
            "iss": self._issuer,
            "aud": self._audience,
            "iat": issued_at,
            "exp": issued_at + self._lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> SessionClaims | None:
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                issuer=self._issuer,
                audience=self._audience,
                options={"require": ["exp", "iat", "iss", "aud"]},
            )
            return SessionClaims(
                user_id=int(payload["userId"]),
                email=str(payload["email"]),
                issuer=payload["iss"],
                audience=self._audience,
                issued_at=datetime.fromtimestamp(payload["iat"], UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            )
        except jwt.PyJWTError as exc:
            logger.debug(f"tokens.verify: rejected ({type(exc).__name__})")
            return None
        except (KeyError, TypeError, ValueError):
            logger.debug("tokens.verify: rejected (malformed claims)")
            return None

    def issue_reset_token(self) -> str:
        return secrets.token_hex(RESET_TOKEN_BYTES)


__all__ = ["TokenService"]
