# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(slots=True, frozen=True)
class User:

    id: int
    email: str
    password_hash: str
    created_at: datetime
    name: str | None = None

    def public_view(self) -> dict[str, object]:
        return {"id": self.id, "email": self.email, "name": self.name}


@dataclass(slots=True, frozen=True)
class SessionClaims:
    """Decoded payload of a verified session token."""

    user_id: int
    email: str
    issuer: str
    audience: str
    issued_at: datetime
    expires_at: datetime


@dataclass(slots=True, frozen=True)
class PasswordResetToken:
    """Opaque single-use credential persisted server-side."""

    user_id: int
    token: str
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        moment = now or datetime.now(UTC)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at <= moment
