# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Use-case for issuing single-use password reset tokens."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from kharji.application.services.tokens import TokenService
from kharji.domain.users.entities import PasswordResetToken
from kharji.domain.users.repositories import (
    PasswordResetTokenRepository,
    ResetTokenDelivery,
    UserRepository,
)
from kharji.shared.logging import logger


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RequestPasswordResetUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        reset_tokens: PasswordResetTokenRepository,
        tokens: TokenService,
        delivery: ResetTokenDelivery,
        ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._users = users
        self._reset_tokens = reset_tokens
        self._tokens = tokens
        self._delivery = delivery
        self._ttl = ttl
        self._clock = clock

    def execute(self, email: str) -> PasswordResetToken | None:
        normalized = email.strip().lower()
        user = self._users.find_by_email(normalized)
        if user is None:
            logger.info("auth.reset: request for unknown email ignored")
            return None

        reset = PasswordResetToken(
            user_id=user.id,
            token=self._tokens.issue_reset_token(),
            expires_at=self._clock() + self._ttl,
        )
        self._reset_tokens.add(reset)
        self._delivery.deliver(user.email, reset.token, reset.expires_at)
        return reset
