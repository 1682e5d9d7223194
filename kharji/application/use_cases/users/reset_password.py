# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from kharji.domain.users.exceptions import InvalidResetTokenError
from kharji.domain.users.repositories import PasswordHasher, PasswordResetTokenRepository


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ResetPasswordUseCase:
    def __init__(
        self,
        *,
        reset_tokens: PasswordResetTokenRepository,
        password_hasher: PasswordHasher,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._reset_tokens = reset_tokens
        self._password_hasher = password_hasher
        self._clock = clock

    def execute(self, token: str, password: str) -> int:
        password_hash = self._password_hasher.hash(password)
        user_id = self._reset_tokens.redeem(token, self._clock(), password_hash)
        if user_id is None:
            raise InvalidResetTokenError()
        return user_id
