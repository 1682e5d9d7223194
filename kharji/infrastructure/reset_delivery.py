# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime

from kharji.domain.users.repositories import ResetTokenDelivery
from kharji.shared.logging import logger


class LoggingResetTokenDelivery(ResetTokenDelivery):
    """Stand-in for an email integration; never writes the token itself."""

    def deliver(self, email: str, token: str, expires_at: datetime) -> None:
        logger.info(
            f"auth.reset: reset link issued for {email} "
            f"expires_at={expires_at.isoformat()} (no delivery channel configured)"
        )


__all__ = ["LoggingResetTokenDelivery"]
