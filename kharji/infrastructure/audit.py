# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from kharji.shared.logging import logger


class AuditAction(str, Enum):
    # Authentication
    SIGNUP = "signup"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"

    # Password reset
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET_COMPLETED = "password_reset_completed"
    PASSWORD_RESET_FAILED = "password_reset_failed"

    # Profile
    PROFILE_UPDATED = "profile_updated"


class AuditLogger:
    @staticmethod
    def log(
        action: AuditAction,
        user_id: int | None = None,
        ip_address: str | None = None,
        details: dict[str, Any] | None = None,
        success: bool = True,
    ) -> None:
        timestamp = datetime.now(UTC)

        safe_details = _sanitize_details(details) if details else {}

        log_message = (
            f"AUDIT: {action.value} | "
            f"user_id={user_id} | "
            f"ip={ip_address} | "
            f"success={success}"
        )

        if safe_details:
            log_message += f" | details={safe_details}"

        if success:
            logger.info(log_message)
        else:
            logger.warning(log_message)

        _store_audit_log(
            timestamp=timestamp,
            action=action.value,
            user_id=user_id,
            ip_address=ip_address,
            success=success,
            details=safe_details,
        )


def _sanitize_details(details: dict[str, Any]) -> dict[str, Any]:
    sensitive_keys = {
        "password",
        "token",
        "secret",
        "hash",
    }

    sanitized = {}
    for key, value in details.items():
        key_lower = key.lower()

        if any(sensitive in key_lower for sensitive in sensitive_keys):
            sanitized[key] = "***REDACTED***"
        else:
            sanitized[key] = value

    return sanitized


audit = AuditLogger()


def audit_log(
    action: AuditAction,
    user_id: int | None = None,
    ip_address: str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    audit.log(action, user_id, ip_address, details, success)


def _store_audit_log(
    timestamp: datetime,
    action: str,
    user_id: int | None,
    ip_address: str | None,
    success: bool,
    details: dict[str, Any],
) -> None:
    try:
        from kharji.infrastructure.db.models import AuditLog
        from kharji.infrastructure.db.session import SessionLocal

        db = SessionLocal()
        try:
            details_json = json.dumps(details, default=str) if details else None

            db.add(
                AuditLog(
                    timestamp=timestamp,
                    action=action,
                    user_id=user_id,
                    ip_address=ip_address,
                    success=success,
                    details_json=details_json,
                )
            )
            db.commit()
        except Exception as db_error:
            db.rollback()
            logger.warning(f"Failed to store audit log in database: {db_error}")
        finally:
            db.close()
    except Exception as e:
        logger.warning(f"Failed to import database for audit logging: {e}")


__all__ = [
    "AuditAction",
    "AuditLogger",
    "audit",
    "audit_log",
]
