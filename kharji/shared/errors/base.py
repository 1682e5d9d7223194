# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, cast


@dataclass(slots=True)
class AppError(Exception):
    message: str
    status: HTTPStatus
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        # context stays server-side; clients only ever see the message
        return {"error": self.message}


class DomainError(AppError):
    def __init__(
        self,
        *,
        message: str | None = None,
        status: HTTPStatus | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_message = message or cast(str, getattr(type(self), "default_message", "Bad request"))
        resolved_status = status or cast(
            HTTPStatus, getattr(type(self), "default_status", HTTPStatus.BAD_REQUEST)
        )
        super().__init__(message=resolved_message, status=resolved_status, context=context)


class InfrastructureError(AppError):
    def __init__(
        self,
        message: str = "Internal server error",
        *,
        status: HTTPStatus | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_status = status or HTTPStatus.INTERNAL_SERVER_ERROR
        super().__init__(message=message, status=resolved_status, context=context)


class ValidationError(AppError):
    def __init__(
        self,
        message: str = "Invalid request",
        *,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status=HTTPStatus.BAD_REQUEST,
            context=context,
        )


class UnauthorizedError(AppError):
    def __init__(self) -> None:
        super().__init__(message="Unauthorized", status=HTTPStatus.UNAUTHORIZED)


class ExchangeRateUnavailableError(InfrastructureError):
    def __init__(self) -> None:
        super().__init__("Failed to fetch exchange rate")
