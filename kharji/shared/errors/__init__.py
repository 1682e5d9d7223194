from .base import (
    AppError,
    DomainError,
    ExchangeRateUnavailableError,
    InfrastructureError,
    UnauthorizedError,
    ValidationError,
)
from .http import handle_app_error, register_error_handler

__all__ = [
    "AppError",
    "DomainError",
    "ExchangeRateUnavailableError",
    "InfrastructureError",
    "UnauthorizedError",
    "ValidationError",
    "handle_app_error",
    "register_error_handler",
]
