from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_core import PydanticCustomError

from kharji.shared.errors.validation_types import ValidationErrorType

# same shape check the web client applies: something@something.tld, no spaces
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value))


def password_strength_errors(value: str) -> list[str]:
    errors: list[str] = []
    if len(value) < 8:
        errors.append("Password must be at least 8 characters long")
    if not re.search(r"[A-Z]", value):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", value):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", value):
        errors.append("Password must contain at least one number")
    return errors


def _check_new_password(password: str, confirm: str) -> None:
    if password != confirm:
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_MISMATCH,
            "Passwords do not match",
        )
    errors = password_strength_errors(password)
    if errors:
        raise PydanticCustomError(ValidationErrorType.PASSWORD_WEAK, ", ".join(errors))


class _RequestDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=False)


class SignupRequestDTO(_RequestDTO):
    email: str | None = None
    password: str | None = None
    password_confirm: str | None = Field(None, alias="passwordConfirm")

    @model_validator(mode="after")
    def _validate(self) -> "SignupRequestDTO":
        if not self.email or not self.password or not self.password_confirm:
            raise PydanticCustomError(
                ValidationErrorType.MISSING,
                "Email and password are required",
            )
        if not is_valid_email(self.email):
            raise PydanticCustomError(ValidationErrorType.EMAIL_INVALID, "Invalid email format")
        _check_new_password(self.password, self.password_confirm)
        return self


class LoginRequestDTO(_RequestDTO):
    email: str | None = None
    password: str | None = None  # no strength check on login

    @model_validator(mode="after")
    def _validate(self) -> "LoginRequestDTO":
        if not self.email or not self.password:
            raise PydanticCustomError(
                ValidationErrorType.MISSING,
                "Email and password are required",
            )
        return self


class ForgotPasswordRequestDTO(_RequestDTO):
    email: str | None = None

    @model_validator(mode="after")
    def _validate(self) -> "ForgotPasswordRequestDTO":
        if not self.email or not is_valid_email(self.email):
            raise PydanticCustomError(
                ValidationErrorType.EMAIL_INVALID,
                "Valid email is required",
            )
        return self


class ResetPasswordRequestDTO(_RequestDTO):
    token: str | None = None
    password: str | None = None
    password_confirm: str | None = Field(None, alias="passwordConfirm")

    @model_validator(mode="after")
    def _validate(self) -> "ResetPasswordRequestDTO":
        if not self.token or not self.password or not self.password_confirm:
            raise PydanticCustomError(
                ValidationErrorType.MISSING,
                "Token and password are required",
            )
        _check_new_password(self.password, self.password_confirm)
        return self


class AuthSuccessDTO(BaseModel):
    message: str
    user_id: int = Field(serialization_alias="userId")


class MessageDTO(BaseModel):
    message: str
