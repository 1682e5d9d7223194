from __future__ import annotations

from typing import Any

from pydantic import BaseModel, model_validator
from pydantic_core import PydanticCustomError

from kharji.shared.errors.validation_types import ValidationErrorType

MAX_NAME_LENGTH = 100


class UpdateProfileRequestDTO(BaseModel):
    name: str

    @model_validator(mode="before")
    @classmethod
    def _validate(cls, data: Any) -> Any:
        name = data.get("name") if isinstance(data, dict) else None
        if not isinstance(name, str):
            raise PydanticCustomError(ValidationErrorType.NAME_TYPE, "Name must be a string")
        trimmed = name.strip()
        if not trimmed:
            raise PydanticCustomError(ValidationErrorType.NAME_EMPTY, "Name cannot be empty")
        if len(trimmed) > MAX_NAME_LENGTH:
            raise PydanticCustomError(
                ValidationErrorType.NAME_TOO_LONG,
                "Name is too long (max {max_length} characters)",
                {"max_length": MAX_NAME_LENGTH},
            )
        return {"name": trimmed}


class UserDTO(BaseModel):
    id: int
    email: str
    name: str | None = None
