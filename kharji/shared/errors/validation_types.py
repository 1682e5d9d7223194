# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations


class ValidationErrorType:
    MISSING = "missing"
    EMAIL_INVALID = "email_invalid"
    PASSWORD_MISMATCH = "password_mismatch"
    PASSWORD_WEAK = "password_weak"
    NAME_TYPE = "name_type"
    NAME_EMPTY = "name_empty"
    NAME_TOO_LONG = "name_too_long"


__all__ = ["ValidationErrorType"]
