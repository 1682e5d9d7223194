# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Password hashing strategies."""

from __future__ import annotations

import hashlib
import hmac
import secrets

from kharji.domain.users.repositories import PasswordHasher

SEPARATOR = ":"


class Pbkdf2PasswordHasher(PasswordHasher):
    """PBKDF2-HMAC-SHA256 stored as ``<salt hex>:<derived key hex>``.

    The hex-encoded salt string itself is the PBKDF2 salt input.
    """

    def __init__(
        self,
        *,
        iterations: int = 100_000,
        key_length: int = 64,
        salt_bytes: int = 16,
    ) -> None:
        self._iterations = iterations
        self._key_length = key_length
        self._salt_bytes = salt_bytes

    def _derive(self, password: str, salt: str) -> str:
        return hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            salt.encode("utf-8"),
            self._iterations,
            dklen=self._key_length,
        ).hex()

    def hash(self, password: str) -> str:
        salt = secrets.token_hex(self._salt_bytes)
        return f"{salt}{SEPARATOR}{self._derive(password, salt)}"

    def verify(self, password: str, hashed: str) -> bool:
        salt, sep, expected = (hashed or "").partition(SEPARATOR)
        if not sep or not salt or not expected:
            return False
        computed = self._derive(password, salt)
        return hmac.compare_digest(computed, expected)
