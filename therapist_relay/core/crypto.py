"""Encryption helpers for provider API keys kept in the catalog file."""

from __future__ import annotations

from dataclasses import dataclass

from cryptography.fernet import Fernet, InvalidToken


ENC_PREFIX = "enc:"


@dataclass(frozen=True)
class SecretBox:
    """Encrypt/decrypt API keys using Fernet."""

    key: str

    def __post_init__(self) -> None:
        """Validate that a key is supplied."""

        if not self.key:
            raise ValueError("Encryption key is required.")

    def _fernet(self) -> Fernet:
        return Fernet(self.key.encode("utf-8"))

    def encrypt(self, value: str) -> str:
        """Encrypt a plaintext API key into an ``enc:`` token."""

        token = self._fernet().encrypt(value.encode("utf-8")).decode("utf-8")
        return f"{ENC_PREFIX}{token}"

    def decrypt(self, value: str) -> str:
        """Decrypt an ``enc:`` token; plaintext values pass through."""

        if not is_encrypted(value):
            return value
        token = value[len(ENC_PREFIX) :]
        try:
            return self._fernet().decrypt(token.encode("utf-8")).decode("utf-8")
        except InvalidToken as exc:
            raise ValueError("Invalid encrypted API key.") from exc


def is_encrypted(value: str | None) -> bool:
    """Return True when the value looks encrypted."""

    return bool(value and value.startswith(ENC_PREFIX))


def generate_key() -> str:
    """Return a fresh Fernet key suitable for PROVIDERS_ENC_KEY."""

    return Fernet.generate_key().decode("utf-8")
