"""Relay error taxonomy.

Every failure the relay reports is a ``RelayError`` subclass. The HTTP layer
maps ``kind`` to a status code, so adapters and the service never deal with
HTTP responses towards the browser directly.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable relay failure categories."""

    VALIDATION = "ValidationError"
    CONFIG = "ConfigError"
    PROVIDER = "ProviderError"
    EMPTY_RESPONSE = "EmptyResponseError"
    TRANSPORT = "TransportError"


class RelayError(Exception):
    """Base class for relay failures.

    Attributes:
        kind: failure category.
        message: human readable text, safe to return to clients.
        provider_status: upstream HTTP status when the provider answered.
    """

    kind: ErrorKind = ErrorKind.PROVIDER

    def __init__(self, message: str, provider_status: int | None = None) -> None:
        self.message = message
        self.provider_status = provider_status
        super().__init__(message)


class ValidationError(RelayError):
    """The inbound request is unusable (client's fault)."""

    kind = ErrorKind.VALIDATION


class ConfigError(RelayError):
    """The server is misconfigured, e.g. the credential is missing."""

    kind = ErrorKind.CONFIG


class ProviderError(RelayError):
    """The upstream service answered with a non-success status."""

    kind = ErrorKind.PROVIDER


class EmptyResponseError(RelayError):
    """The upstream service succeeded but produced no usable reply."""

    kind = ErrorKind.EMPTY_RESPONSE


class TransportError(RelayError):
    """The upstream service could not be reached."""

    kind = ErrorKind.TRANSPORT
