"""Abstract base class for provider adapters."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx

from therapist_relay.api.schemas import ProviderConfig
from therapist_relay.core.errors import EmptyResponseError, ProviderError
from therapist_relay.core.prompts import PayloadShape


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutboundRequest:
    """A fully assembled provider HTTP request."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)


class BaseProvider(ABC):
    """Base interface for provider adapters.

    Adapters hold only the immutable provider configuration, so one instance
    can serve any number of concurrent requests.
    """

    payload_shape: PayloadShape = PayloadShape.MESSAGES

    def __init__(
        self,
        config: ProviderConfig,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the adapter with its configuration."""

        self._config = config
        self._timeout = timeout
        self._transport = transport

    @property
    def config(self) -> ProviderConfig:
        """Return the provider configuration."""

        return self._config

    def describe(self) -> str:
        """Return a log-safe description of the adapter."""

        return f"{self._config.id} ({self._config.type}, model={self._config.model})"

    @abstractmethod
    def endpoint_url(self) -> str:
        """Return the provider endpoint without credentials."""

        raise NotImplementedError

    @abstractmethod
    def build_body(self, payload: str | list[dict[str, str]]) -> dict[str, Any]:
        """Return the JSON request body for a prompt payload."""

        raise NotImplementedError

    @abstractmethod
    def extract_reply(self, data: dict[str, Any]) -> str:
        """Return reply text from a success envelope or raise EmptyResponseError."""

        raise NotImplementedError

    def build_request(self, payload: str | list[dict[str, str]]) -> OutboundRequest:
        """Assemble the outbound request, applying the configured auth scheme."""

        url = self.endpoint_url()
        headers = {"Content-Type": "application/json"}
        api_key = self._config.api_key or ""
        if self._config.auth_scheme == "query-param":
            url = str(httpx.URL(url).copy_merge_params({"key": api_key}))
        else:
            headers["Authorization"] = f"Bearer {api_key}"
        return OutboundRequest(url=url, headers=headers, body=self.build_body(payload))

    async def call_and_parse(self, request: OutboundRequest) -> str:
        """Send the request and return the provider's reply text."""

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(request.url, json=request.body, headers=request.headers)
        if response.is_error:
            message = _extract_error_message(response)
            logger.warning(
                "%s API error: status=%s message=%s",
                self._config.name,
                response.status_code,
                message,
            )
            raise ProviderError(
                f"{self._config.name} API Error: {message}",
                provider_status=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(
                f"{self._config.name} API Error: response was not valid JSON",
                provider_status=response.status_code,
            ) from exc
        logger.debug("%s response payload: %s", self._config.name, data)
        if not isinstance(data, dict):
            raise EmptyResponseError("No response generated")
        return self.extract_reply(data)


def _extract_error_message(response: httpx.Response) -> str:
    """Return the provider's own error text, or the HTTP reason phrase."""

    fallback = response.reason_phrase or f"HTTP {response.status_code}"
    try:
        data = response.json()
    except ValueError:
        return fallback
    if not isinstance(data, dict):
        return fallback
    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if message:
            return str(message)
    elif isinstance(error, str) and error:
        return error
    message = data.get("message")
    if isinstance(message, str) and message:
        return message
    return fallback
