"""Provider registry: loads the catalog and resolves the active adapter."""

from __future__ import annotations

import logging
import os
import re
import threading
from pathlib import Path
from typing import Any

import httpx
import yaml

from therapist_relay.api.schemas import ProviderConfig
from therapist_relay.config.settings import Settings, load_settings
from therapist_relay.core.crypto import SecretBox, is_encrypted
from therapist_relay.providers.base import BaseProvider
from therapist_relay.providers.google_provider import GoogleProvider
from therapist_relay.providers.openai_provider import OpenAIProvider


ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")
logger = logging.getLogger(__name__)

PROVIDER_TYPES: dict[str, type[BaseProvider]] = {
    "google": GoogleProvider,
    "gemini": GoogleProvider,
    "openai": OpenAIProvider,
    "ollama": OpenAIProvider,
}


def _expand_env_value(value: str) -> str:
    """Expand environment variables in a string value."""

    def replace(match: re.Match[str]) -> str:
        env_value = os.getenv(match.group(1))
        return env_value if env_value is not None else match.group(0)

    return ENV_PATTERN.sub(replace, value)


def _expand_env(data: Any) -> Any:
    """Recursively expand environment variables inside nested data."""

    if isinstance(data, dict):
        return {key: _expand_env(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_expand_env(value) for value in data]
    if isinstance(data, str):
        return _expand_env_value(data)
    return data


def _load_yaml(file_path: Path) -> dict[str, Any]:
    """Load YAML content from a file."""

    if not file_path.exists():
        raise FileNotFoundError(f"Provider config not found: {file_path}")
    content = file_path.read_text(encoding="utf-8")
    data = yaml.safe_load(content) or {}
    if not isinstance(data, dict):
        raise ValueError("Provider config root must be a mapping.")
    return data


def _resolve_api_key(raw: Any, secret_box: SecretBox | None) -> str | None:
    """Return a usable API key, or None when it is unset."""

    if raw is None:
        return None
    value = str(raw).strip()
    # an unexpanded ${VAR} means the variable is not set
    if not value or ENV_PATTERN.fullmatch(value):
        return None
    if is_encrypted(value):
        if secret_box is None:
            raise ValueError("Encrypted API key found but PROVIDERS_ENC_KEY is not set.")
        return secret_box.decrypt(value)
    return value


def build_provider(
    config: ProviderConfig,
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BaseProvider:
    """Create an adapter instance based on the provider type."""

    provider_cls = PROVIDER_TYPES.get(config.type.lower())
    if provider_cls is None:
        raise ValueError(f"Unsupported provider type: {config.type}")
    return provider_cls(config, timeout=timeout, transport=transport)


class ProviderRegistry:
    """Holds the provider catalog and the adapter chosen at startup."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the registry from settings."""

        self._settings = settings
        self._transport = transport
        self._lock = threading.Lock()
        self._configs: dict[str, ProviderConfig] = {}
        self._active: BaseProvider | None = None

    def load(self) -> BaseProvider:
        """Load the catalog from disk and build the active adapter."""

        with self._lock:
            data = _load_yaml(self._settings.providers_file)
            providers_raw = data.get("providers", [])
            if not isinstance(providers_raw, list):
                raise ValueError("providers field must be a list.")
            secret_box = (
                SecretBox(self._settings.providers_encryption_key)
                if self._settings.providers_encryption_key
                else None
            )
            configs: dict[str, ProviderConfig] = {}
            for item in _expand_env(providers_raw):
                item = dict(item)
                item["api_key"] = _resolve_api_key(item.get("api_key"), secret_box)
                config = ProviderConfig.model_validate(item)
                configs[config.id.lower()] = config
            active_id = self._settings.active_provider
            if active_id not in configs:
                raise KeyError(
                    f"Provider not found: {active_id} (available: {', '.join(sorted(configs))})"
                )
            self._configs = configs
            self._active = build_provider(
                configs[active_id],
                timeout=self._settings.provider_request_timeout,
                transport=self._transport,
            )
            logger.info(
                "Active provider: %s, configured: %s",
                self._active.describe(),
                self._active.config.has_api_key,
            )
            return self._active

    def list_configs(self) -> list[ProviderConfig]:
        """Return all provider configs."""

        with self._lock:
            return list(self._configs.values())

    @property
    def active(self) -> BaseProvider:
        """Return the adapter selected at startup."""

        with self._lock:
            if self._active is None:
                raise RuntimeError("Provider registry has not been loaded.")
            return self._active


_registry_instance: ProviderRegistry | None = None


def get_provider_registry() -> ProviderRegistry:
    """Return the singleton provider registry."""

    global _registry_instance
    if _registry_instance is None:
        _registry_instance = ProviderRegistry(load_settings())
    return _registry_instance
