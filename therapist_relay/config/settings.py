"""Application settings and path helpers for the relay."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    """Container for runtime settings and important project paths."""

    project_root: Path
    config_dir: Path
    frontend_dir: Path
    providers_file: Path
    active_provider: str
    environment: str
    log_level: str
    port: int
    provider_request_timeout: float | None
    thought_filter_enabled: bool
    providers_encryption_key: str | None

    @property
    def is_development(self) -> bool:
        """Return True when error details may be echoed to clients."""

        return self.environment == "development"


def _project_root() -> Path:
    """Resolve the project root based on the current file location."""

    return Path(__file__).resolve().parents[2]


def load_settings() -> Settings:
    """Load settings with environment overrides and derived paths."""

    project_root = _project_root()
    config_dir = project_root / "config"
    frontend_dir = project_root / "public"
    providers_file = Path(os.getenv("PROVIDERS_FILE") or config_dir / "providers.yaml")
    active_provider = os.getenv("RELAY_PROVIDER", "gemini").strip().lower()
    environment = os.getenv("APP_ENV", "production").strip().lower()
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    port = int(os.getenv("PORT", "3001"))
    provider_request_timeout_raw = float(os.getenv("PROVIDER_REQUEST_TIMEOUT", "120"))
    provider_request_timeout = (
        None if provider_request_timeout_raw <= 0 else provider_request_timeout_raw
    )
    thought_filter_enabled = _parse_bool(os.getenv("THOUGHT_FILTER_ENABLED", "true"))
    providers_encryption_key = os.getenv("PROVIDERS_ENC_KEY") or None
    return Settings(
        project_root=project_root,
        config_dir=config_dir,
        frontend_dir=frontend_dir,
        providers_file=providers_file,
        active_provider=active_provider,
        environment=environment,
        log_level=log_level,
        port=port,
        provider_request_timeout=provider_request_timeout,
        thought_filter_enabled=thought_filter_enabled,
        providers_encryption_key=providers_encryption_key,
    )


def _parse_bool(value: str) -> bool:
    """Parse a boolean environment value."""

    normalized = value.strip().lower()
    return normalized in {"1", "true", "yes", "on"}
