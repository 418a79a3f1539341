"""Configuration management for TerminalTutor."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ApiKeyNotConfiguredError
from .utils import write_private_text

DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_LANGUAGE = "en-us"
DEFAULT_API_BASE = "https://generativelanguage.googleapis.com"
STORED_KEYS = ("api_key", "model", "language")


def default_config_path() -> Path:
    return Path.home() / ".config" / "tt" / "config.json"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="TT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # API Configuration
    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("TT_API_KEY", "GEMINI_API_KEY"),
        description="API key for the Gemini service",
    )
    model: str = Field(default=DEFAULT_MODEL, description="Gemini model name")
    language: str = Field(default=DEFAULT_LANGUAGE, description="Response language code")
    api_base: str = Field(default=DEFAULT_API_BASE, description="Service base URL")

    # Transport Configuration
    connect_timeout: float = Field(default=30.0, description="Connect timeout in seconds")
    read_timeout: float = Field(default=60.0, description="Read timeout for blocking calls in seconds")
    stream_read_timeout: float = Field(default=120.0, description="Read timeout for streaming calls in seconds")

    # Session Configuration
    home: Path = Field(default_factory=lambda: Path.home() / ".tt", description="Session directory")
    max_history_pairs: int = Field(default=10, ge=1, description="Turn pairs kept per session")
    token_limit: int = Field(default=1_000_000, gt=0, description="Context ceiling used for budget alerts")

    # Execution Configuration
    output_limit: int = Field(default=2000, gt=0, description="Captured output kept for session context")

    # Logging Configuration
    log_level: str = Field(default="WARNING", description="Log level")

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ApiKeyNotConfiguredError("API key not configured. Run 'tt auth' or set GEMINI_API_KEY.")
        return self.api_key


class ConfigStore:
    """Owner-only JSON file holding the stored API key, model and language."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_config_path()

    def load(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("config.load.failed path={} error={}", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            return {}
        return {key: value for key, value in payload.items() if key in STORED_KEYS and isinstance(value, str) and value}

    def get(self, key: str) -> str | None:
        return self.load().get(key)

    def set(self, key: str, value: str) -> None:
        if key not in STORED_KEYS:
            raise KeyError(key)
        values = self.load()
        values[key] = value
        self._write(values)

    def reset(self) -> None:
        """Drop the stored model and language, keeping the API key."""
        values = self.load()
        values.pop("model", None)
        values.pop("language", None)
        self._write(values)

    def _write(self, values: dict[str, str]) -> None:
        write_private_text(self.path, json.dumps(values, indent=2) + "\n")


def load_settings(store: ConfigStore | None = None, **overrides: Any) -> Settings:
    """Build settings, layering stored credentials over environment and defaults.

    Args:
        store: Optional config store override
        **overrides: Explicit values that win over everything else

    Returns:
        Settings instance
    """
    stored = (store or ConfigStore()).load()
    values: dict[str, Any] = {**stored, **{key: value for key, value in overrides.items() if value is not None}}
    return Settings(**values)
