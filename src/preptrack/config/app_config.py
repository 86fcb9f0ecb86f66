"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml,
falling back to built-in defaults when the file is missing.

Usage:
    from preptrack.config.app_config import load_app_config, get_provider_config

    config = load_app_config()
    provider = get_provider_config("openai")
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to working directory)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")

# Overrides tracker.db_path when set
DB_PATH_ENV = "PREPTRACK_DB"


@dataclass
class ProviderConfig:
    """Configuration for a single LLM provider."""

    base_url: str | None
    default_model: str
    api_key_env: str | None = None

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class TrackerConfig:
    """Tracker-wide defaults: storage, streak rewards, moderation."""

    default_provider: str = "openai"
    db_path: str = "db/preptrack.db"
    streak_base_points: int = 10
    streak_milestones: dict[int, int] = field(
        default_factory=lambda: {7: 50, 14: 100, 30: 200}
    )
    default_ban_hours: int = 24
    spectate_max_hours: int = 168


@dataclass
class AuthConfig:
    """Credential and session settings."""

    token_ttl_hours: int = 24 * 7
    bcrypt_rounds: int = 12


@dataclass
class AppConfig:
    """Application-wide configuration."""

    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)

    @property
    def db_path(self) -> Path:
        """Database path, honouring the PREPTRACK_DB override."""
        return Path(os.environ.get(DB_PATH_ENV) or self.tracker.db_path)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "providers": {
            "openai": {
                "base_url": None,
                "default_model": "gpt-4o-mini",
                "api_key_env": "OPENAI_API_KEY",
            },
            "lmstudio": {
                "base_url": "http://localhost:1234/v1",
                "default_model": "llama-3.2-3b-instruct",
                "api_key_env": None,
            },
        },
        "tracker": {
            "default_provider": "openai",
            "db_path": "db/preptrack.db",
            "streak_base_points": 10,
            "streak_milestones": {7: 50, 14: 100, 30: 200},
            "default_ban_hours": 24,
            "spectate_max_hours": 168,
        },
        "auth": {
            "token_ttl_hours": 24 * 7,
            "bcrypt_rounds": 12,
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    providers = {}
    for name, pconfig in (data.get("providers") or defaults["providers"]).items():
        providers[name] = ProviderConfig(
            base_url=pconfig.get("base_url"),
            default_model=pconfig.get("default_model", "default"),
            api_key_env=pconfig.get("api_key_env"),
        )

    tracker_data = {**defaults["tracker"], **(data.get("tracker") or {})}
    tracker = TrackerConfig(
        default_provider=tracker_data["default_provider"],
        db_path=tracker_data["db_path"],
        streak_base_points=int(tracker_data["streak_base_points"]),
        # YAML keys may arrive as strings
        streak_milestones={
            int(k): int(v) for k, v in tracker_data["streak_milestones"].items()
        },
        default_ban_hours=int(tracker_data["default_ban_hours"]),
        spectate_max_hours=int(tracker_data["spectate_max_hours"]),
    )

    auth_data = {**defaults["auth"], **(data.get("auth") or {})}
    auth = AuthConfig(
        token_ttl_hours=int(auth_data["token_ttl_hours"]),
        bcrypt_rounds=int(auth_data["bcrypt_rounds"]),
    )

    return AppConfig(providers=providers, tracker=tracker, auth=auth)


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def get_provider_config(provider: str) -> ProviderConfig | None:
    """Get configuration for a specific provider.

    Args:
        provider: Provider name (e.g., "openai", "lmstudio")

    Returns:
        ProviderConfig or None if provider not found.
    """
    config = load_app_config()
    return config.providers.get(provider)


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
