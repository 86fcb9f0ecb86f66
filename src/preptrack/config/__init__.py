"""Configuration package for the preparation tracker."""

from preptrack.config.app_config import (
    AppConfig,
    AuthConfig,
    ProviderConfig,
    TrackerConfig,
    clear_config_cache,
    get_provider_config,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "AuthConfig",
    "ProviderConfig",
    "TrackerConfig",
    "clear_config_cache",
    "get_provider_config",
    "load_app_config",
]
