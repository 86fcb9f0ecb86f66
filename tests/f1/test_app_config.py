"""Tests for app configuration (F1).

Tests the configuration loading, provider configs, and fallbacks.
"""

from pathlib import Path

from preptrack.config import app_config
from preptrack.config.app_config import (
    AppConfig,
    AuthConfig,
    TrackerConfig,
    _parse_config,
    clear_config_cache,
    get_provider_config,
    load_app_config,
)


class TestLoadAppConfig:
    """Tests for load_app_config function."""

    def test_load_config_from_yaml(self):
        """Loads config from app_config_v1.yaml."""
        clear_config_cache()
        config = load_app_config()
        assert isinstance(config, AppConfig)

    def test_config_has_providers(self):
        """Config includes provider settings."""
        config = load_app_config()
        assert "openai" in config.providers
        assert "lmstudio" in config.providers

    def test_config_has_tracker_settings(self):
        """Config includes tracker defaults."""
        config = load_app_config()
        assert isinstance(config.tracker, TrackerConfig)
        assert config.tracker.streak_base_points == 10
        assert config.tracker.streak_milestones[7] == 50

    def test_cached_until_cleared(self):
        """Second call returns the cached object."""
        first = load_app_config()
        assert load_app_config() is first
        clear_config_cache()
        assert load_app_config() is not first

    def test_missing_file_uses_defaults(self, tmp_path, monkeypatch):
        """Built-in defaults apply when the YAML file is absent."""
        monkeypatch.setattr(app_config, "CONFIG_FILE", tmp_path / "missing.yaml")
        config = load_app_config(force_reload=True)
        assert config.tracker.default_ban_hours == 24
        assert config.auth.token_ttl_hours == 168


class TestParseConfig:
    """Tests for _parse_config."""

    def test_partial_tracker_merges_defaults(self):
        """Unspecified tracker keys fall back to defaults."""
        config = _parse_config({"tracker": {"default_ban_hours": 48}})
        assert config.tracker.default_ban_hours == 48
        assert config.tracker.spectate_max_hours == 168

    def test_milestone_keys_become_ints(self):
        """YAML milestone keys given as strings are normalized."""
        config = _parse_config({"tracker": {"streak_milestones": {"3": 5}}})
        assert config.tracker.streak_milestones == {3: 5}

    def test_auth_section(self):
        """Auth settings are parsed."""
        config = _parse_config({"auth": {"bcrypt_rounds": 10}})
        assert isinstance(config.auth, AuthConfig)
        assert config.auth.bcrypt_rounds == 10


class TestDbPath:
    """Tests for the database path override."""

    def test_env_override(self, monkeypatch, tmp_path):
        """PREPTRACK_DB wins over the config value."""
        monkeypatch.setenv("PREPTRACK_DB", str(tmp_path / "x.db"))
        assert load_app_config().db_path == tmp_path / "x.db"

    def test_default_path(self):
        """Without override, tracker.db_path is used."""
        assert load_app_config().db_path == Path("db/preptrack.db")


class TestGetProviderConfig:
    """Tests for get_provider_config function."""

    def test_known_provider(self):
        """Returns the provider block."""
        provider = get_provider_config("lmstudio")
        assert provider is not None
        assert provider.base_url == "http://localhost:1234/v1"

    def test_unknown_provider(self):
        """Unknown providers return None."""
        assert get_provider_config("nope") is None

    def test_api_key_from_env(self, monkeypatch):
        """API key is read from the configured env var."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert get_provider_config("openai").get_api_key() == "sk-test"
