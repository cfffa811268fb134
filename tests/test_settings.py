"""
Tests for environment-driven settings.
"""

import pytest

from patreon_api.config.settings import (
    DEFAULT_API_BASE_URL,
    DEFAULT_OAUTH_TOKEN_URL,
    Settings,
)
from patreon_api.utils.exceptions import ConfigurationError


class TestSettingsDefaults:
    """Test default values and validation."""

    def test_defaults(self):
        settings = Settings()

        assert settings.api_base_url == DEFAULT_API_BASE_URL
        assert settings.oauth_token_url == DEFAULT_OAUTH_TOKEN_URL
        assert settings.webhook_digest == "sha256"
        assert settings.webhook_signature_header == "X-Patreon-Signature"
        assert settings.webhook_event_header == "X-Patreon-Event"
        assert settings.request_timeout == 30.0
        assert settings.max_retries == 3

    def test_values_are_normalized(self):
        settings = Settings(
            webhook_digest="MD5",
            log_level="debug",
            log_format="TEXT",
            api_base_url="https://proxy.example.com/v2/",
        )

        assert settings.webhook_digest == "md5"
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "text"
        assert settings.api_base_url == "https://proxy.example.com/v2"

    @pytest.mark.parametrize("overrides,key", [
        ({"webhook_digest": "sha1"}, "webhook_digest"),
        ({"request_timeout": 0}, "request_timeout"),
        ({"max_retries": -1}, "max_retries"),
        ({"retry_backoff_factor": 0.5}, "retry_backoff_factor"),
        ({"log_level": "verbose"}, "log_level"),
        ({"log_format": "xml"}, "log_format"),
    ])
    def test_invalid_values(self, overrides, key):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(**overrides)
        assert exc_info.value.details["config_key"] == key


class TestSettingsFromEnv:
    """Test loading from environment variables."""

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PATREON_WEBHOOK_SECRET", "from-env")
        monkeypatch.setenv("PATREON_WEBHOOK_DIGEST", "md5")
        monkeypatch.setenv("PATREON_REQUEST_TIMEOUT", "12.5")
        monkeypatch.setenv("PATREON_MAX_RETRIES", "7")
        monkeypatch.setenv("PATREON_API_BASE_URL", "https://api.example.com/v2/")

        settings = Settings.from_env()

        assert settings.webhook_secret == "from-env"
        assert settings.webhook_digest == "md5"
        assert settings.request_timeout == 12.5
        assert settings.max_retries == 7
        assert settings.api_base_url == "https://api.example.com/v2"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("PATREON_CLIENT_ID", "env-id")
        settings = Settings.from_env(client_id="explicit-id")
        assert settings.client_id == "explicit-id"

    def test_invalid_number(self, monkeypatch):
        monkeypatch.setenv("PATREON_MAX_RETRIES", "many")
        with pytest.raises(ConfigurationError):
            Settings.from_env()

    def test_invalid_digest(self, monkeypatch):
        monkeypatch.setenv("PATREON_WEBHOOK_DIGEST", "crc32")
        with pytest.raises(ConfigurationError):
            Settings.from_env()
