"""Tests for environment configuration and logging setup."""

from pathlib import Path

import pytest
import structlog

from dynprot.infrastructure import config
from dynprot.infrastructure.logging_config import configure_logging


class TestConfig:
    """Environment accessors."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in (
            "DYNPROT_API_URL",
            "DYNPROT_API_TOKEN",
            "ANALYSIS_TIMEOUT_SECONDS",
            "RETRY_DELAY_SECONDS",
            "LOG_LEVEL",
            "LOG_FORMAT",
        ):
            monkeypatch.delenv(name, raising=False)

        assert config.get_api_url() == "http://localhost:3001/api"
        assert config.get_api_token() is None
        assert config.get_analysis_timeout_seconds() == 30.0
        assert config.get_openfoodfacts_timeout_seconds() == 10.0
        assert config.get_retry_delay_seconds() == 5
        assert config.get_log_level() == "INFO"
        assert config.get_log_format() == "console"

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DYNPROT_API_URL", "https://api.example.com/api/")
        monkeypatch.setenv("DYNPROT_API_TOKEN", "secret")
        monkeypatch.setenv("ANALYSIS_TIMEOUT_SECONDS", "12.5")
        monkeypatch.setenv("RETRY_DELAY_SECONDS", "8")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert config.get_api_url() == "https://api.example.com/api"
        assert config.get_api_token() == "secret"
        assert config.get_analysis_timeout_seconds() == 12.5
        assert config.get_retry_delay_seconds() == 8
        assert config.get_log_level() == "DEBUG"

    @pytest.mark.parametrize("raw", ["abc", "0", "-3"])
    def test_invalid_timeout(self, monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
        monkeypatch.setenv("ANALYSIS_TIMEOUT_SECONDS", raw)

        with pytest.raises(ValueError, match="ANALYSIS_TIMEOUT_SECONDS"):
            config.get_analysis_timeout_seconds()

    def test_load_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """A .env file fills missing variables without overriding set ones."""
        env_file = tmp_path / ".env"
        env_file.write_text("DYNPROT_API_TOKEN=from-file\nLOG_FORMAT=json\n", encoding="utf-8")
        # Registered with monkeypatch so the value loaded from the file is removed on teardown
        monkeypatch.setenv("DYNPROT_API_TOKEN", "placeholder")
        monkeypatch.delenv("DYNPROT_API_TOKEN")
        monkeypatch.setenv("LOG_FORMAT", "console")

        assert config.load_environment(str(env_file)) is True
        assert config.get_api_token() == "from-file"
        assert config.get_log_format() == "console"


class TestConfigureLogging:
    def teardown_method(self) -> None:
        structlog.reset_defaults()

    @pytest.mark.parametrize("log_format", ["console", "json"])
    def test_configure(self, log_format: str) -> None:
        configure_logging(level="debug", log_format=log_format)

        assert structlog.is_configured()

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging(level="chatty")
