"""Tests for settings and logging setup."""

import json
import logging

import pytest
import structlog

from aeoscore.config import Settings, get_settings
from aeoscore.logging import setup_logging


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)

        assert settings.qualitative_timeout_seconds == 30.0
        assert settings.qualitative_model == "openai/gpt-4o-mini"
        assert settings.digest_token_budget == 2000

    def test_environment_flags(self) -> None:
        assert Settings(env="production").is_production
        assert Settings(env="test").is_test
        assert not Settings(env="test").is_production

    def test_qualitative_available_requires_key(self) -> None:
        assert not Settings(env="test", openrouter_api_key=None, openai_api_key=None).qualitative_available
        assert Settings(env="test", openai_api_key="sk").qualitative_available
        assert not Settings(env="test", openai_api_key="sk", qualitative_enabled=False).qualitative_available

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("QUALITATIVE_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("DIGEST_TOKEN_BUDGET", "500")

        settings = Settings()

        assert settings.qualitative_timeout_seconds == 5.0
        assert settings.digest_token_budget == 500

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_configures_structlog(self) -> None:
        setup_logging()

        assert structlog.is_configured()
        assert logging.getLogger("httpx").level == logging.WARNING
        structlog.get_logger("aeoscore.test").info("logging_configured", check=True)

    def test_explicit_level_raises_noisy_loggers(self) -> None:
        setup_logging(level="error")

        assert logging.getLogger("httpx").level == logging.ERROR
        assert logging.getLogger("httpcore").level == logging.ERROR

    def test_unknown_level_falls_back_to_info(self) -> None:
        setup_logging(level="chatty")

        assert logging.getLogger("httpx").level == logging.WARNING

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(json_output=True)

        structlog.get_logger("aeoscore.test").warning("qualitative_timeout", timeout_seconds=30.0)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        assert json.loads(line)["event"] == "qualitative_timeout"
        assert json.loads(line)["level"] == "warning"

    def teardown_method(self) -> None:
        structlog.reset_defaults()
