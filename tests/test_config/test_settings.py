"""Testes das settings (env → dataclasses congeladas)."""

from __future__ import annotations

import pytest

from config.settings import (
    DEFAULT_API_KEY,
    DEFAULT_WEBHOOK_SECRET,
    ApiSettings,
    BaseSettings,
    WebhookSettings,
)
from config.settings.api import _load_from_env as load_api_settings
from config.settings.base.core import _load_base_from_env
from config.settings.webhook import _load_from_env as load_webhook_settings


class TestApiSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("API_PORT", "API_HOST", "API_KEY", "CORS_ORIGIN", "SESSION_PATH"):
            monkeypatch.delenv(name, raising=False)

        settings = load_api_settings()

        assert settings.port == 3000
        assert settings.host == "0.0.0.0"
        assert settings.api_key == DEFAULT_API_KEY
        assert settings.session_path == "./sessions"
        assert settings.connection_provider == "stub"

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("API_PORT", "8081")
        monkeypatch.setenv("API_KEY", "s3cret")
        monkeypatch.setenv("CORS_ORIGIN", "https://a.example, https://b.example")
        monkeypatch.setenv("STUB_AUTO_PAIR", "true")

        settings = load_api_settings()

        assert settings.port == 8081
        assert settings.api_key == "s3cret"
        assert settings.cors_origins == ["https://a.example", "https://b.example"]
        assert settings.stub_auto_pair is True

    def test_validate_flags_bad_values(self) -> None:
        errors = ApiSettings(port=70000, api_key="", connection_provider="baileys").validate()
        assert len(errors) == 3

    def test_security_warnings(self) -> None:
        warnings = ApiSettings().security_warnings(is_production=True)
        assert set(warnings) == {"API_KEY", "CORS_ORIGIN"}
        assert ApiSettings(api_key="k", cors_origin="https://x").security_warnings(
            is_production=True
        ) == {}

    def test_open_cors_only_warns_in_production(self) -> None:
        assert "CORS_ORIGIN" not in ApiSettings(api_key="k").security_warnings()


class TestWebhookSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in (
            "API_WEBHOOK_SECRET",
            "WEBHOOK_TIMEOUT_MS",
            "WEBHOOK_MAX_RETRIES",
            "WEBHOOK_RETRY_DELAY_MS",
            "WEBHOOK_BACKOFF_FACTOR",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = load_webhook_settings()

        assert settings.secret == DEFAULT_WEBHOOK_SECRET
        assert settings.timeout_ms == 10_000
        assert settings.max_retries == 6
        assert settings.retry_delay_ms == 60_000
        assert settings.backoff_factor == 2.0

    def test_exponential_backoff(self) -> None:
        settings = WebhookSettings(retry_delay_ms=60_000, backoff_factor=2)
        delays = [settings.retry_delay_for(n) for n in range(1, 6)]
        assert delays == [60_000, 120_000, 240_000, 480_000, 960_000]

    def test_validate(self) -> None:
        assert WebhookSettings(secret="x").validate() == []
        errors = WebhookSettings(secret="", timeout_ms=0, max_retries=0).validate()
        assert len(errors) == 3

    def test_default_secret_warning(self) -> None:
        assert "API_WEBHOOK_SECRET" in WebhookSettings().security_warnings()
        assert WebhookSettings(secret="x").security_warnings() == {}


class TestBaseSettings:
    def test_node_env_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.setenv("NODE_ENV", "production")
        assert _load_base_from_env().is_production

    def test_strict_environments(self) -> None:
        assert BaseSettings(environment="staging").is_strict
        assert not BaseSettings().is_strict

    def test_invalid_log_level(self) -> None:
        assert BaseSettings(log_level="LOUD").validate() == ["LOG_LEVEL inválido: LOUD"]
