"""Unit tests for logging setup and request-scoped context."""

from __future__ import annotations

import logging

import structlog

from tenant_rag.utils.logging import bind_request_context, configure_logging, get_logger


class TestRequestContext:
    def teardown_method(self) -> None:
        structlog.contextvars.clear_contextvars()

    def test_binds_non_none_values(self) -> None:
        bind_request_context(tenant_id="acme", document_id=None)
        assert structlog.contextvars.get_contextvars() == {"tenant_id": "acme"}

    def test_replaces_previous_context(self) -> None:
        bind_request_context(tenant_id="acme", path="/api/v1/query")
        bind_request_context(tenant_id="globex")
        assert structlog.contextvars.get_contextvars() == {"tenant_id": "globex"}


class TestConfigureLogging:
    def test_quiets_third_party_loggers(self) -> None:
        configure_logging(log_level="INFO")
        assert logging.getLogger("chromadb").level == logging.WARNING
        assert logging.getLogger().level == logging.INFO

    def test_get_logger_returns_usable_logger(self) -> None:
        logger = get_logger("tests.logging")
        logger.info("logging_smoke_test", tenant_id="acme")


class TestRendererChoice:
    def teardown_method(self) -> None:
        configure_logging(log_level="INFO")

    def _renderer(self):
        return structlog.get_config()["processors"][-1]

    def test_console_in_development(self, monkeypatch) -> None:
        monkeypatch.setenv("APP_ENV", "development")
        configure_logging()
        assert isinstance(self._renderer(), structlog.dev.ConsoleRenderer)

    def test_json_in_production(self, monkeypatch) -> None:
        monkeypatch.setenv("APP_ENV", "production")
        configure_logging()
        assert isinstance(self._renderer(), structlog.processors.JSONRenderer)

    def test_json_flag_overrides_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("APP_ENV", "development")
        configure_logging(json_output=True)
        assert isinstance(self._renderer(), structlog.processors.JSONRenderer)

    def test_debug_leaves_third_party_loggers_alone(self) -> None:
        logging.getLogger("httpcore").setLevel(logging.NOTSET)
        configure_logging(log_level="DEBUG")
        assert logging.getLogger("httpcore").level == logging.NOTSET
        assert logging.getLogger().level == logging.DEBUG
