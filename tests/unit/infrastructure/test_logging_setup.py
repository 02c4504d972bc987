"""Tests for structlog/stdlib logging configuration."""

from __future__ import annotations

import logging

import structlog

from flixarr.infrastructure.config.schema import AppConfig
from flixarr.infrastructure.logging.setup import build_logging_config, configure_logging


class TestBuildLoggingConfig:
    def test_console_renderer_in_dev(self) -> None:
        cfg = build_logging_config(AppConfig(environment="dev"))
        processors = cfg["formatters"]["structlog"]["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_json_renderer_in_prod(self) -> None:
        cfg = build_logging_config(AppConfig(environment="prod"))
        processors = cfg["formatters"]["structlog"]["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_level_applied_to_root_and_uvicorn(self) -> None:
        cfg = build_logging_config(AppConfig(log_level="WARNING"))
        assert cfg["root"]["level"] == "WARNING"
        assert cfg["loggers"]["uvicorn"]["level"] == "WARNING"
        assert cfg["loggers"]["uvicorn.access"]["handlers"] == ["access"]


class TestConfigureLogging:
    def test_configures_root_level(self) -> None:
        cfg = configure_logging(AppConfig(log_level="DEBUG", log_format="json"))
        try:
            assert cfg["root"]["level"] == "DEBUG"
            assert logging.getLogger().level == logging.DEBUG
        finally:
            structlog.reset_defaults()
            logging.getLogger().setLevel(logging.WARNING)
