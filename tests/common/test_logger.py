# tests/common/test_logger.py
"""
Тесты модуля логирования (src/common/logger.py).
"""

from __future__ import annotations

import json
import logging
import sys
from unittest.mock import patch

import pytest

from src.common import logger as logger_module
from src.common.constants import TypeMsg
from src.common.logger import (
    ColoredFormatter,
    JsonFormatter,
    _get_caller_info,
    get_logger,
    log_error,
    log_info,
    log_warning,
)


def _record(level: int = logging.INFO, msg: str = "Ride accepted", exc_info=None) -> logging.LogRecord:
    record = logging.LogRecord(
        name="ride_hailing_test",
        level=level,
        pathname="service.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    record.module = "service"
    record.funcName = "accept_ride"
    return record


class TestJsonFormatter:
    """Тесты JsonFormatter."""

    def test_basic_fields(self) -> None:
        data = json.loads(JsonFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["message"] == "Ride accepted"
        assert data["function"] == "accept_ride"
        assert data["line"] == 42
        assert data["timestamp"].endswith("Z")

    def test_extra_data(self) -> None:
        record = _record()
        record.extra_data = {"ride_id": "ride-1"}

        data = json.loads(JsonFormatter().format(record))
        assert data["extra"] == {"ride_id": "ride-1"}

    def test_exception(self) -> None:
        try:
            raise ValueError("boom")
        except ValueError:
            exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(_record(logging.ERROR, exc_info=exc_info)))
        assert "ValueError: boom" in data["exception"]

    def test_non_ascii_kept(self) -> None:
        result = JsonFormatter().format(_record(msg="Praça da Sé"))
        assert "Praça da Sé" in result


class TestColoredFormatter:
    """Тесты ColoredFormatter."""

    def test_level_and_color(self) -> None:
        result = ColoredFormatter().format(_record(logging.WARNING))

        assert "[WARNING]" in result
        assert ColoredFormatter.COLORS["WARNING"] in result

    def test_caller_info(self) -> None:
        record = _record()
        record.extra_data = {
            "caller_function": "settle",
            "caller_module": "src.core.billing.service",
            "caller_file": "service.py",
            "caller_line": 77,
        }

        result = ColoredFormatter().format(record)
        assert "src.core.billing.service.settle() service.py:77" in result


class TestGetLogger:
    """Тесты get_logger."""

    def test_cached(self) -> None:
        assert get_logger("ride_hailing_cache_test") is get_logger("ride_hailing_cache_test")

    def test_single_console_handler(self) -> None:
        logger = get_logger("ride_hailing_handlers_test")

        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_settings_fallback(self) -> None:
        """При ошибке чтения настроек используются значения по умолчанию."""
        with patch("src.config.settings", new=None):
            config = logger_module._read_logging_settings()

        assert config["level"] == "DEBUG"
        assert config["to_file"] is False


class TestCallerInfo:
    """Тесты _get_caller_info."""

    def test_reports_caller(self) -> None:
        def wrapper() -> dict:
            return _get_caller_info()

        info = wrapper()
        assert info["caller_function"] == "test_reports_caller"
        assert info["caller_file"] == "test_logger.py"


class TestLogFunctions:
    """Тесты асинхронных функций логирования."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "type_msg, level",
        [
            (TypeMsg.DEBUG, logging.DEBUG),
            (TypeMsg.INFO, logging.INFO),
            (TypeMsg.WARNING, logging.WARNING),
            (TypeMsg.ERROR, logging.ERROR),
            (TypeMsg.CRITICAL, logging.CRITICAL),
        ],
    )
    async def test_log_info_levels(self, caplog: pytest.LogCaptureFixture, type_msg: TypeMsg, level: int) -> None:
        logger = get_logger("ride_hailing_levels_test")
        logger.propagate = True
        try:
            with caplog.at_level(logging.DEBUG, logger="ride_hailing_levels_test"):
                await log_info("message", type_msg=type_msg, logger_name="ride_hailing_levels_test")
        finally:
            logger.propagate = False

        assert caplog.records[-1].levelno == level

    @pytest.mark.asyncio
    async def test_log_warning_caller(self, caplog: pytest.LogCaptureFixture) -> None:
        """log_warning указывает на вызывающий код, а не на себя."""
        logger = get_logger("ride_hailing_warning_test")
        logger.propagate = True
        try:
            with caplog.at_level(logging.DEBUG, logger="ride_hailing_warning_test"):
                await log_warning("careful", logger_name="ride_hailing_warning_test")
        finally:
            logger.propagate = False

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.extra_data["caller_function"] == "test_log_warning_caller"

    @pytest.mark.asyncio
    async def test_log_error_with_extra(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("ride_hailing_error_test")
        logger.propagate = True
        try:
            with caplog.at_level(logging.DEBUG, logger="ride_hailing_error_test"):
                await log_error("failed", logger_name="ride_hailing_error_test", extra={"ride_id": "ride-1"})
        finally:
            logger.propagate = False

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.extra_data["ride_id"] == "ride-1"
