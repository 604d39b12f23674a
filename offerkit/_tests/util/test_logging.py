from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import colorlog
import pytest
from concurrent_log_handler import ConcurrentRotatingFileHandler

from offerkit.util.offerkit_logging import initialize_logging, set_log_level


@pytest.fixture(name="root_logger")
def root_logger_fixture() -> Iterator[logging.Logger]:
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    aiohttp_level = logging.getLogger("aiohttp").level
    yield root_logger
    logging.getLogger("aiohttp").setLevel(aiohttp_level)
    for handler in list(root_logger.handlers):
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)


def test_file_logging(tmp_path: Path, root_logger: logging.Logger) -> None:
    initialize_logging("offerkit", {"log_level": "INFO", "log_filename": "log/debug.log"}, tmp_path)
    handler = root_logger.handlers[-1]
    assert isinstance(handler, ConcurrentRotatingFileHandler)
    assert handler.level == logging.INFO

    logging.getLogger("offerkit.test").info("built an offer")
    handler.flush()
    contents = (tmp_path / "log" / "debug.log").read_text()
    assert "offerkit" in contents
    assert "built an offer" in contents


def test_stdout_logging(tmp_path: Path, root_logger: logging.Logger) -> None:
    initialize_logging("offerkit", {"log_stdout": True, "log_level": "DEBUG"}, tmp_path)
    assert isinstance(root_logger.handlers[-1], colorlog.StreamHandler)
    assert root_logger.level <= logging.DEBUG
    assert logging.getLogger("aiohttp").level == logging.INFO
    assert not (tmp_path / "log").exists()


def test_invalid_log_level(tmp_path: Path, root_logger: logging.Logger) -> None:
    initialize_logging("offerkit", {"log_stdout": True}, tmp_path)
    errors = set_log_level("LOUD", "offerkit")
    assert len(errors) >= 1
    assert "Invalid log level 'LOUD'" in errors[0]
    assert root_logger.handlers[-1].level == logging.WARNING
