"""Tests for logging setup."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from url_readers.logging_config import LOGGER_NAME, get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logging.getLogger(LOGGER_NAME).handlers.clear()


def test_console_only():
    logger = setup_logging("WARNING")

    assert logger.name == "url_readers"
    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.WARNING


def test_file_handler(tmp_path):
    logger = setup_logging("INFO", tmp_path / "logs")
    get_logger("reading.gcs").info("registered reader")

    for handler in logger.handlers:
        handler.flush()
    log_text = (tmp_path / "logs" / "url_readers.log").read_text()
    assert "registered reader" in log_text
    assert "url_readers.reading.gcs" in log_text


def test_setup_is_idempotent():
    setup_logging()
    logger = setup_logging()
    assert len(logger.handlers) == 1


def test_file_handler_rotates_by_size(tmp_path):
    logger = setup_logging("INFO", tmp_path, max_bytes=2048, backup_count=2)

    file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].maxBytes == 2048
    assert file_handlers[0].backupCount == 2

    for i in range(100):
        get_logger("reading.registry").info(f"resolved entry {i}")
    for handler in logger.handlers:
        handler.flush()

    assert (tmp_path / "url_readers.log.1").exists()
    assert not (tmp_path / "url_readers.log.3").exists()
    assert (tmp_path / "url_readers.log").stat().st_size <= 2048


def test_setup_closes_previous_file_handler(tmp_path):
    first = setup_logging("INFO", tmp_path)
    old_handler = next(h for h in first.handlers if isinstance(h, RotatingFileHandler))

    setup_logging("INFO")

    assert old_handler.stream is None
