"""Tests for uimap.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from uimap.logging import configure_logging, get_logger


def test_get_logger_is_namespaced() -> None:
    assert get_logger().name == "uimap"
    assert get_logger("scanner").name == "uimap.scanner"


def test_configure_logging_is_idempotent(tmp_path: Path) -> None:
    log_file = tmp_path / "uimap.log"

    configure_logging(verbose=True, log_file=log_file)
    logger = configure_logging(verbose=True, log_file=log_file)
    get_logger("scanner").debug("scanning %s", "fixture")

    try:
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        for handler in logger.handlers:
            handler.flush()
        assert "scanning fixture" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
