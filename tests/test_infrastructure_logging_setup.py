"""Tests for logging configuration."""

from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from resagg.infrastructure.logging_setup import configure_logging


def test_configure_logging_installs_single_rich_handler() -> None:
    configure_logging("debug")
    configure_logging("INFO")
    logger = logging.getLogger("resagg")
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], RichHandler)


def test_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError, match="invalid log level"):
        configure_logging("chatty")
