from __future__ import annotations

import datetime as dt
import logging

import pytest

from nmr_mirror.console import LOGGER_NAME

from .helpers import NOW


@pytest.fixture
def now() -> dt.datetime:
    return NOW


@pytest.fixture
def test_logger() -> logging.Logger:
    logger = logging.getLogger("tests.nmr_mirror")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture(autouse=True)
def reset_app_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
