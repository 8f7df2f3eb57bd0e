"""
Shared pytest fixtures.

Every test starts from the default Doug settings and from unconfigured Doug loggers,
so that tests calling `DougSetting.set()` or `setup_logging()` do not leak into others.
"""
import logging

import pytest

from doug.config import DougSetting
from doug.constants import (
    CLIENT_LOGGER_NAME,
    EVENT_LOGGER_NAME,
    REGISTRY_LOGGER_NAME,
    ROOT_LOGGER_NAME,
    TRACE_LOGGER_NAME,
    TRANSPORT_LOGGER_NAME,
)

DOUG_LOGGER_NAMES = [
    ROOT_LOGGER_NAME,
    EVENT_LOGGER_NAME,
    TRACE_LOGGER_NAME,
    REGISTRY_LOGGER_NAME,
    CLIENT_LOGGER_NAME,
    TRANSPORT_LOGGER_NAME,
]


@pytest.fixture(autouse=True)
def default_setting():
    DougSetting.reset()
    yield
    DougSetting.reset()


@pytest.fixture(autouse=True)
def unconfigured_loggers():
    yield
    for name in DOUG_LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(logging.NOTSET)
        if name == ROOT_LOGGER_NAME:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
