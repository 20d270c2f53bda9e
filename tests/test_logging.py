"""Test logging helpers."""

import logging

from gitbridge.logging import get_logger


def test_get_logger_prefixes_name():
    assert get_logger("objects").name == "gitbridge.objects"


def test_get_logger_keeps_package_names():
    logger = get_logger("gitbridge.cli")
    assert logger.name == "gitbridge.cli"
    assert logger is logging.getLogger("gitbridge.cli")
