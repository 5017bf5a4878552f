"""Shared fixtures."""

from __future__ import annotations

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop sinks the CLI installs so later tests never write to a closed stream."""
    yield
    logger.remove()
    logger.disable("md2docx")
