"""
Global pytest configuration and fixtures.
"""

import logging
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "definitions"


@pytest.fixture
def definitions_dir() -> Path:
    """Directory holding field-set definition files."""
    return FIXTURES_DIR


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore logger state changed by CLI invocations."""
    root_logger = logging.getLogger()
    package_logger = logging.getLogger("paramguard")
    handlers = root_logger.handlers[:]
    levels = (root_logger.level, package_logger.level)
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(levels[0])
    package_logger.setLevel(levels[1])
