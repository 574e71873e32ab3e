"""
Pytest fixtures and configuration for carve tests.
"""
import logging
from logging.handlers import RotatingFileHandler

import pyarrow as pa
import pytest
from pathlib import Path

from carve.schema import compile_pattern, extract_schema

FIXTURES_DIR = Path(__file__).parent / "fixtures"

LOG_PATTERN = r"^(?P<ts>\d{4}-[^ ]+) (?P<level>\w+) (?P<msg>.+)"


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Drop the handlers setup_logging() installs and restore the root level."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, RotatingFileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def sample_log() -> Path:
    """Log with 9 well-formed entries and 2 malformed lines."""
    return FIXTURES_DIR / "sample.log"


@pytest.fixture
def log_pattern():
    return compile_pattern(LOG_PATTERN)


@pytest.fixture
def log_schema(log_pattern) -> pa.Schema:
    return extract_schema(log_pattern)


@pytest.fixture
def tracking_pool():
    """Memory pool that reports only the bytes allocated through it."""
    return pa.proxy_memory_pool(pa.default_memory_pool())


@pytest.fixture
def output_path(tmp_path) -> Path:
    return tmp_path / "out.arrow"
