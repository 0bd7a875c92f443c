"""Root conftest: test environment from .env.tests and the portal's structlog chain."""

from pathlib import Path

import pytest
import structlog
from dotenv import load_dotenv

from accounts.logging import configure_structlog

load_dotenv(Path(__file__).resolve().parent.parent / ".env.tests")

configure_structlog()


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """Drop bound context between tests and restore the portal chain after setup_logging tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
    configure_structlog()
