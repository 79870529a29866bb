"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest
import structlog

from email_composer.providers import FixedClock, SeededEntropy


@pytest.fixture
def reset_structlog():
    """Undo any structlog configuration made by the CLI during a test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def mock_settings():
    """Provide mock settings for testing."""
    from email_composer.config import Settings

    return Settings(
        header_fold_width=78,
        default_sender="sender@example.com",
        log_level="DEBUG",
        debug=True,
    )


@pytest.fixture
def fixed_clock() -> FixedClock:
    """Clock frozen at the RFC 5322 reference instant."""
    return FixedClock(datetime(2006, 1, 2, 15, 4, 5, tzinfo=timezone(timedelta(hours=-7))))


@pytest.fixture
def seeded_entropy() -> SeededEntropy:
    return SeededEntropy(1234)


@pytest.fixture
def unfold() -> Callable[[str], str]:
    """Undo RFC 5322 header folding."""

    def _unfold(text: str) -> str:
        return text.replace("\r\n ", " ")

    return _unfold


@pytest.fixture
def sample_html() -> str:
    """Provide a small HTML email document."""
    return (
        "<!DOCTYPE html><html><head><title>Welcome</title></head>"
        "<body><h1>Welcome to our service!</h1>"
        "<p>Thank you for signing up.</p>"
        '<a href="https://example.com/verify">Verify Email Address</a>'
        "</body></html>"
    )
