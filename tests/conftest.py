"""Shared pytest fixtures and configuration."""

from collections.abc import Iterator

import pytest

from slidezoom.config import Settings
from slidezoom.utils.logging import clear_correlation_context, configure_logging
from slidezoom.wsi import MemorySlide


@pytest.fixture(autouse=True)
def reset_logging_context() -> Iterator[None]:
    """Reset correlation context between tests."""
    clear_correlation_context()
    yield
    clear_correlation_context()


@pytest.fixture
def test_settings() -> Settings:
    """Create a Settings instance with test-safe defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="console",
    )


@pytest.fixture
def configure_test_logging() -> Iterator[None]:
    """Configure logging for tests with console output."""
    configure_logging(level="DEBUG", log_format="console")
    yield


@pytest.fixture
def square_slide() -> MemorySlide:
    """Single-level 1000x1000 white slide."""
    return MemorySlide.blank([(1000, 1000)])


@pytest.fixture
def pyramid_slide() -> MemorySlide:
    """Three native levels at downsamples 1, 4 and 16.

    Levels: 4096x2048, 1024x512, 256x128.
    """
    return MemorySlide.blank([(4096, 2048), (1024, 512), (256, 128)])


@pytest.fixture
def bounded_slide() -> MemorySlide:
    """Two-level slide declaring a 500x400 non-empty region at (100, 50)."""
    return MemorySlide.blank(
        [(1000, 800), (250, 200)],
        properties={
            "openslide.bounds-x": "100",
            "openslide.bounds-y": "50",
            "openslide.bounds-width": "500",
            "openslide.bounds-height": "400",
        },
    )
