"""Fixtures for slide integration tests.

These tests need a real slide file and are skipped when none is available.

Provide one via:
1. WSI_TEST_FILE environment variable pointing to a local slide
2. A ``data/`` directory next to this file holding ``*.svs`` slides

The CMU-1-Small-Region.svs file (~2MB) is recommended for CI:
    https://openslide.cs.cmu.edu/download/openslide-testdata/Aperio/CMU-1-Small-Region.svs
"""

from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import pytest

from slidezoom.wsi import SUPPORTED_EXTENSIONS

pytestmark = pytest.mark.integration


def get_test_wsi_path() -> Path | None:
    """Return a real slide to test against, or None."""
    env_path = os.environ.get("WSI_TEST_FILE")
    if env_path:
        path = Path(env_path)
        if path.exists() and path.suffix.lower() in SUPPORTED_EXTENSIONS:
            return path

    test_data_dir = Path(__file__).parent / "data"
    if test_data_dir.exists():
        for svs_file in sorted(test_data_dir.glob("*.svs")):
            return svs_file

    return None


@pytest.fixture(scope="session")
def wsi_test_file() -> Generator[Path, None, None]:
    """Provide path to a real slide, skipping the test if there is none."""
    path = get_test_wsi_path()
    if path is None:
        pytest.skip(
            "No WSI test file available. "
            "Set WSI_TEST_FILE environment variable or download test data. "
            "Example: curl -LO https://openslide.cs.cmu.edu/download/"
            "openslide-testdata/Aperio/CMU-1-Small-Region.svs"
        )
    yield path
