"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from tests.helpers import write_project


@pytest.fixture
def sample_config(tmp_path: Path) -> Path:
    """A sample project with its artifact files in place."""
    return write_project(tmp_path)
