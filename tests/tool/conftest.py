"""Test fixtures for catalog-sync tools."""

from pathlib import Path

import pytest

from . import write_chart


@pytest.fixture
def repo_path(tmp_path: Path) -> Path:
    """Create a local chart repository with two charts."""
    path = tmp_path / "repo"
    write_chart(path, "nginx", "1.0.0", **{"questions.yml": "categories: [web]\n"})
    write_chart(path, "nginx", "1.1.0")
    write_chart(path, "redis", "6.0.0")
    return path


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    return tmp_path / "state"
