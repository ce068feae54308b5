"""Pytest fixtures for SQLite storage tests."""

from pathlib import Path

import pytest


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Path for a throwaway database file."""
    return tmp_path / "test.db"
