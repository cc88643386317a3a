"""Shared test fixtures."""

from pathlib import Path

import pytest

from reclaimer.config import Settings
from reclaimer.scanner import SizeProber


@pytest.fixture
def walk_prober():
    """A prober that never shells out, so sizes are exact byte counts."""
    return SizeProber(native_probe=None)


@pytest.fixture
def make_file():
    """Create a file of an exact size, creating parent folders."""

    def _make(path: Path, size: int) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x" * size)
        return path

    return _make


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    """Settings that walk folders and keep stats under tmp_path."""
    settings = Settings(
        use_native_probe=False,
        stats_file=str(tmp_path / "state" / "stats.json"),
    )
    monkeypatch.setattr("reclaimer.cli.load_settings", lambda: settings)
    return settings
