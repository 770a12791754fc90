"""Pytest configuration and shared fixtures for prompt-assembler tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

WriteFile = Callable[[Path, str, str], Path]


def _write_file(root: Path, relative: str, contents: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    # Bytes keep newlines exactly as given on every platform
    path.write_bytes(contents.encode("utf-8"))
    return path


@pytest.fixture
def write_file() -> WriteFile:
    """Write a file below a root directory, creating parents."""
    return _write_file


@pytest.fixture
def library(tmp_path: Path) -> Path:
    """Create an empty prompt library directory."""
    root = tmp_path / "library"
    root.mkdir()
    return root


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove environment variables that change config directory discovery."""
    monkeypatch.delenv("PA_CONFIG_DIR", raising=False)
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
