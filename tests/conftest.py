"""Shared fixtures: rule directories on disk."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest


def _write(directory: Path, name: str, content: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture
def write_rules() -> Callable[[Path, str, str], Path]:
    """Return ``write(directory, name, content)`` creating a rule file."""
    return _write


@pytest.fixture
def etc_dir(tmp_path: Path) -> Path:
    d = tmp_path / "etc"
    d.mkdir()
    return d


@pytest.fixture
def usr_dir(tmp_path: Path) -> Path:
    d = tmp_path / "usr"
    d.mkdir()
    return d
