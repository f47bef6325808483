"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def make_pack_dir(tmp_path: Path) -> Callable[[str, dict[str, bytes]], Path]:
    """Return a factory that writes a pack directory under tmp_path."""

    def _make(name: str, files: dict[str, bytes]) -> Path:
        pack_root = tmp_path / name
        pack_root.mkdir(parents=True, exist_ok=True)
        for relative_path, content in files.items():
            file_path = pack_root / relative_path
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(content)
        return pack_root

    return _make
