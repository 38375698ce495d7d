"""Pytest configuration ensuring the package is importable during tests."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# When pytest collects tests inside the package directory, the repository root
# (which contains the ``reservoir_sketch`` package) might not be on
# ``sys.path``.  Add it explicitly so ``from reservoir_sketch import Reservoir``
# works even when the tests are executed without installing the project.
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def write_lines(tmp_path: Path):
    """Write ``data`` (bytes) to a file under ``tmp_path`` and return its path."""

    def _write(data: bytes, name: str = "input.txt") -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write
