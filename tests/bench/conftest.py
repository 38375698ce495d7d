from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Benchmarks import ``reservoir_sketch`` straight from the checkout.
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

BENCH_OUT = Path("bench_out/pytest")


def pytest_configure(config: pytest.Config) -> None:
    # ``--benchmark-json=bench_out/pytest/results.json`` expects the directory.
    BENCH_OUT.mkdir(parents=True, exist_ok=True)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("-m"):
        # An explicit marker expression decides what runs.
        return
    skip_marker = pytest.mark.skip(reason="benchmark tests are opt-in; run with -m benchmark")
    for item in items:
        if "benchmark" in item.keywords:
            item.add_marker(skip_marker)
