#!/usr/bin/env python3
"""Validate benchmark outputs against regression thresholds.

This script is intended to run in CI after ``benchmarks/bench_reservoir.py``. It reads
CSV outputs from ``bench_out`` (or a supplied directory) and enforces
conservative performance and accuracy targets so regressions surface early.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Dict, List, Tuple

import pandas as pd


ACCURACY_ABS_ERROR_MAX = 0.15
# Reservoir updates are a counter bump plus, past capacity, one randrange call.
# Shared CI runners sustain several hundred thousand per second; the floor only
# has to catch order-of-magnitude regressions.
THROUGHPUT_MIN_UPS = 100_000
# top-k over a 5000-item pool: one Counter pass plus a sort of distinct values.
LATENCY_P95_MAX_US = 50_000.0
MERGE_TIME_MAX_S = 1.0
# Merging re-samples already sampled pools, so merged estimates are allowed to
# be somewhat worse than a single reservoir over the same stream.
MERGE_ACCURACY_SLACK = 0.05


_KEYS = ["distribution", "N", "capacity"]


def _load_csv(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Expected benchmark artifact missing: {path}")
    return pd.read_csv(path)


def _check_accuracy(df: pd.DataFrame) -> Tuple[bool, Dict[str, float]]:
    by_mode = {mode: float(err) for mode, err in df.groupby("mode")["abs_error"].max().items()}
    overall = max(by_mode.values(), default=0.0)
    by_mode["overall"] = overall
    return overall <= ACCURACY_ABS_ERROR_MAX, by_mode


def _check_merge_penalty(df: pd.DataFrame) -> Tuple[bool, float]:
    """Largest extra error of the merged reservoir over the single one, per configuration."""
    if df.empty:
        return True, 0.0
    pivot = df.pivot_table(index=_KEYS, columns="mode", values="abs_error", aggfunc="max")
    if not {"single", "merged"} <= set(pivot.columns):
        return True, 0.0
    penalty = float((pivot["merged"] - pivot["single"]).max())
    return penalty <= MERGE_ACCURACY_SLACK, penalty


def _check_throughput(df: pd.DataFrame) -> Tuple[bool, Dict[str, float]]:
    if df.empty:
        return True, {}
    worst = {f"cap={cap}": float(ups) for cap, ups in df.groupby("capacity")["updates_per_sec"].min().items()}
    return min(worst.values()) >= THROUGHPUT_MIN_UPS, worst


def _check_latency(df: pd.DataFrame) -> Tuple[bool, float]:
    if df.empty:
        return True, 0.0
    p95 = float(df["latency_us"].quantile(0.95))
    return p95 <= LATENCY_P95_MAX_US, p95


def _check_merge_time(df: pd.DataFrame) -> Tuple[bool, float]:
    slowest = float(df["merge_time_s"].max()) if not df.empty else 0.0
    return slowest <= MERGE_TIME_MAX_S, slowest


def _summarise(results: Dict[str, Dict[str, object]]) -> str:
    rows = [
        f"| {name} | {payload['threshold']} | {payload['observed']} | {'PASS' if payload['ok'] else 'FAIL'} |"
        for name, payload in results.items()
    ]
    lines: List[str] = [
        "# Benchmark validation summary",
        "",
        "| Check | Threshold | Observed | Status |",
        "| --- | --- | --- | --- |",
        *rows,
        "",
        "```json",
        json.dumps(results, indent=2, sort_keys=True),
        "```",
    ]
    return "\n".join(lines)


def _entry(threshold: str, result: Tuple[bool, object]) -> Dict[str, object]:
    ok, observed = result
    if isinstance(observed, dict):
        observed = {key: round(value, 6) for key, value in observed.items()}
    elif isinstance(observed, float):
        observed = round(observed, 6)
    return {"threshold": threshold, "observed": observed, "ok": ok}


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("outdir", nargs="?", default="bench_out", help="Directory containing benchmark CSVs")
    parser.add_argument("--summary", default="bench_summary.md", help="Filename for the generated markdown summary")
    args = parser.parse_args()

    outdir = Path(args.outdir)
    accuracy = _load_csv(outdir / "accuracy.csv")
    throughput = _load_csv(outdir / "update_throughput.csv")
    latency = _load_csv(outdir / "query_latency.csv")
    merge = _load_csv(outdir / "merge.csv")

    summary: Dict[str, Dict[str, object]] = {
        "Top-k abs frequency error": _entry(f"<= {ACCURACY_ABS_ERROR_MAX}", _check_accuracy(accuracy)),
        "Merged vs single error": _entry(f"<= +{MERGE_ACCURACY_SLACK}", _check_merge_penalty(accuracy)),
        "Update throughput": _entry(f">= {THROUGHPUT_MIN_UPS} updates/sec", _check_throughput(throughput)),
        "Top-k latency p95": _entry(f"<= {LATENCY_P95_MAX_US} µs", _check_latency(latency)),
        "Merge time": _entry(f"<= {MERGE_TIME_MAX_S} s", _check_merge_time(merge)),
    }

    summary_path = outdir / args.summary
    summary_path.write_text(_summarise(summary), encoding="utf-8")
    print(summary_path.read_text(encoding="utf-8"))

    if not all(item["ok"] for item in summary.values()):
        raise SystemExit("Benchmark regression detected; see summary above.")


if __name__ == "__main__":
    main()
