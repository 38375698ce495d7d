#!/usr/bin/env python3
"""Benchmark runner for the local reservoir_sketch implementation."""

from __future__ import annotations

import argparse
import hashlib
import math
import time
from collections import Counter
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence

import numpy as np
import pandas as pd

from reservoir_sketch import Reservoir, top_k


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--outdir", default="bench_out", help="Directory for benchmark CSV outputs")
    parser.add_argument("--seed", type=int, default=42, help="Base RNG seed for reproducibility")
    parser.add_argument("--Ns", nargs="+", default=["1e5", "1e6"], help="Stream lengths to benchmark")
    parser.add_argument(
        "--capacities", nargs="+", default=["200", "1000", "5000"], help="Reservoir capacities to benchmark"
    )
    parser.add_argument(
        "--distributions",
        nargs="+",
        default=["uniform", "zipf", "geometric", "bimodal"],
        help="Synthetic categorical distributions to sample",
    )
    parser.add_argument("--k", type=int, default=10, help="Top-k size used for accuracy and latency")
    parser.add_argument("--shards", type=int, default=8, help="Number of shards for the merge benchmark")
    return parser.parse_args()


def _to_int_list(values: Iterable[str]) -> List[int]:
    return [int(float(v)) for v in values]


def _hash_seed(seed: int, *parts: object) -> int:
    material = "::".join(str(p) for p in (seed,) + parts)
    digest = hashlib.sha256(material.encode("utf-8")).hexdigest()
    return int(digest[:16], 16)


def _uniform(rng: np.random.Generator, size: int) -> np.ndarray:
    return rng.integers(0, 1_000, size)


def _zipf(rng: np.random.Generator, size: int) -> np.ndarray:
    return rng.zipf(a=1.3, size=size)


def _geometric(rng: np.random.Generator, size: int) -> np.ndarray:
    return rng.geometric(p=0.05, size=size)


def _bimodal(rng: np.random.Generator, size: int) -> np.ndarray:
    left = size // 2
    first = rng.integers(0, 10, left)
    second = rng.integers(500, 5_000, size - left)
    data = np.concatenate([first, second]) if size else np.empty(0, dtype=np.int64)
    rng.shuffle(data)
    return data


DATA_GENERATORS: Dict[str, Callable[[np.random.Generator, int], np.ndarray]] = {
    "uniform": _uniform,
    "zipf": _zipf,
    "geometric": _geometric,
    "bimodal": _bimodal,
}


def _validate_distributions(names: Sequence[str]) -> None:
    unknown = sorted(set(names) - DATA_GENERATORS.keys())
    if unknown:
        raise ValueError(f"Unknown distributions requested: {', '.join(unknown)}")


def _top_k_error(reservoir: Reservoir, exact: Dict[str, float], k: int) -> float:
    """Largest absolute frequency error over the true top-k values."""
    truth = sorted(exact.items(), key=lambda item: (-item[1], item[0]))[:k]
    estimate = reservoir.to_histogram()
    return max((abs(estimate.get(value, 0.0) - freq) for value, freq in truth), default=0.0)


def main() -> None:
    args = _parse_args()

    Ns = _to_int_list(args.Ns)
    capacities = _to_int_list(args.capacities)
    _validate_distributions(args.distributions)

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    accuracy_records: List[Dict[str, object]] = []
    throughput_records: List[Dict[str, object]] = []
    latency_records: List[Dict[str, object]] = []
    merge_records: List[Dict[str, object]] = []

    for dist in args.distributions:
        for N in Ns:
            combo_seed = _hash_seed(args.seed, dist, N)
            data_rng = np.random.default_rng(combo_seed)
            values = [str(v) for v in DATA_GENERATORS[dist](data_rng, N)]
            exact = {value: count / N for value, count in Counter(values).items()}

            for capacity in capacities:
                reservoir = Reservoir(capacity, rng_seed=args.seed)
                start = time.perf_counter()
                for value in values:
                    reservoir.add(value)
                update_elapsed = time.perf_counter() - start
                updates_per_sec = (N / update_elapsed) if update_elapsed > 0 else math.inf

                throughput_records.append(
                    {
                        "distribution": dist,
                        "N": int(N),
                        "capacity": int(capacity),
                        "update_time_s": update_elapsed,
                        "updates_per_sec": updates_per_sec,
                    }
                )

                q_start = time.perf_counter()
                top_k(reservoir, args.k)
                latency_records.append(
                    {
                        "distribution": dist,
                        "N": int(N),
                        "capacity": int(capacity),
                        "k": int(args.k),
                        "latency_us": (time.perf_counter() - q_start) * 1e6,
                    }
                )
                accuracy_records.append(
                    {
                        "distribution": dist,
                        "N": int(N),
                        "capacity": int(capacity),
                        "mode": "single",
                        "abs_error": _top_k_error(reservoir, exact, args.k),
                    }
                )

                shard_size = math.ceil(N / args.shards)
                shard_reservoirs = []
                for shard_idx in range(args.shards):
                    shard = Reservoir(capacity, rng_seed=args.seed + shard_idx + 1)
                    shard.extend(values[shard_idx * shard_size:(shard_idx + 1) * shard_size])
                    shard_reservoirs.append(shard)

                merge_start = time.perf_counter()
                merged = shard_reservoirs[0]
                for shard in shard_reservoirs[1:]:
                    merged = Reservoir.merge(merged, shard)
                merge_elapsed = time.perf_counter() - merge_start

                merge_records.append(
                    {
                        "distribution": dist,
                        "N": int(N),
                        "capacity": int(capacity),
                        "shards": int(args.shards),
                        "merge_time_s": merge_elapsed,
                    }
                )
                accuracy_records.append(
                    {
                        "distribution": dist,
                        "N": int(N),
                        "capacity": int(capacity),
                        "mode": "merged",
                        "abs_error": _top_k_error(merged, exact, args.k),
                    }
                )

    accuracy_path = outdir / "accuracy.csv"
    throughput_path = outdir / "update_throughput.csv"
    latency_path = outdir / "query_latency.csv"
    merge_path = outdir / "merge.csv"

    pd.DataFrame.from_records(accuracy_records).to_csv(accuracy_path, index=False)
    pd.DataFrame.from_records(throughput_records).to_csv(throughput_path, index=False)
    pd.DataFrame.from_records(latency_records).to_csv(latency_path, index=False)
    pd.DataFrame.from_records(merge_records).to_csv(merge_path, index=False)

    print("Benchmark artifacts written to:")
    print(f"  {accuracy_path}")
    print(f"  {throughput_path}")
    print(f"  {latency_path}")
    print(f"  {merge_path}")


if __name__ == "__main__":
    main()
