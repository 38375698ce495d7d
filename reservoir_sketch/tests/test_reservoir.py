"""Deterministic regression tests for :class:`reservoir_sketch.Reservoir`."""
from __future__ import annotations

import math
import random
import struct
from collections import Counter

import pytest

from reservoir_sketch import Reservoir


def test_empty_histogram() -> None:
    assert Reservoir(15).to_histogram() == {}


def test_single_entry() -> None:
    r = Reservoir(15)
    r.add("hello")
    assert r.to_histogram() == {"hello": 1.0}


def test_single_entry_overflow() -> None:
    r = Reservoir(2, rng_seed=0)
    r.extend(["hello"] * 3)
    assert len(r) == 2
    assert r.num_seen == 3
    assert r.to_histogram() == {"hello": 1.0}


def test_under_capacity_keeps_insertion_order() -> None:
    """Below capacity no randomness is involved at all."""
    values = [f"v{i}" for i in range(7)]
    r = Reservoir(10)
    r.extend(values)
    assert list(r.pool) == values
    assert r.num_seen == 7


@pytest.mark.parametrize("n", [0, 1, 9, 10, 11, 500])
def test_pool_size_invariant(n: int) -> None:
    r = Reservoir(10, rng_seed=n)
    r.extend(str(i) for i in range(n))
    assert len(r) == min(n, 10)
    assert r.size() == n


def test_many_entries_two_types() -> None:
    r = Reservoir(1000, rng_seed=11)
    r.extend(["hello"] * 5000)
    r.extend(["world"] * 5000)
    h = r.to_histogram()
    assert math.isclose(h["hello"] + h["world"], 1.0, abs_tol=1e-9)
    assert abs(h["hello"] - h["world"]) < 0.2


def test_membership_rate_converges_to_capacity_over_n() -> None:
    capacity, n, trials = 10, 100, 2_000
    hits: Counter = Counter()
    for trial in range(trials):
        r = Reservoir(capacity, rng_seed=trial)
        r.extend(range(n))
        hits.update(r.pool)

    expected = capacity / n
    for value in range(n):
        assert abs(hits[value] / trials - expected) < 0.03


@pytest.mark.parametrize("n", [3, 10, 5_000])
def test_histogram_sums_to_one(n: int) -> None:
    rng = random.Random(n)
    r = Reservoir(50, rng_seed=n)
    r.extend(rng.choice("abcdefg") for _ in range(n))
    assert math.isclose(sum(r.to_histogram().values()), 1.0, abs_tol=1e-9)


def test_zero_capacity_is_always_empty() -> None:
    r = Reservoir(0)
    r.extend(["a", "b", "c"])
    assert r.num_seen == 3
    assert len(r) == 0
    assert r.to_histogram() == {}


def test_negative_capacity_raises() -> None:
    with pytest.raises(ValueError):
        Reservoir(-1)


def test_merge_two_types() -> None:
    r1 = Reservoir(1000, rng_seed=1)
    r2 = Reservoir(1000, rng_seed=2)
    r1.extend(["hello"] * 5000)
    r2.extend(["world"] * 5000)

    r3 = Reservoir.merge(r1, r2, rng_seed=3)
    assert r3.capacity == 1000
    assert r3.num_seen == 10_000
    h = r3.to_histogram()
    assert math.isclose(h["hello"] + h["world"], 1.0, abs_tol=1e-9)
    assert abs(h["hello"] - 0.5) < 0.1
    assert abs(h["world"] - 0.5) < 0.1


@pytest.mark.parametrize("cap1, cap2", [(10, 20), (20, 10), (0, 5), (0, 0)])
def test_merge_capacity_and_counts_are_exact(cap1: int, cap2: int) -> None:
    r1 = Reservoir(cap1, rng_seed=1)
    r2 = Reservoir(cap2, rng_seed=2)
    r1.extend(str(i) for i in range(37))
    r2.extend(str(i) for i in range(5))

    merged = Reservoir.merge(r1, r2)
    assert merged.capacity == max(cap1, cap2)
    assert merged.num_seen == 42
    assert len(merged) <= merged.capacity


def test_merge_does_not_mutate_inputs() -> None:
    r1 = Reservoir(5, rng_seed=1)
    r2 = Reservoir(5, rng_seed=2)
    r1.extend("abcdefgh")
    r2.extend("ijk")
    before = (r1.pool, r1.num_seen, r2.pool, r2.num_seen)

    Reservoir.merge(r1, r2)
    assert (r1.pool, r1.num_seen, r2.pool, r2.num_seen) == before


def test_merge_of_two_empty_reservoirs_is_empty() -> None:
    merged = Reservoir.merge(Reservoir(10), Reservoir(10))
    assert merged.num_seen == 0
    assert merged.pool == ()
    assert merged.to_histogram() == {}


def test_merge_with_empty_reservoir_keeps_sample() -> None:
    r = Reservoir(100, rng_seed=5)
    rng = random.Random(5)
    r.extend(rng.choice("xyz") for _ in range(3_000))

    merged = Reservoir.merge(r, Reservoir(100), rng_seed=6)
    # Every pooled item is admitted with probability 1.
    assert merged.to_histogram() == r.to_histogram()
    assert merged.num_seen == r.num_seen


def test_merged_reservoir_keeps_sampling() -> None:
    r1 = Reservoir(4, rng_seed=1)
    r2 = Reservoir(4, rng_seed=2)
    r1.extend("ab")
    merged = Reservoir.merge(r1, r2, rng_seed=3)
    merged.extend("cdefgh")
    assert len(merged) == 4
    assert merged.num_seen == 8


def test_merge_rejects_other_types() -> None:
    with pytest.raises(TypeError):
        Reservoir.merge(Reservoir(3), [1, 2, 3])  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "sample",
    [
        [],
        ["a"],
        ["a", "a", "a"],
        ["", "ünïcödé", "tab\tseparated"],
        [str(i) for i in range(50)],
    ],
)
def test_serialization_roundtrip(sample: list[str]) -> None:
    r = Reservoir(16, rng_seed=0)
    r.extend(sample)

    restored = Reservoir.from_bytes(r.to_bytes())
    assert restored.capacity == r.capacity
    assert restored.num_seen == r.num_seen
    assert restored.pool == r.pool
    assert restored.to_histogram() == r.to_histogram()


def test_serialization_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        Reservoir.from_bytes(b"RSV0" + b"\x00" * 16)
    r = Reservoir(3)
    r.add(1)
    with pytest.raises(TypeError):
        r.to_bytes()


def _payload(capacity: int, num_seen: int, items: list[bytes]) -> bytes:
    out = b"RSV1" + struct.pack(">IQI", capacity, num_seen, len(items))
    for raw in items:
        out += struct.pack(">I", len(raw)) + raw
    return out


def test_pool_larger_than_num_seen_is_rejected() -> None:
    with pytest.raises(ValueError, match="num_seen"):
        Reservoir.from_bytes(_payload(5, 0, [b"a"]))
    # The well-formed variant still loads and has a usable histogram.
    assert Reservoir.from_bytes(_payload(5, 1, [b"a"])).to_histogram() == {"a": 1.0}


def test_pool_larger_than_capacity_is_rejected() -> None:
    with pytest.raises(ValueError, match="capacity"):
        Reservoir.from_bytes(_payload(1, 2, [b"a", b"b"]))


@pytest.mark.parametrize("cut", [1, 2, 4, 7])
def test_truncated_payload_is_rejected(cut: int) -> None:
    r = Reservoir(4)
    r.extend(["abc", "def"])
    with pytest.raises(ValueError, match="corrupt payload"):
        Reservoir.from_bytes(r.to_bytes()[:-cut])


def test_truncated_header_is_rejected() -> None:
    with pytest.raises(ValueError, match="corrupt payload"):
        Reservoir.from_bytes(b"RSV1" + b"\x00" * 6)


def test_trailing_bytes_are_rejected() -> None:
    r = Reservoir(4)
    r.extend(["abc", "def"])
    with pytest.raises(ValueError, match="trailing"):
        Reservoir.from_bytes(r.to_bytes() + b"garbage")
