# Reservoir Sampling Sketch (Python)
# Bounded uniform sample over a stream with:
# - Algorithm R single-pass ingestion
# - Observation-weighted pairwise merge (inputs are never mutated)
# - Frequency histogram over the sampled pool
# - Versioned serialize/deserialize for str pools
# Python 3.9+

from __future__ import annotations
import random
import struct
from collections import Counter
from typing import Dict, Generic, Hashable, Iterable, List, Optional, Tuple, TypeVar


SERIAL_FORMAT_MAGIC = b"RSV1"
SERIAL_FORMAT_VERSION = 1

T = TypeVar("T", bound=Hashable)


class Reservoir(Generic[T]):
    """
    Reservoir sample of at most ``capacity`` items (mergeable, serializable).

    Paper:
      - Vitter, Jeffrey S. "Random sampling with a reservoir." ACM TOMS 1985.

    Strategy (high level):
      - The first ``capacity`` items fill the pool in arrival order.
      - Afterwards the n-th item replaces a uniformly chosen slot with
        probability capacity / n, so every item seen so far is in the pool
        with the same probability.
      - Two reservoirs merge by re-admitting each pooled item with probability
        proportional to the *observation count* of the reservoir it came from
        (not its pool size) and pushing admitted items through the same
        insertion rule. The result approximates a sample of the concatenated
        streams; it is not an exact distributed reservoir sample.

    Every instance owns its own :class:`random.Random`; pass ``rng_seed`` for
    reproducible sampling, or leave it ``None`` to draw from OS entropy.

    Public API:
      add(x), extend(xs), size(), capacity, num_seen, pool,
      to_histogram(), merge(r1, r2), to_bytes(), from_bytes()
    """

    __slots__ = ("_capacity", "_pool", "_num_seen", "_rng")

    def __init__(self, capacity: int, rng_seed: Optional[int] = None):
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self._capacity = int(capacity)
        self._pool: List[T] = []
        self._num_seen = 0
        self._rng = random.Random(rng_seed)

    # ------------------------------- Public API --------------------------------
    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def num_seen(self) -> int:
        """Number of items ever offered, including those discarded."""
        return self._num_seen

    @property
    def pool(self) -> Tuple[T, ...]:
        """Snapshot of the sampled items. Order carries no meaning once full."""
        return tuple(self._pool)

    def size(self) -> int:
        return self._num_seen

    def __len__(self) -> int:
        return len(self._pool)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(capacity={self._capacity}, "
            f"num_seen={self._num_seen}, pooled={len(self._pool)})"
        )

    def add(self, item: T) -> None:
        """Offer one item to the sample."""
        self._num_seen += 1
        self._insert(self._pool, self._capacity, item, self._num_seen, self._rng)

    def extend(self, items: Iterable[T]) -> None:
        for item in items:
            self.add(item)

    def to_histogram(self) -> Dict[T, float]:
        """
        Estimated frequency of every distinct pooled value.

        Frequencies are pool counts divided by ``min(len(pool), num_seen)`` and
        therefore sum to 1 for any non-empty pool.
        """
        if self._capacity == 0 or not self._pool:
            return {}
        effective_size = min(len(self._pool), self._num_seen)
        counts = Counter(self._pool)
        return {value: count / effective_size for value, count in counts.items()}

    @classmethod
    def merge(
        cls,
        first: "Reservoir[T]",
        second: "Reservoir[T]",
        rng_seed: Optional[int] = None,
    ) -> "Reservoir[T]":
        """
        Combine two reservoirs into a new one; ``first`` and ``second`` are read only.

        The result has ``capacity = max(first.capacity, second.capacity)`` and
        ``num_seen = first.num_seen + second.num_seen``. Each pooled item of an
        input is admitted with probability ``input.num_seen / total``; admitted
        items are inserted with the :meth:`add` rule, counted against a tally
        local to this merge. Two empty inputs yield an empty reservoir.
        """
        if not isinstance(first, Reservoir) or not isinstance(second, Reservoir):
            raise TypeError("merge expects Reservoir")

        rng = random.Random(rng_seed)
        capacity = max(first._capacity, second._capacity)
        total = first._num_seen + second._num_seen
        pool: List[T] = []
        admitted = 0
        if total:
            for source in (first, second):
                threshold = source._num_seen / total
                for item in source._pool:
                    if rng.random() < threshold:
                        admitted += 1
                        cls._insert(pool, capacity, item, admitted, rng)

        # The merged reservoir keeps sampling from a source of its own.
        out: Reservoir[T] = cls(capacity, rng.getrandbits(64))
        out._pool = pool
        out._num_seen = total
        return out

    def to_bytes(self) -> bytes:
        """
        Serialize the reservoir into the versioned ``RSV1`` binary envelope.

        The layout is:
          magic 'RSV1' (4B), capacity(uint32), num_seen(uint64), P(uint32),
          then for each pooled item: len(uint32) followed by len UTF-8 bytes.

        Only ``str`` pools can be serialized. The random source is not part of
        the payload; :meth:`from_bytes` gives the restored instance a fresh one.
        """
        out = bytearray()
        out += SERIAL_FORMAT_MAGIC
        out += struct.pack(">I", self._capacity)
        out += struct.pack(">Q", self._num_seen)
        out += struct.pack(">I", len(self._pool))
        for item in self._pool:
            if not isinstance(item, str):
                raise TypeError("only str items can be serialized")
            raw = item.encode("utf-8")
            out += struct.pack(">I", len(raw))
            out += raw
        return bytes(out)

    @classmethod
    def from_bytes(cls, b: bytes, rng_seed: Optional[int] = None) -> "Reservoir[str]":
        """Rehydrate a :class:`Reservoir` instance from :meth:`to_bytes` output."""
        mv = memoryview(b)
        if mv[:4].tobytes() != SERIAL_FORMAT_MAGIC:
            raise ValueError(
                "Unsupported serialization header. The 1.x reader only understands "
                f"{SERIAL_FORMAT_MAGIC!r}."
            )
        off = 4
        try:
            capacity = struct.unpack_from(">I", mv, off)[0]; off += 4
            num_seen = struct.unpack_from(">Q", mv, off)[0]; off += 8
            P = struct.unpack_from(">I", mv, off)[0]; off += 4
            self = cls(capacity, rng_seed)
            for _ in range(P):
                ln = struct.unpack_from(">I", mv, off)[0]; off += 4
                if off + ln > len(mv):
                    raise ValueError("corrupt payload: truncated item")
                self._pool.append(mv[off:off + ln].tobytes().decode("utf-8"))
                off += ln
        except struct.error as exc:
            raise ValueError(f"corrupt payload: truncated ({exc})") from exc
        if off != len(mv):
            raise ValueError(f"corrupt payload: {len(mv) - off} trailing byte(s)")
        if len(self._pool) > capacity:
            raise ValueError("corrupt payload: pool larger than capacity")
        if len(self._pool) > num_seen:
            raise ValueError("corrupt payload: pool larger than num_seen")
        self._num_seen = int(num_seen)
        return self

    # ------------------------------- Internals ---------------------------------
    @staticmethod
    def _insert(pool: List[T], capacity: int, item: T, seen: int, rng: random.Random) -> None:
        # Algorithm R step; ``seen`` already counts ``item``.
        if len(pool) < capacity:
            pool.append(item)
            return
        j = rng.randrange(seen)
        if j < capacity:
            pool[j] = item


# ----------------------------- quick self-test --------------------------------
if __name__ == "__main__":
    left: Reservoir[str] = Reservoir(1000, rng_seed=1)
    right: Reservoir[str] = Reservoir(1000, rng_seed=2)
    for _ in range(5000):
        left.add("hello")
        right.add("world")
    merged = Reservoir.merge(left, right, rng_seed=3)
    for value, freq in sorted(merged.to_histogram().items()):
        print(f"{value}: {freq:.4f}")
    print(merged)
