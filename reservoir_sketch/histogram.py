"""Top-k frequency estimates derived from reservoir histograms."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, NamedTuple

from .reservoir import Reservoir

if TYPE_CHECKING:
    from .records import FieldSet


class ValueFrequency(NamedTuple):
    """A sampled value with its estimated frequency in ``[0, 1]``."""

    val: Any
    freq: float

    def to_dict(self) -> Dict[str, Any]:
        return {"val": self.val, "freq": self.freq}


def top_k(reservoir: Reservoir, k: int) -> List[ValueFrequency]:
    """Return the ``k`` most frequent values of ``reservoir``, most frequent first.

    Equal frequencies are ordered by the values themselves (ascending) so
    repeated runs over the same input print the same table.
    """
    if k <= 0:
        return []
    histogram = reservoir.to_histogram()
    ranked = sorted(histogram.items(), key=lambda item: (-item[1], item[0]))
    return [ValueFrequency(val, freq) for val, freq in ranked[:k]]


def top_k_fields(field_set: "FieldSet", k: int) -> List[List[ValueFrequency]]:
    """Apply :func:`top_k` to every reservoir of ``field_set``."""
    return [top_k(reservoir, k) for reservoir in field_set.reservoirs]


__all__ = ["ValueFrequency", "top_k", "top_k_fields"]
