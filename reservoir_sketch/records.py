"""Feed newline-delimited records (or fields of them) into reservoirs."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import BinaryIO, List, NamedTuple, Optional, Sequence, Tuple

from .config import SamplerConfig, derive_seed
from .errors import RecordDecodeError
from .reservoir import Reservoir

logger = logging.getLogger(__name__)

# Unicode whitespace minus the ASCII information separators (\x1c-\x1f), which
# str.split() would also treat as field breaks.
_WHITESPACE_RUN = re.compile(r"[^\S\x1c-\x1f]+")


@dataclass
class FieldSet:
    """
    Reservoirs and missing-field counters built by one processing unit.

    ``reservoirs[i]`` and ``missing_field_counts[i]`` belong to ``fields[i]``;
    with no tracked fields there is a single pair for whole records.
    ``undecodable_records`` counts records skipped under
    ``decode_errors="skip"``.
    """

    fields: Tuple[int, ...]
    reservoirs: List[Reservoir[str]]
    missing_field_counts: List[int]
    undecodable_records: int = 0

    @classmethod
    def empty(cls, config: SamplerConfig, seed: Optional[int] = None) -> "FieldSet":
        """Fresh reservoirs for ``config``; each gets a seed derived from ``seed``."""
        n = config.num_tracked
        return cls(
            fields=config.fields,
            reservoirs=[Reservoir(config.sample_size, derive_seed(seed, i)) for i in range(n)],
            missing_field_counts=[0] * n,
        )

    @classmethod
    def merge(cls, first: "FieldSet", second: "FieldSet", rng_seed: Optional[int] = None) -> "FieldSet":
        """Pairwise combine two field sets without mutating either."""
        if first.fields != second.fields or len(first.reservoirs) != len(second.reservoirs):
            raise ValueError("cannot merge field sets tracking different fields")
        return cls(
            fields=first.fields,
            reservoirs=[
                Reservoir.merge(r1, r2, derive_seed(rng_seed, i))
                for i, (r1, r2) in enumerate(zip(first.reservoirs, second.reservoirs))
            ],
            missing_field_counts=[
                c1 + c2 for c1, c2 in zip(first.missing_field_counts, second.missing_field_counts)
            ],
            undecodable_records=first.undecodable_records + second.undecodable_records,
        )

    @property
    def num_records(self) -> int:
        """Records that reached the first tracked field (sampled or missing)."""
        return self.reservoirs[0].num_seen + self.missing_field_counts[0]


class DecodedLine(NamedTuple):
    """Outcome of decoding one raw record: either ``text`` or ``error`` is set."""

    text: Optional[str]
    error: Optional[UnicodeDecodeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def decode_line(raw: bytes, encoding: str = "utf-8") -> DecodedLine:
    """Decode ``raw`` and strip its line terminator (``\\n`` or ``\\r\\n``)."""
    if raw.endswith(b"\n"):
        raw = raw[:-2] if raw.endswith(b"\r\n") else raw[:-1]
    try:
        return DecodedLine(raw.decode(encoding))
    except UnicodeDecodeError as exc:
        return DecodedLine(None, exc)


def split_fields(record: str, separator: Optional[str] = None) -> List[str]:
    """Split on ``separator`` literally, or on runs of Unicode whitespace when it is ``None``."""
    if separator is None:
        return [value for value in _WHITESPACE_RUN.split(record) if value]
    return record.split(separator)


def _add_record(text: str, fields: Sequence[int], separator: Optional[str], out: FieldSet) -> None:
    if not fields:
        out.reservoirs[0].add(text)
        return
    values = split_fields(text, separator)
    for slot, index in enumerate(fields):
        if index >= len(values):
            out.missing_field_counts[slot] += 1
        else:
            out.reservoirs[slot].add(values[index])


def process_records(
    source: BinaryIO,
    config: SamplerConfig,
    read_limit: Optional[int] = None,
    seed: Optional[int] = None,
) -> FieldSet:
    """
    Sample the records of ``source`` into a new :class:`FieldSet`.

    ``source`` must be a binary stream positioned at the first record to
    read. With ``read_limit`` set, reading stops once the bytes consumed
    (terminators included) exceed it; the record that crossed the limit is
    not sampled. Without it the whole stream is consumed lazily, one line at a
    time.
    """
    out = FieldSet.empty(config, seed)
    consumed = 0
    for raw in source:
        consumed += len(raw)
        if read_limit is not None and consumed > read_limit:
            break
        decoded = decode_line(raw, config.encoding)
        if not decoded.ok:
            if config.decode_errors == "strict":
                raise RecordDecodeError(
                    f"cannot decode record as {config.encoding}: {decoded.error}", raw
                ) from decoded.error
            out.undecodable_records += 1
            logger.debug("skipping undecodable record: %s", decoded.error)
            continue
        _add_record(decoded.text, config.fields, config.field_separator, out)
    return out


__all__ = [
    "FieldSet",
    "DecodedLine",
    "decode_line",
    "split_fields",
    "process_records",
]
