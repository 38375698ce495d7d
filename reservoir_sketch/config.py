"""Run configuration shared by the record processor and the orchestrator."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import ConfigError

DEFAULT_SAMPLE_SIZE = 1000
DEFAULT_NUM_RESULTS = 10
DEFAULT_SPLIT_SIZE = 32 * 1024 * 1024  # 32 MiB per chunk

EXECUTORS = ("process", "thread")
DECODE_ERROR_POLICIES = ("strict", "skip")


@dataclass(frozen=True)
class SamplerConfig:
    """
    Every knob of a sampling run.

    Validation happens in ``__post_init__`` so an invalid combination (most
    notably ``num_results > sample_size``) is rejected before a single record
    is read. Instances are immutable and picklable, which lets them travel to
    process-pool workers unchanged.
    """

    sample_size: int = DEFAULT_SAMPLE_SIZE
    num_results: int = DEFAULT_NUM_RESULTS
    fields: Tuple[int, ...] = ()
    field_separator: Optional[str] = None
    split_size: int = DEFAULT_SPLIT_SIZE
    max_workers: Optional[int] = None
    executor: str = "process"
    decode_errors: str = "strict"
    encoding: str = "utf-8"
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        # Accept any iterable of indices but store a tuple to stay hashable.
        object.__setattr__(self, "fields", tuple(int(f) for f in self.fields))

        if self.sample_size < 0:
            raise ConfigError("sample_size must be >= 0")
        if self.num_results < 0:
            raise ConfigError("num_results must be >= 0")
        if self.num_results > self.sample_size:
            raise ConfigError("num_results must be <= sample_size")
        if any(f < 0 for f in self.fields):
            raise ConfigError("field indices must be >= 0")
        if self.field_separator == "":
            raise ConfigError("field_separator must not be empty")
        if self.split_size <= 0:
            raise ConfigError("split_size must be > 0")
        if self.max_workers is not None and self.max_workers <= 0:
            raise ConfigError("max_workers must be > 0")
        if self.executor not in EXECUTORS:
            raise ConfigError(f"executor must be one of {', '.join(EXECUTORS)}")
        if self.decode_errors not in DECODE_ERROR_POLICIES:
            raise ConfigError(
                f"decode_errors must be one of {', '.join(DECODE_ERROR_POLICIES)}"
            )

    @property
    def num_tracked(self) -> int:
        """Number of reservoirs a run maintains (one when no fields are given)."""
        return len(self.fields) or 1


# 64-bit odd constant (golden ratio scaled) for mixing a base seed with a salt.
_SALT_MIX64 = 0x9E3779B185EBCA87


def derive_seed(seed: Optional[int], salt: int) -> Optional[int]:
    """Stable, well-dispersed seed for one random source, or ``None`` if unseeded.

    Reservoirs of different chunks and fields each get their own stream
    derived from the run seed; they never share a generator.
    """
    if seed is None:
        return None
    return (seed * _SALT_MIX64 + (salt & 0xFFFFFFFFFFFF)) & 0xFFFFFFFFFFFFFFFF
