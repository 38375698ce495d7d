"""Exception types raised by :mod:`reservoir_sketch`."""
from __future__ import annotations


class ReservoirSketchError(Exception):
    """Base class for errors raised by the sampler."""


class ConfigError(ReservoirSketchError, ValueError):
    """An invalid run configuration, rejected before any input is read."""


class RecordDecodeError(ReservoirSketchError, ValueError):
    """A record could not be decoded and ``decode_errors`` is ``"strict"``."""

    def __init__(self, message: str, record: bytes = b"") -> None:
        super().__init__(message)
        self.record = record


__all__ = ["ReservoirSketchError", "ConfigError", "RecordDecodeError"]
