"""Line-aligned byte ranges for processing one file in parallel."""
from __future__ import annotations

import logging
import os
from typing import BinaryIO, List, NamedTuple, Union

logger = logging.getLogger(__name__)


class LineRange(NamedTuple):
    """Half-open byte interval ``[start, end)`` of a source."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


def split_lines(source: BinaryIO, target_chunk_size: int) -> List[LineRange]:
    """Split a seekable binary ``source`` into ranges of roughly ``target_chunk_size`` bytes.

    Every range but the last ends right after a ``b"\\n"``, so no record is
    cut in two, and together the ranges tile ``[0, length)`` with no gap or
    overlap. Only the bytes between a tentative boundary and the next line
    terminator are read. An empty source yields the single range ``[0, 0)``.
    """
    if target_chunk_size <= 0:
        raise ValueError("target_chunk_size must be > 0")

    end_pos = source.seek(0, os.SEEK_END)
    ranges: List[LineRange] = []
    start = 0
    while True:
        tentative = min(start + target_chunk_size, end_pos)
        if tentative == end_pos:
            ranges.append(LineRange(start, end_pos))
            break
        source.seek(tentative)
        source.readline()
        end = source.tell()
        ranges.append(LineRange(start, end))
        if end >= end_pos:
            # The last line swallowed the remainder of the source.
            break
        start = end

    logger.debug("split %d bytes into %d line-aligned ranges", end_pos, len(ranges))
    return ranges


def split_file(path: Union[str, "os.PathLike[str]"], target_chunk_size: int) -> List[LineRange]:
    """Open ``path`` in binary mode and :func:`split_lines` it."""
    with open(path, "rb") as fh:
        return split_lines(fh, target_chunk_size)


__all__ = ["LineRange", "split_lines", "split_file"]
