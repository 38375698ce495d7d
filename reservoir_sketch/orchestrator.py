"""Run the record processor over a stream or over a file in parallel.

Sequential mode reads an unbounded stream (typically stdin) once, lazily.
Parallel mode splits a seekable file into line-aligned ranges, samples each
range in its own worker with its own file handle and reservoirs, and folds the
per-range results with :meth:`FieldSet.merge`. The merge is associative and
commutative in distribution, so the reduction order does not bias the sample.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from typing import BinaryIO, List, Optional, Sequence, Union

from .chunking import LineRange, split_file
from .config import SamplerConfig, derive_seed
from .records import FieldSet, process_records

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

# Seeds for merges live in a different salt range than per-chunk seeds.
_MERGE_SALT_BASE = 1 << 40


def sample_stream(stream: BinaryIO, config: SamplerConfig) -> FieldSet:
    """Sample every record of a binary ``stream`` on the calling thread."""
    logger.debug("sampling stream sequentially")
    result = process_records(stream, config, seed=derive_seed(config.seed, 0))
    _log_summary(result)
    return result


def sample_range(path: PathLike, line_range: LineRange, config: SamplerConfig, seed: Optional[int] = None) -> FieldSet:
    """Sample one line-aligned range of ``path`` through a private file handle."""
    with open(path, "rb") as fh:
        fh.seek(line_range.start)
        return process_records(fh, config, read_limit=line_range.length, seed=seed)


def reduce_field_sets(results: Sequence[FieldSet], seed: Optional[int] = None) -> FieldSet:
    """Combine per-chunk results with a balanced pairwise tree of merges."""
    if not results:
        raise ValueError("reduce_field_sets needs at least one result")
    level = list(results)
    step = 0
    while len(level) > 1:
        merged: List[FieldSet] = []
        for i in range(0, len(level) - 1, 2):
            merged.append(
                FieldSet.merge(level[i], level[i + 1], derive_seed(seed, _MERGE_SALT_BASE + step))
            )
            step += 1
        if len(level) % 2:
            merged.append(level[-1])
        level = merged
    logger.debug("reduced %d chunk results with %d merges", len(results), step)
    return level[0]


def sample_file(path: PathLike, config: SamplerConfig) -> FieldSet:
    """Sample a seekable file, one worker per line-aligned range."""
    ranges = split_file(path, config.split_size)
    seeds = [derive_seed(config.seed, i + 1) for i in range(len(ranges))]
    logger.info("sampling %s in %d chunk(s)", path, len(ranges))

    if len(ranges) == 1:
        results = [sample_range(path, ranges[0], config, seeds[0])]
    else:
        with _make_executor(config) as pool:
            futures = [
                pool.submit(sample_range, path, line_range, config, seed)
                for line_range, seed in zip(ranges, seeds)
            ]
            # Any failed worker aborts the run; there is no partial result.
            results = [future.result() for future in futures]

    result = reduce_field_sets(results, config.seed)
    _log_summary(result)
    return result


def sample(config: SamplerConfig, input_file: Optional[PathLike] = None, stream: Optional[BinaryIO] = None) -> FieldSet:
    """Parallel mode when ``input_file`` is given, sequential over ``stream`` otherwise."""
    if input_file is not None:
        return sample_file(input_file, config)
    if stream is None:
        raise ValueError("either input_file or stream is required")
    return sample_stream(stream, config)


def _make_executor(config: SamplerConfig) -> Executor:
    if config.executor == "thread":
        return ThreadPoolExecutor(max_workers=config.max_workers)
    return ProcessPoolExecutor(max_workers=config.max_workers)


def _log_summary(result: FieldSet) -> None:
    logger.info(
        "sampled %d record(s); missing field counts %s",
        result.num_records,
        result.missing_field_counts,
    )
    if result.undecodable_records:
        logger.warning("skipped %d undecodable record(s)", result.undecodable_records)


__all__ = [
    "sample",
    "sample_stream",
    "sample_file",
    "sample_range",
    "reduce_field_sets",
]
