"""Command-line front end: ``reservoir-sketch`` / ``python -m reservoir_sketch``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from .config import DEFAULT_NUM_RESULTS, DEFAULT_SAMPLE_SIZE, DEFAULT_SPLIT_SIZE, SamplerConfig
from .errors import ConfigError, RecordDecodeError
from .orchestrator import sample
from .render import render_json, render_table

logger = logging.getLogger(__name__)

_LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reservoir-sketch",
        description="Estimate the most frequent lines (or fields) of a large text input "
        "from a bounded reservoir sample.",
    )
    parser.add_argument("-n", "--num-samples", type=int, default=DEFAULT_SAMPLE_SIZE, help="Reservoir sample size")
    parser.add_argument(
        "-k", "--num-results", type=int, default=DEFAULT_NUM_RESULTS, help="Display top-k items from sample histogram"
    )
    parser.add_argument(
        "-f",
        "--field-index",
        dest="fields",
        type=int,
        action="append",
        default=[],
        help="Field to sample, indexed from 0 (repeatable)",
    )
    parser.add_argument(
        "-s", "--field-separator", default=None, help="Field separator; runs of whitespace when omitted"
    )
    parser.add_argument("-i", "--input-file", default=None, help="Input file; stdin when omitted")
    parser.add_argument(
        "-o", "--output-format", choices=["table", "json"], default="table", help="Output format"
    )
    parser.add_argument(
        "-c",
        "--split-size",
        type=int,
        default=DEFAULT_SPLIT_SIZE,
        help="Approximate chunk size in bytes for parallel file processing (ignored without -i)",
    )
    parser.add_argument("-j", "--jobs", type=int, default=None, help="Number of parallel workers")
    parser.add_argument("--threads", action="store_true", help="Use threads instead of processes for workers")
    parser.add_argument("--seed", type=int, default=None, help="Base RNG seed for reproducible runs")
    parser.add_argument(
        "--skip-invalid", action="store_true", help="Skip records that are not valid text instead of failing"
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")
    return parser


def _config_from_args(args: argparse.Namespace) -> SamplerConfig:
    return SamplerConfig(
        sample_size=args.num_samples,
        num_results=args.num_results,
        fields=tuple(args.fields),
        field_separator=args.field_separator,
        split_size=args.split_size,
        max_workers=args.jobs,
        executor="thread" if args.threads else "process",
        decode_errors="skip" if args.skip_invalid else "strict",
        seed=args.seed,
    )


def main(argv: Optional[List[str]] = None, stdout: Optional[TextIO] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    out = stdout if stdout is not None else sys.stdout

    level = _LOG_LEVELS[min(args.verbose, len(_LOG_LEVELS) - 1)]
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = _config_from_args(args)
    except ConfigError as exc:
        parser.error(str(exc))

    try:
        if args.input_file is not None:
            result = sample(config, input_file=args.input_file)
        else:
            result = sample(config, stream=sys.stdin.buffer)
    except (OSError, RecordDecodeError) as exc:
        logger.debug("sampling aborted", exc_info=True)
        print(f"{parser.prog}: error: {exc}", file=sys.stderr)
        return 1

    if args.output_format == "json":
        print(render_json(result, config.num_results), file=out)
    else:
        print(render_table(result, config.num_results), file=out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
