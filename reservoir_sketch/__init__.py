"""reservoir_sketch package public API."""
from ._metadata import __version__
from .chunking import LineRange, split_file, split_lines
from .config import SamplerConfig
from .errors import ConfigError, RecordDecodeError, ReservoirSketchError
from .histogram import ValueFrequency, top_k, top_k_fields
from .orchestrator import reduce_field_sets, sample, sample_file, sample_range, sample_stream
from .records import DecodedLine, FieldSet, decode_line, process_records, split_fields
from .reservoir import Reservoir

__all__ = [
    "Reservoir",
    "LineRange",
    "split_lines",
    "split_file",
    "SamplerConfig",
    "FieldSet",
    "DecodedLine",
    "decode_line",
    "split_fields",
    "process_records",
    "ValueFrequency",
    "top_k",
    "top_k_fields",
    "sample",
    "sample_stream",
    "sample_file",
    "sample_range",
    "reduce_field_sets",
    "ReservoirSketchError",
    "ConfigError",
    "RecordDecodeError",
    "__version__",
]
