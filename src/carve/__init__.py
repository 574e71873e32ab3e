# src/carve/__init__.py
"""
carve - convert structured logs to Arrow format.

A regex with named capture groups defines the schema; each matching line
becomes one row of utf8 columns.
"""

__version__ = "0.2.0"

from carve.schema import SchemaError, PatternError, compile_pattern, extract_schema, field_names
from carve.parse import extract_values, parse_line
from carve.writer import ArrowWriter, Record, RecordReleasedError
from carve.sinks import ArrowFileSink, DataSink, read_arrow_file
from carve.ingest import IngestStats, ingest, iter_lines

__all__ = [
    "__version__",
    "SchemaError",
    "PatternError",
    "compile_pattern",
    "extract_schema",
    "field_names",
    "extract_values",
    "parse_line",
    "ArrowWriter",
    "Record",
    "RecordReleasedError",
    "ArrowFileSink",
    "DataSink",
    "read_arrow_file",
    "IngestStats",
    "ingest",
    "iter_lines",
]
