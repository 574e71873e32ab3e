# src/carve/main.py
"""
carve command line: convert structured logs to Arrow IPC files.

Usage:
    carve --pattern '^(?P<ts>[^ ]+) (?P<level>\\w+) (?P<msg>.+)' --input app.log --output out.arrow
    carve --pattern '^(?P<ts>[^ ]+) (?P<level>\\w+) (?P<msg>.+)' --schema
    tail -f app.log | carve --pattern '...' --output out.arrow --flush-interval 500
"""
import argparse
import contextlib
import io
import logging
import sys
from typing import List, Optional

import pyarrow as pa

from carve import __version__
from carve.config import settings, resolve_memory_pool
from carve.ingest import ingest, iter_lines
from carve.logging_setup import setup_logging
from carve.schema import PatternError, SchemaError, compile_pattern, extract_schema
from carve.sinks import ArrowFileSink
from carve.writer import ArrowWriter

logger = logging.getLogger(__name__)


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="carve",
        description="carve - convert structured logs to Arrow format",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    carve --pattern '^(?P<ts>[^ ]+) (?P<level>\\w+) (?P<msg>.+)' --input app.log --output out.arrow
    carve --pattern '^(?P<ts>[^ ]+) (?P<level>\\w+) (?P<msg>.+)' --schema
        """,
    )

    parser.add_argument(
        "--pattern",
        default=None,
        help="Regex pattern with named capture groups",
    )
    parser.add_argument(
        "--input",
        default=None,
        help="Input file (defaults to stdin)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output Arrow IPC file",
    )
    parser.add_argument(
        "--flush-interval",
        type=non_negative_int,
        default=None,
        help=f"Rows per record batch, 0 = one batch (default: {settings.ingest.flush_interval})",
    )
    parser.add_argument(
        "--schema",
        action="store_true",
        help="Print inferred schema and exit",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose logging",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--bench-report",
        action="store_true",
        help="Emit per-batch timing information",
    )
    parser.add_argument(
        "--max-rows",
        type=non_negative_int,
        default=None,
        help="Limit processed input (0 = unlimited)",
    )
    return parser


def print_schema(schema: pa.Schema):
    print(f"Schema ({len(schema)} fields):")
    for i, field in enumerate(schema):
        print(f"  {i}: {field.name} ({field.type})")


@contextlib.contextmanager
def _stdin_text():
    buffer = getattr(sys.stdin, "buffer", None)
    if buffer is None:
        yield sys.stdin
        return
    stream = io.TextIOWrapper(buffer, encoding="utf-8", errors="replace", newline="\n")
    try:
        yield stream
    finally:
        # Leave sys.stdin usable after the wrapper goes away
        stream.detach()


def open_input(path: Optional[str]):
    """
    Open the input for line reading. Lines split on "\\n" only, so a lone
    "\\r" stays part of the line.
    """
    if path is None:
        return _stdin_text()
    return open(path, "r", encoding="utf-8", errors="replace", newline="\n")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for carve."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print("carve", __version__)
        return 0
    if not args.pattern:
        parser.error("--pattern flag is required")
    if not args.output and not args.schema:
        parser.error("--output flag is required")

    setup_logging(settings.logging, verbose=args.verbose)

    try:
        pattern = compile_pattern(args.pattern)
        schema = extract_schema(pattern)
    except PatternError as e:
        logger.error(str(e))
        return 1
    except SchemaError as e:
        logger.error(f"schema error: {e}")
        return 1

    if args.schema:
        print_schema(schema)
        return 0

    flush_interval = args.flush_interval
    if flush_interval is None:
        flush_interval = settings.ingest.flush_interval
    max_rows = args.max_rows
    if max_rows is None:
        max_rows = settings.ingest.max_rows

    try:
        writer = ArrowWriter(schema, resolve_memory_pool(settings.ingest.memory_pool), flush_interval)
        with open_input(args.input) as stream, ArrowFileSink(args.output, schema) as sink:
            stats = ingest(
                iter_lines(stream),
                pattern,
                writer,
                sink,
                max_rows=max_rows,
                bench_report=args.bench_report,
            )
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1

    logger.info(
        f"processed {stats.lines_read} lines, wrote {stats.rows_written} rows "
        f"to {args.output} in {stats.batches_written} batches"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
