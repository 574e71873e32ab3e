# src/carve/ingest.py
"""
Line ingestion loop: match lines, batch rows, write batches to a sink.
"""
import logging
import re
import time
from dataclasses import dataclass
from typing import AnyStr, IO, Iterable, Iterator

from carve.parse import extract_values
from carve.sinks import DataSink
from carve.writer import ArrowWriter

logger = logging.getLogger(__name__)


@dataclass
class IngestStats:
    lines_read: int = 0
    rows_written: int = 0
    lines_skipped: int = 0
    batches_written: int = 0
    elapsed: float = 0.0


def _chomp(line: AnyStr) -> AnyStr:
    r"""Drop one trailing "\n", then at most one "\r" before it."""
    nl, cr = (b"\n", b"\r") if isinstance(line, bytes) else ("\n", "\r")
    if line.endswith(nl):
        line = line[:-1]
    if line.endswith(cr):
        line = line[:-1]
    return line


def iter_lines(stream: IO) -> Iterator[AnyStr]:
    r"""
    Yield lines from a text or binary stream without line terminators.

    Text streams should be opened with newline="\n" so a lone "\r" stays
    inside the line instead of splitting it.
    """
    for line in stream:
        yield _chomp(line)


def ingest(
    lines: Iterable[AnyStr],
    pattern: re.Pattern,
    writer: ArrowWriter,
    sink: DataSink,
    *,
    max_rows: int = 0,
    bench_report: bool = False,
) -> IngestStats:
    """
    Convert matching lines into record batches written to `sink`.

    `lines` must already be stripped of terminators (see iter_lines()).
    Lines that do not match are skipped. Processing stops once `max_rows`
    rows have been written (0 = unlimited); the line that hits the limit
    is counted in `lines_read` but not matched. Every flushed Record is
    released, including when the sink fails.
    """
    stats = IngestStats()
    started = time.perf_counter()
    batch_start = started

    for line in lines:
        stats.lines_read += 1
        if max_rows > 0 and stats.rows_written >= max_rows:
            logger.debug(f"reached max-rows limit of {max_rows}")
            break

        values = extract_values(line, pattern)
        if values is None:
            stats.lines_skipped += 1
            logger.debug(f"line {stats.lines_read}: does not match pattern")
            continue

        writer.append(values)
        stats.rows_written += 1

        if writer.should_flush():
            with writer.flush() as record:
                sink.write(record)
                stats.batches_written += 1
                if bench_report:
                    now = time.perf_counter()
                    logger.info(f"[bench] batch: {record.num_rows} rows, {now - batch_start:.6f}s")
                    batch_start = now

    # Flush remaining rows
    if writer.rows() > 0:
        with writer.flush() as record:
            sink.write(record)
            stats.batches_written += 1
            if bench_report:
                logger.info(
                    f"[bench] final batch: {record.num_rows} rows, "
                    f"{time.perf_counter() - batch_start:.6f}s"
                )

    stats.elapsed = time.perf_counter() - started
    return stats
