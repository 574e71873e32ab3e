#!/usr/bin/env python3
"""
Throughput benchmark for carve ingestion.

Generates synthetic log lines, converts them to an Arrow IPC file and
reports rows per second for each flush interval.

    python scripts/bench_ingest.py --lines 1000000 --flush-interval 1000 10000
"""
import argparse
import random
import tempfile
import time
from pathlib import Path

import pyarrow as pa
from tqdm import tqdm

from carve.ingest import ingest
from carve.schema import compile_pattern, extract_schema
from carve.sinks import ArrowFileSink, read_arrow_file
from carve.writer import ArrowWriter

PATTERN = r"^(?P<ts>\d{4}-[^ ]+) (?P<level>\w+) (?P<msg>.+)"
LEVELS = ["DEBUG", "INFO", "INFO", "INFO", "WARN", "ERROR"]
MESSAGES = [
    "Request handled: GET /api/users 200",
    "Cache miss for key session:{n}",
    "Database query took {n}ms",
    "Retrying upstream call (attempt {n})",
    "Worker {n} heartbeat",
]


def generate_lines(count, malformed_ratio, seed):
    rng = random.Random(seed)
    for i in range(count):
        if rng.random() < malformed_ratio:
            yield f"--- malformed entry {i} ---"
            continue
        ts = f"2023-01-01T10:{(i // 60) % 60:02d}:{i % 60:02d}.{i % 1000:03d}Z"
        msg = rng.choice(MESSAGES).format(n=rng.randint(1, 5000))
        yield f"{ts} {rng.choice(LEVELS)} {msg}"


def run_once(lines, flush_interval, out_dir: Path):
    pattern = compile_pattern(PATTERN)
    schema = extract_schema(pattern)
    pool = pa.proxy_memory_pool(pa.default_memory_pool())
    writer = ArrowWriter(schema, pool, flush_interval)
    output = out_dir / f"bench_{flush_interval}.arrow"

    start = time.perf_counter()
    with ArrowFileSink(output, schema) as sink:
        stats = ingest(lines, pattern, writer, sink)
    elapsed = time.perf_counter() - start

    rows = read_arrow_file(output).num_rows
    return {
        "flush_interval": flush_interval,
        "rows": rows,
        "batches": stats.batches_written,
        "seconds": elapsed,
        "rows_per_sec": rows / elapsed if elapsed else float("inf"),
        "peak_pool_mb": pool.max_memory() / (1024 * 1024),
        "file_mb": output.stat().st_size / (1024 * 1024),
    }


def main():
    parser = argparse.ArgumentParser(description="Benchmark carve ingestion throughput")
    parser.add_argument("--lines", type=int, default=200_000, help="Number of input lines")
    parser.add_argument(
        "--flush-interval",
        type=int,
        nargs="+",
        default=[100, 1000, 10000],
        help="Flush intervals to compare",
    )
    parser.add_argument("--malformed", type=float, default=0.05, help="Fraction of malformed lines")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    lines = list(
        tqdm(
            generate_lines(args.lines, args.malformed, args.seed),
            total=args.lines,
            desc="Generating lines",
            unit="line",
        )
    )

    results = []
    with tempfile.TemporaryDirectory() as tmp:
        for interval in tqdm(args.flush_interval, desc="Benchmarking", unit="run"):
            results.append(run_once(lines, interval, Path(tmp)))

    print("\n" + "=" * 78)
    print(f"{'flush':>8} {'rows':>10} {'batches':>8} {'seconds':>9} {'rows/s':>12} {'peak MB':>8} {'file MB':>8}")
    print("=" * 78)
    for r in results:
        print(
            f"{r['flush_interval']:>8} {r['rows']:>10} {r['batches']:>8} {r['seconds']:>9.3f} "
            f"{r['rows_per_sec']:>12,.0f} {r['peak_pool_mb']:>8.2f} {r['file_mb']:>8.2f}"
        )
    print("=" * 78)


if __name__ == "__main__":
    main()
