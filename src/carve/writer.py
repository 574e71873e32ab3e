# src/carve/writer.py
"""
Row-to-column batching for Arrow output.

ArrowWriter buffers matched rows column by column and hands out finalized
Records when the caller flushes. Flush timing is left to the caller:
`append()` never flushes on its own.

Ownership:
    A Record returned by `flush()` belongs to the caller, who must call
    `release()` on every exit path. Using the Record as a context manager
    does this automatically:

        with writer.flush() as record:
            sink.write(record)
"""
import logging
from typing import Any, List, Optional, Sequence

import pyarrow as pa

logger = logging.getLogger(__name__)


class RecordReleasedError(Exception):
    """Raised when a Record is used after release()."""
    pass


class Record:
    """Immutable columnar batch produced by ArrowWriter.flush()."""

    def __init__(self, batch: pa.RecordBatch):
        self._batch: Optional[pa.RecordBatch] = batch
        self._schema = batch.schema

    @property
    def batch(self) -> pa.RecordBatch:
        if self._batch is None:
            raise RecordReleasedError("record has already been released")
        return self._batch

    @property
    def schema(self) -> pa.Schema:
        return self._schema

    @property
    def num_rows(self) -> int:
        return self.batch.num_rows

    @property
    def num_columns(self) -> int:
        return self.batch.num_columns

    def column(self, i: int) -> pa.Array:
        return self.batch.column(i)

    @property
    def released(self) -> bool:
        return self._batch is None

    def release(self):
        """Drop the reference to the column buffers. Safe to call twice."""
        self._batch = None

    def __len__(self):
        return self.num_rows

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def __repr__(self):
        if self.released:
            return "Record(released)"
        return f"Record(rows={self._batch.num_rows}, columns={self._batch.num_columns})"


class ArrowWriter:
    """
    Accumulates rows of text values into per-field column builders.

    Args:
        schema: Arrow schema with one string field per column.
        memory_pool: pyarrow MemoryPool used for every array this writer builds.
        max_rows: rows per batch; <= 0 disables count-based flushing.
    """

    def __init__(self, schema: pa.Schema, memory_pool: pa.MemoryPool, max_rows: int):
        self._schema = schema
        self._pool = memory_pool
        self._max_rows = max_rows
        self._builders: List[List[str]] = [[] for _ in schema]
        self._rows_in_batch = 0

    @property
    def schema(self) -> pa.Schema:
        return self._schema

    @property
    def memory_pool(self) -> pa.MemoryPool:
        return self._pool

    @property
    def max_rows(self) -> int:
        return self._max_rows

    def append(self, values: Sequence[Any]):
        """Add one row; value i goes to column i."""
        for i, v in enumerate(values):
            if isinstance(v, bytes):
                v = v.decode("utf-8", errors="replace")
            self._builders[i].append(v)
        self._rows_in_batch += 1

    def should_flush(self) -> bool:
        return self._max_rows > 0 and self._rows_in_batch >= self._max_rows

    def rows(self) -> int:
        """Number of rows currently buffered."""
        return self._rows_in_batch

    buffered_rows = rows

    def flush(self) -> Record:
        """
        Finalize the buffered rows into a Record and reset the builders.

        Flushing an empty writer yields a zero-row Record.
        """
        arrays = [
            pa.array(values, type=field.type, memory_pool=self._pool)
            for field, values in zip(self._schema, self._builders)
        ]
        batch = pa.RecordBatch.from_arrays(arrays, schema=self._schema)

        logger.debug(f"Flushed batch of {self._rows_in_batch} rows")
        self._builders = [[] for _ in self._schema]
        self._rows_in_batch = 0
        return Record(batch)
