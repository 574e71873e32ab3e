# src/carve/sinks.py
import logging
import shutil
from pathlib import Path
from typing import Any, Protocol, Union

import pyarrow as pa
from pyarrow import ipc

from carve.writer import Record

logger = logging.getLogger(__name__)


class DataSink(Protocol):
    def write(self, data: Any): ...
    def close(self): ...
    def promote(self): ...


class ArrowFileSink:
    """
    Writes record batches to an Arrow IPC file.

    Batches go to a staging file next to the target; `promote()` moves it
    into place once the run has finished. Used as a context manager, the
    sink promotes on success and discards the staging file on error.
    """

    def __init__(self, path: Union[str, Path], schema: pa.Schema):
        self.final_path = Path(path)
        self.staging_path = self.final_path.with_name(self.final_path.name + ".stg")
        self.schema = schema

        self.staging_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = pa.OSFile(str(self.staging_path), "wb")
        self._writer = ipc.new_file(self._file, schema)
        self.closed = False

        self.batches_written = 0
        self.rows_written = 0

    def write(self, data: Union[Record, pa.RecordBatch]):
        if self.closed:
            raise RuntimeError(f"Sink for {self.final_path} is closed")

        batch = data.batch if isinstance(data, Record) else data
        if not batch.schema.equals(self.schema):
            raise ValueError(
                f"Batch schema does not match sink schema: {batch.schema} != {self.schema}"
            )

        self._writer.write_batch(batch)
        self.batches_written += 1
        self.rows_written += batch.num_rows

    def close(self):
        if self.closed:
            return
        self.closed = True
        try:
            self._writer.close()
        finally:
            self._file.close()

    def promote(self):
        self.close()
        if self.staging_path.exists():
            logger.debug(f"Promoting {self.staging_path} to {self.final_path}")
            shutil.move(str(self.staging_path), str(self.final_path))

    def discard(self):
        self.close()
        if self.staging_path.exists():
            logger.debug(f"Discarding {self.staging_path}")
            self.staging_path.unlink()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.promote()
        else:
            self.discard()
        return False


def read_arrow_file(path: Union[str, Path]) -> pa.Table:
    """Read every record batch of an Arrow IPC file into a Table."""
    with pa.OSFile(str(path), "rb") as source:
        return ipc.open_file(source).read_all()
