"""
Tests for the Arrow IPC file sink.
"""
import pyarrow as pa
import pytest
from pyarrow import ipc

from carve.sinks import ArrowFileSink, read_arrow_file
from carve.writer import ArrowWriter


def make_batch(schema, rows):
    columns = list(zip(*rows)) if rows else [[] for _ in schema]
    return pa.RecordBatch.from_arrays(
        [pa.array(list(col), type=pa.string()) for col in columns], schema=schema
    )


class TestArrowFileSink:
    def test_write_and_promote(self, log_schema, output_path):
        sink = ArrowFileSink(output_path, log_schema)
        sink.write(make_batch(log_schema, [("t1", "INFO", "a"), ("t2", "WARN", "b")]))
        sink.write(make_batch(log_schema, [("t3", "ERROR", "c")]))

        assert sink.staging_path.exists()
        assert not output_path.exists()

        sink.promote()
        assert output_path.exists()
        assert not sink.staging_path.exists()
        assert sink.batches_written == 2
        assert sink.rows_written == 3

        with pa.OSFile(str(output_path), "rb") as f:
            reader = ipc.open_file(f)
            assert reader.schema.equals(log_schema)
            assert reader.num_record_batches == 2
            assert [reader.get_batch(i).num_rows for i in range(2)] == [2, 1]

    def test_accepts_records(self, log_schema, output_path, tracking_pool):
        writer = ArrowWriter(log_schema, tracking_pool, 0)
        writer.append(["t1", "INFO", "hello"])
        with ArrowFileSink(output_path, log_schema) as sink:
            with writer.flush() as record:
                sink.write(record)

        table = read_arrow_file(output_path)
        assert table.num_rows == 1
        assert table.column("msg").to_pylist() == ["hello"]

    def test_context_manager_discards_on_error(self, log_schema, output_path):
        with pytest.raises(RuntimeError):
            with ArrowFileSink(output_path, log_schema) as sink:
                sink.write(make_batch(log_schema, [("t1", "INFO", "a")]))
                raise RuntimeError("input failed")

        assert not output_path.exists()
        assert not sink.staging_path.exists()

    def test_empty_output_is_valid(self, log_schema, output_path):
        with ArrowFileSink(output_path, log_schema):
            pass

        table = read_arrow_file(output_path)
        assert table.num_rows == 0
        assert table.schema.names == ["ts", "level", "msg"]

    def test_creates_parent_directories(self, log_schema, tmp_path):
        target = tmp_path / "nested" / "dir" / "out.arrow"
        with ArrowFileSink(target, log_schema) as sink:
            sink.write(make_batch(log_schema, [("t", "INFO", "m")]))
        assert target.exists()

    def test_schema_mismatch(self, log_schema, output_path):
        other = pa.schema([pa.field("a", pa.string())])
        sink = ArrowFileSink(output_path, log_schema)
        with pytest.raises(ValueError, match="does not match"):
            sink.write(make_batch(other, [("x",)]))
        sink.discard()

    def test_write_after_close(self, log_schema, output_path):
        sink = ArrowFileSink(output_path, log_schema)
        sink.close()
        sink.close()
        with pytest.raises(RuntimeError, match="closed"):
            sink.write(make_batch(log_schema, []))
        sink.discard()
        assert not sink.staging_path.exists()
