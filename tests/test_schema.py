"""
Unit tests for schema derivation from named capture groups.
"""
import re

import pyarrow as pa
import pytest

from carve.schema import PatternError, SchemaError, compile_pattern, extract_schema, field_names


class TestExtractSchema:
    def test_two_named_groups_in_order(self):
        schema = extract_schema(re.compile(r"(?P<a>\w+)-(?P<b>\d+)"))
        assert schema.names == ["a", "b"]
        assert all(field.type == pa.string() for field in schema)

    def test_no_named_groups_fails(self):
        with pytest.raises(SchemaError, match="named capture groups"):
            extract_schema(re.compile(r"(\w+)-(\d+)"))

    def test_pattern_without_groups_fails(self):
        with pytest.raises(SchemaError):
            extract_schema(re.compile(r"\w+"))

    def test_none_pattern_fails(self):
        with pytest.raises(SchemaError, match="required"):
            extract_schema(None)

    def test_unnamed_groups_are_skipped(self):
        """Unnamed groups in between do not produce columns."""
        pattern = re.compile(r"(?P<host>\S+) (\S+) (?P<user>\S+) \[(?P<time>[^\]]+)\]")
        assert extract_schema(pattern).names == ["host", "user", "time"]

    def test_order_follows_capture_groups(self):
        """Nested groups are numbered by their opening parenthesis."""
        pattern = re.compile(r"(?P<outer>a(?P<inner>b)c)(?P<tail>d)")
        assert field_names(pattern) == ["outer", "inner", "tail"]

    def test_log_schema(self, log_schema):
        assert len(log_schema) == 3
        assert log_schema.names == ["ts", "level", "msg"]
        assert str(log_schema.field("ts").type) == "string"

    def test_bytes_pattern(self):
        schema = extract_schema(re.compile(rb"(?P<key>\w+)=(?P<value>\w+)"))
        assert schema.names == ["key", "value"]
        assert schema.field("value").type == pa.string()


class TestCompilePattern:
    def test_compiles_valid_pattern(self):
        pattern = compile_pattern(r"(?P<a>\w+)")
        assert pattern.groupindex == {"a": 1}

    def test_invalid_pattern(self):
        with pytest.raises(PatternError, match="failed to compile pattern"):
            compile_pattern("[invalid")

    def test_duplicate_group_names_rejected(self):
        """A second group reusing a name never reaches schema derivation."""
        with pytest.raises(PatternError):
            compile_pattern(r"(?P<a>\w+)-(?P<a>\d+)")

    def test_error_keeps_cause(self):
        with pytest.raises(PatternError) as exc_info:
            compile_pattern("(?P<a>")
        assert isinstance(exc_info.value.__cause__, re.error)
