# src/carve/schema.py
"""
Schema derivation from regex named capture groups.

Every named group becomes one utf8 column; unnamed groups are skipped.
"""
import re
from typing import List, Optional, Union

import pyarrow as pa


class SchemaError(Exception):
    """Raised when a pattern cannot produce an Arrow schema."""
    pass


class PatternError(Exception):
    """Raised when a pattern source does not compile."""
    pass


def compile_pattern(source: Union[str, bytes]) -> re.Pattern:
    """
    Compile a pattern source with the standard `re` engine.

    Duplicate group names are rejected by the engine at compile time, so a
    compiled pattern never yields duplicate columns.
    """
    try:
        return re.compile(source)
    except re.error as e:
        raise PatternError(f"failed to compile pattern: {e}") from e


def field_names(pattern: re.Pattern) -> List[str]:
    """Named groups of the pattern, in capture-group order."""
    return sorted(pattern.groupindex, key=pattern.groupindex.__getitem__)


def extract_schema(pattern: Optional[re.Pattern]) -> pa.Schema:
    if pattern is None:
        raise SchemaError("pattern is required")

    fields = [pa.field(name, pa.string()) for name in field_names(pattern)]
    if not fields:
        raise SchemaError("pattern must contain named capture groups")
    return pa.schema(fields)
