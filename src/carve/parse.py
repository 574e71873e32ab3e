# src/carve/parse.py
import re
from functools import lru_cache
from typing import AnyStr, List, Optional, Tuple


@lru_cache(maxsize=64)
def _named_group_indices(pattern: re.Pattern) -> Tuple[int, ...]:
    return tuple(sorted(pattern.groupindex.values()))


def extract_values(line: AnyStr, pattern: Optional[re.Pattern]) -> Optional[List[AnyStr]]:
    """
    Return the named-group captures of `line`, or None when it does not match.

    Works for both `str` and `bytes`; the line and the pattern must use the
    same representation. Groups that did not take part in the match yield
    an empty value so every row carries one value per schema field.
    """
    if pattern is None:
        return None
    if not isinstance(line, (str, bytes)):
        raise TypeError(f"Cannot match line of type: {type(line)}")

    m = pattern.search(line)
    if m is None:
        return None

    empty = line[:0]
    out = []
    for idx in _named_group_indices(pattern):
        value = m.group(idx)
        out.append(empty if value is None else value)
    return out


def parse_line(line: str, pattern: Optional[re.Pattern]) -> Optional[List[str]]:
    """str specialization of extract_values()."""
    return extract_values(line, pattern)
