# sqlgate/segmenter.py
from __future__ import annotations


def count_internal_semicolons(sanitized: str) -> int:
    trimmed = sanitized.rstrip()
    if trimmed.endswith(";"):
        # one trailing terminator is fine
        trimmed = trimmed[:-1]
    return trimmed.count(";")


def has_multiple_statements(sanitized: str) -> bool:
    """
    True if any statement terminator remains after exempting one trailing
    semicolon. Parenthesis depth is not tracked, so a semicolon nested
    inside a sub-select counts too.
    """
    return count_internal_semicolons(sanitized) > 0
