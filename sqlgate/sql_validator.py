# sqlgate/sql_validator.py
from __future__ import annotations

import logging
from typing import Any, Optional

from sqlgate.classifier import classify_statement, leading_statement_keyword
from sqlgate.gate_policy import GatePolicy, DEFAULT_POLICY
from sqlgate.keywords import find_disallowed_keyword
from sqlgate.sanitizer import sanitize_sql
from sqlgate.segmenter import has_multiple_statements
from sqlgate.verdict import ReasonKind, Verdict


logger = logging.getLogger(__name__)


def _rejected(verdict: Verdict) -> Verdict:
    logger.debug("sql rejected: %s (%s)", verdict.reason.value, verdict.detail)
    return verdict


def validate_sql(raw_sql: Any, policy: Optional[GatePolicy] = None) -> Verdict:
    """
    Decide whether untrusted SQL may run against a read-only engine.

    Order is fixed and short-circuits on the first failure:
      1) type / length
      2) sanitize, then null bytes
      3) stacked statements
      4) denylisted keywords
      5) leading statement must be SELECT; WITH must reach a SELECT

    Stacking is checked before the denylist so that two harmless SELECTs
    separated by a semicolon are still rejected.

    Never raises: every outcome is a Verdict.
    """
    policy = policy or DEFAULT_POLICY

    # 1) Type / length
    if not isinstance(raw_sql, str):
        return _rejected(Verdict.reject(ReasonKind.INVALID_INPUT_TYPE, type(raw_sql).__name__))
    if len(raw_sql) > policy.max_length:
        return _rejected(Verdict.reject(ReasonKind.TOO_LONG, str(policy.max_length)))

    # 2) Everything below looks at sanitized text only
    sanitized = sanitize_sql(raw_sql)
    if "\0" in sanitized:
        return _rejected(Verdict.reject(ReasonKind.NULL_BYTE))

    # 3) Multiple statements (one trailing semicolon allowed)
    if has_multiple_statements(sanitized):
        return _rejected(Verdict.reject(ReasonKind.MULTIPLE_STATEMENTS))

    # 4) Denylist anywhere, including CTE bodies and sub-selects
    bad = find_disallowed_keyword(sanitized, policy)
    if bad is not None:
        leading = leading_statement_keyword(sanitized, policy)
        if leading is not None and leading == bad.lower() and leading != policy.allowed_statement:
            # "INSERT INTO ..." is a non-select statement first, a denylist hit second
            return _rejected(Verdict.reject(ReasonKind.NON_SELECT_STATEMENT, leading))
        return _rejected(Verdict.reject(ReasonKind.DISALLOWED_KEYWORD, bad))

    # 5) Statement classification
    verdict = classify_statement(sanitized, policy)
    if not verdict.accepted:
        return _rejected(verdict)

    return Verdict.accept()
