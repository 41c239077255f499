# sqlgate/classifier.py
from __future__ import annotations

from typing import Optional

from sqlgate.gate_policy import GatePolicy, DEFAULT_POLICY, WITH_PREFIX_RE
from sqlgate.verdict import ReasonKind, Verdict


def leading_statement_keyword(sanitized: str, policy: Optional[GatePolicy] = None) -> Optional[str]:
    """First major-statement verb in the text, lower-cased, or None."""
    policy = policy or DEFAULT_POLICY
    m = policy.major_pattern.search(sanitized)
    if m is None:
        return None
    return m.group(0).lower()


def starts_with_cte(sanitized: str) -> bool:
    return WITH_PREFIX_RE.search(sanitized) is not None


def classify_statement(sanitized: str, policy: Optional[GatePolicy] = None) -> Verdict:
    policy = policy or DEFAULT_POLICY

    leading = leading_statement_keyword(sanitized, policy)
    if leading is not None and leading != policy.allowed_statement:
        return Verdict.reject(ReasonKind.NON_SELECT_STATEMENT, leading)

    # WITH ... must eventually reach a SELECT
    if starts_with_cte(sanitized) and policy.allowed_pattern.search(sanitized) is None:
        return Verdict.reject(ReasonKind.DANGLING_WITH)

    # No major verb at all is not this stage's problem.
    return Verdict.accept()
