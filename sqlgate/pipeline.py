# sqlgate/pipeline.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from sqlgate.completion import parse_completion
from sqlgate.errors import SQLRejected
from sqlgate.gate_policy import GatePolicy, DEFAULT_POLICY
from sqlgate.sql_validator import validate_sql
from sqlgate.verdict import Verdict


logger = logging.getLogger(__name__)


class CompletionSource(Protocol):
    """Anything that turns a question into a raw model completion."""

    def complete(self, question: str) -> str:
        ...


@dataclass(frozen=True)
class GatedSQL:
    sql: str
    reason: str
    verdict: Verdict


def gate_candidate(sql: str, reason: str = "", policy: Optional[GatePolicy] = None) -> GatedSQL:
    """
    Pass candidate SQL through the gate. Rejected SQL is never repaired:
    the caller gets SQLRejected with the verdict and decides what to tell
    the user.
    """
    policy = policy or DEFAULT_POLICY

    verdict = validate_sql(sql, policy=policy)
    if not verdict.accepted:
        logger.warning(
            "rejected generated SQL (policy=%s): %s", policy.version, verdict.message
        )
        raise SQLRejected(verdict, sql=sql)

    return GatedSQL(sql=sql, reason=reason, verdict=verdict)


def gate_completion(text: str, policy: Optional[GatePolicy] = None) -> GatedSQL:
    completion = parse_completion(text)
    return gate_candidate(completion.sql, completion.reason, policy=policy)


def generate_and_gate(
    question: str,
    source: CompletionSource,
    policy: Optional[GatePolicy] = None,
) -> GatedSQL:
    raw = source.complete(question)
    return gate_completion(raw, policy=policy)
