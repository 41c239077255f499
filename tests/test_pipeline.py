# tests/test_pipeline.py
import json

import pytest

from sqlgate.errors import CompletionFormatError, SQLRejected
from sqlgate.gate_policy import GatePolicy
from sqlgate.pipeline import gate_candidate, gate_completion, generate_and_gate
from sqlgate.verdict import ReasonKind


class FakeSource:
    def __init__(self, sql, reason="because"):
        self.payload = json.dumps({"sql": sql, "reason": reason})
        self.questions = []

    def complete(self, question):
        self.questions.append(question)
        return self.payload


def test_accepted_candidate_is_returned_unchanged():
    out = gate_candidate("SELECT 1;", "one")
    assert out.sql == "SELECT 1;"
    assert out.reason == "one"
    assert out.verdict.accepted


def test_rejected_candidate_raises_with_verdict():
    with pytest.raises(SQLRejected) as ei:
        gate_candidate("DROP TABLE t")
    err = ei.value
    assert err.code == "sql_rejected"
    assert err.sql == "DROP TABLE t"
    assert err.verdict.reason == ReasonKind.DISALLOWED_KEYWORD
    assert str(err) == "Disallowed keyword found: DROP."


def test_gate_completion_end_to_end():
    out = gate_completion('```json\n{"sql": "SELECT 1", "reason": "r"}\n```')
    assert out.sql == "SELECT 1"


def test_gate_completion_rejects_stacked_sql():
    with pytest.raises(SQLRejected) as ei:
        gate_completion('{"sql": "SELECT 1; SELECT 2", "reason": "r"}')
    assert ei.value.verdict.reason == ReasonKind.MULTIPLE_STATEMENTS


def test_gate_completion_propagates_format_errors():
    with pytest.raises(CompletionFormatError):
        gate_completion("not json at all")


def test_generate_and_gate_uses_source_and_policy():
    source = FakeSource("SELECT 1 UNION SELECT 2")
    out = generate_and_gate("two rows?", source)
    assert out.verdict.accepted
    assert source.questions == ["two rows?"]

    strict = GatePolicy(version="no-union", denylist=["union"])
    with pytest.raises(SQLRejected) as ei:
        generate_and_gate("two rows?", source, policy=strict)
    assert ei.value.verdict.detail == "UNION"


def test_rejection_is_logged(caplog):
    with caplog.at_level("WARNING", logger="sqlgate.pipeline"):
        with pytest.raises(SQLRejected):
            gate_candidate("insert into t values (1)")
    assert "Only SELECT is permitted (found INSERT)." in caplog.text
