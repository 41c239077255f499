# tests/test_completion.py
import json

import pytest

from sqlgate.completion import parse_completion
from sqlgate.errors import CompletionFormatError


MODEL_CONTENT = json.dumps(
    {
        "sql": "SELECT local_authority_ons_district_label, COUNT(*) AS crashes\n"
               "FROM collisions\n"
               "WHERE collision_year = (SELECT MAX(collision_year) FROM collisions)\n"
               "GROUP BY 1\nORDER BY crashes ASC\nLIMIT 1;\n",
        "reason": "Safest district is the one with the fewest crashes.",
    }
)


def test_parses_plain_json():
    c = parse_completion(MODEL_CONTENT)
    assert c.sql.startswith("SELECT local_authority_ons_district_label")
    assert "fewest crashes" in c.reason


def test_strips_json_code_fence():
    c = parse_completion("```json\n" + MODEL_CONTENT + "\n```")
    assert c.sql.endswith("LIMIT 1;\n")


def test_strips_bare_code_fence():
    c = parse_completion('```\n{"sql": "SELECT 1", "reason": "r"}\n```')
    assert c.sql == "SELECT 1"


def test_sql_is_not_modified():
    c = parse_completion('{"sql": "SELECT 1; DROP TABLE t", "reason": "r"}')
    assert c.sql == "SELECT 1; DROP TABLE t"


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "SELECT 1",
        "[1, 2]",
        '{"sql": "SELECT 1"}',
        '{"reason": "r"}',
        '{"sql": "", "reason": "r"}',
        '{"sql": "SELECT 1", "reason": "  "}',
        '{"sql": 1, "reason": "r"}',
    ],
)
def test_malformed_completions_raise(text):
    with pytest.raises(CompletionFormatError):
        parse_completion(text)


def test_format_error_is_a_value_error():
    with pytest.raises(ValueError):
        parse_completion("nope")
