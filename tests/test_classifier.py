# tests/test_classifier.py
from sqlgate.classifier import classify_statement, leading_statement_keyword, starts_with_cte
from sqlgate.verdict import ReasonKind


def test_leading_keyword_is_lowercased():
    assert leading_statement_keyword("  SeLeCt 1") == "select"
    assert leading_statement_keyword("INSERT INTO t SELECT 1") == "insert"


def test_leading_keyword_absent():
    assert leading_statement_keyword("VALUES (1)") is None
    assert leading_statement_keyword("") is None


def test_select_passes():
    assert classify_statement("SELECT 1").accepted


def test_non_select_rejected_with_keyword():
    v = classify_statement("merge into t using s on 1 = 1")
    assert not v.accepted
    assert v.reason == ReasonKind.NON_SELECT_STATEMENT
    assert v.detail == "merge"


def test_cte_leading_to_select():
    assert classify_statement("WITH t AS (SELECT 1) SELECT * FROM t").accepted


def test_dangling_with():
    v = classify_statement("WITH t AS (VALUES (1))")
    assert not v.accepted
    assert v.reason == ReasonKind.DANGLING_WITH


def test_with_must_be_a_whole_word():
    assert not starts_with_cte("without_x")
    assert starts_with_cte("\n  with t as (values (1))")


def test_no_major_keyword_is_not_an_error_here():
    assert classify_statement("VALUES (1)").accepted
    assert classify_statement("").accepted


def test_leading_keyword_ignores_unicode_case_folding():
    assert leading_statement_keyword("ſelect 1") is None
