from __future__ import annotations

import pytest

from casebatch.db.clauses import build_case_clause, build_membership_predicate, build_row_predicate


def test_row_predicate_ands_every_key_column() -> None:
    assert build_row_predicate(['"org_id"', '"email"'], [":p0", ":p1"]) == '"org_id" = :p0 AND "email" = :p1'


def test_row_predicate_single_column() -> None:
    assert build_row_predicate(['"id"'], ["7"]) == '"id" = 7'


def test_row_predicate_length_mismatch() -> None:
    with pytest.raises(ValueError):
        build_row_predicate(['"a"', '"b"'], [":p0"])


def test_case_clause_keeps_branch_order_and_falls_back_to_column() -> None:
    clause = build_case_clause('"status"', [('"id" = :p0', ":p2"), ('"id" = :p1', "NULL")])
    assert clause == (
        '"status" = CASE WHEN ("id" = :p0) THEN :p2 WHEN ("id" = :p1) THEN NULL ELSE "status" END'
    )


def test_case_clause_requires_a_branch() -> None:
    with pytest.raises(ValueError):
        build_case_clause('"status"', [])


def test_membership_predicate_compound() -> None:
    predicate = build_membership_predicate(['"org_id"', '"email"'], [[":p0", ":p1"], [":p2", ":p3"]])
    assert predicate == '("org_id", "email") IN ((:p0, :p1), (:p2, :p3))'


def test_membership_predicate_single_column() -> None:
    assert build_membership_predicate(['"id"'], [["1"], ["2"], ["1"]]) == '"id" IN (1, 2, 1)'


def test_membership_predicate_requires_rows() -> None:
    with pytest.raises(ValueError):
        build_membership_predicate(['"id"'], [])
