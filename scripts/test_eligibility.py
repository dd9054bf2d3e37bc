#!/usr/bin/env python3
"""
Eligibility Test Script

Tests:
1. The reference student against a lenient and a strict drive
2. Check order (first failed check names the reason)
3. Branch handling (empty set, missing department)
4. Garbage / missing inputs never raise
5. Training eligibility (branch + year)

Run: pytest scripts/test_eligibility.py
"""
import pytest

from campus_portal.schemas.schemas import EligibilityCriteria
from campus_portal.services.eligibility import evaluate, evaluate_training, is_eligible

STUDENT = {
    "cgpa": 7.5,
    "tenth_mark": 85,
    "twelfth_mark": 80,
    "standing_arrears": 0,
    "history_of_arrears": 0,
    "department": "CSE",
}

CRITERIA = {
    "min_cgpa": 7.0,
    "sslc": 80,
    "hsc": 75,
    "backlogs_allowed": 1,
    "branches": ["CSE", "ECE"],
}


def test_reference_student_is_eligible():
    result = evaluate(STUDENT, CRITERIA)
    assert result.eligible is True
    assert result.reason is None


def test_higher_cgpa_bar_rejects_with_cgpa_reason():
    result = evaluate(STUDENT, {**CRITERIA, "min_cgpa": 8.0})
    assert result.eligible is False
    assert "CGPA" in result.reason
    assert result.reason == "CGPA < 8"


@pytest.mark.parametrize("student_overrides, expected", [
    ({"cgpa": 6.0, "tenth_mark": 10, "standing_arrears": 9, "department": "MECH"}, "CGPA < 7"),
    ({"tenth_mark": 10, "twelfth_mark": 10, "department": "MECH"}, "10th Mark < 80%"),
    ({"twelfth_mark": 70, "standing_arrears": 5}, "12th Mark < 75%"),
    ({"standing_arrears": 2, "department": "MECH"}, "Arrears > 1"),
    ({"department": "MECH"}, "Dept mismatch"),
])
def test_first_failed_check_wins(student_overrides, expected):
    result = evaluate({**STUDENT, **student_overrides}, CRITERIA)
    assert result.eligible is False
    assert result.reason == expected


def test_history_of_arrears_only_checked_when_set():
    veteran = {**STUDENT, "history_of_arrears": 3}
    assert is_eligible(veteran, CRITERIA)

    result = evaluate(veteran, {**CRITERIA, "history_of_arrears_allowed": 2})
    assert result.eligible is False
    assert result.reason == "History of arrears > 2"


def test_empty_branch_set_never_rejects():
    for department in ("CSE", "MECH", None, ""):
        student = {**STUDENT, "department": department}
        assert is_eligible(student, {**CRITERIA, "branches": []})


def test_missing_department_skips_branch_check():
    for department in (None, ""):
        student = {**STUDENT, "department": department}
        assert evaluate(student, CRITERIA) == evaluate(student, {**CRITERIA, "branches": []})
        assert is_eligible(student, CRITERIA)
        assert evaluate_training(student, {"branches": ["EEE"], "year": None}).eligible

    # Other thresholds still apply
    result = evaluate({**STUDENT, "department": None, "cgpa": 5.0}, CRITERIA)
    assert result.reason == "CGPA < 7"


def test_missing_profile():
    result = evaluate(None, CRITERIA)
    assert result.eligible is False
    assert result.reason == "Profile not loaded"


@pytest.mark.parametrize("student", [
    {},
    {"cgpa": None, "tenth_mark": "abc", "twelfth_mark": float("nan"), "standing_arrears": True},
    {"cgpa": "8.1", "department": 42},
])
def test_garbage_inputs_never_raise(student):
    result = evaluate(student, CRITERIA)
    assert result.eligible is False
    assert result.reason


def test_missing_student_numbers_count_as_zero():
    # No thresholds: a blank profile passes
    assert is_eligible({}, {})
    # Any positive threshold: a blank profile fails on the first check
    assert evaluate({}, {"min_cgpa": 0.1}).reason == "CGPA < 0.1"


def test_accepts_pydantic_criteria_and_camel_case_input():
    criteria = EligibilityCriteria.model_validate(
        {"minCGPA": 7.0, "sslc": 80, "hsc": 75, "backlogsAllowed": 1, "branches": ["CSE"]}
    )
    assert criteria.min_cgpa == 7.0
    assert criteria.backlogs_allowed == 1
    assert is_eligible(STUDENT, criteria)


def test_training_eligibility():
    assert evaluate_training(STUDENT, {"branches": [], "year": None}).eligible
    assert evaluate_training({**STUDENT, "year": 3}, {"branches": ["CSE"], "year": 3}).eligible

    result = evaluate_training({**STUDENT, "year": 2}, {"branches": ["CSE"], "year": 3})
    assert result.eligible is False
    assert result.reason == "Open to year 3 only"

    assert evaluate_training(STUDENT, {"branches": ["EEE"]}).reason == "Dept mismatch"
    assert evaluate_training(None, {}).reason == "Profile not loaded"
