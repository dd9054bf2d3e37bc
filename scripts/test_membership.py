#!/usr/bin/env python3
"""
Membership Test Script

Tests opt-in / opt-out against the document store:
1. Opting in twice leaves exactly one entry
2. An applicant can never opt out (and vice versa)
3. Conflicts are rejected, never silently fixed
4. Training registration is idempotent

Run: pytest scripts/test_membership.py
"""
from datetime import timedelta

import pytest

from campus_portal.core.errors import MembershipConflictError, NotFoundError, PortalValidationError
from campus_portal.services.company_service import CompanyService
from campus_portal.services.training_service import TrainingService
from campus_portal.utils.dates import utcnow


@pytest.fixture
def companies():
    return CompanyService()


@pytest.fixture
def drive_id(companies):
    return companies.add_company({
        "name": "Infosys",
        "salary": "6 LPA",
        "eligibility_criteria": {"min_cgpa": 7.0, "sslc": 60, "hsc": 60, "backlogs_allowed": 0, "branches": ["CSE"]},
        "deadline": utcnow() + timedelta(days=7),
        "drive_date": utcnow() + timedelta(days=10),
    })


def test_opt_in_twice_keeps_one_entry(companies, drive_id):
    companies.opt_in(drive_id, "student-1")
    drive = companies.opt_in(drive_id, "student-1")
    assert drive["applicants"].count("student-1") == 1
    assert drive["opted_out"] == []


def test_applicant_cannot_opt_out(companies, drive_id):
    companies.opt_in(drive_id, "student-1")
    with pytest.raises(MembershipConflictError) as exc:
        companies.opt_out(drive_id, "student-1")
    assert exc.value.status_code == 409
    assert "already opted in" in exc.value.detail

    drive = companies.get_company(drive_id)
    assert drive["applicants"] == ["student-1"]
    assert drive["opted_out"] == []


def test_opted_out_student_cannot_opt_in(companies, drive_id):
    companies.opt_out(drive_id, "student-2")
    with pytest.raises(MembershipConflictError):
        companies.opt_in(drive_id, "student-2")

    drive = companies.get_company(drive_id)
    assert drive["applicants"] == []
    assert drive["opted_out"] == ["student-2"]


def test_inconsistent_state_is_rejected_not_repaired(companies, drive_id):
    # Written directly: opt_in / opt_out can no longer produce this state
    companies.store.collection.update_one(
        {"_id": drive_id}, {"$set": {"applicants": ["s9"], "opted_out": ["s9"]}}
    )
    with pytest.raises(MembershipConflictError) as exc:
        companies.opt_in(drive_id, "s9")
    assert "inconsistent" in exc.value.detail

    drive = companies.get_company(drive_id)
    assert drive["applicants"] == ["s9"]
    assert drive["opted_out"] == ["s9"]


def test_unknown_drive(companies):
    with pytest.raises(NotFoundError):
        companies.opt_in("no-such-drive", "student-1")


def test_update_cannot_touch_membership(companies, drive_id):
    companies.opt_in(drive_id, "student-1")
    drive = companies.update_company(drive_id, {"salary": "7 LPA", "applicants": []})
    assert drive["salary"] == "7 LPA"
    assert drive["applicants"] == ["student-1"]


def test_partial_criteria_update_keeps_other_criteria(companies, drive_id):
    drive = companies.update_company(drive_id, {"eligibility_criteria": {"min_cgpa": 8.0}})
    criteria = drive["eligibility_criteria"]
    assert criteria["min_cgpa"] == 8.0
    assert criteria["sslc"] == 60
    assert criteria["hsc"] == 60
    assert criteria["backlogs_allowed"] == 0
    assert criteria["branches"] == ["CSE"]


def test_apply_gate(companies, drive_id):
    drive = companies.get_company(drive_id)
    eligible = {"cgpa": 8, "tenth_mark": 70, "twelfth_mark": 70, "standing_arrears": 0, "department": "CSE"}
    companies.ensure_can_apply(drive, eligible)

    with pytest.raises(PortalValidationError, match="Not eligible: Dept mismatch"):
        companies.ensure_can_apply(drive, {**eligible, "department": "ECE"})

    expired = {**drive, "deadline": utcnow() - timedelta(days=1)}
    with pytest.raises(PortalValidationError, match="expired"):
        companies.ensure_can_apply(expired, eligible)


def test_search_by_salary_and_type(companies, drive_id):
    later = utcnow() + timedelta(days=20)
    companies.add_company({"name": "TCS", "salary": "3.5 LPA", "type": "Service", "drive_date": later})
    companies.add_company({"name": "Zoho", "salary": "12 LPA", "type": "Product", "drive_date": later})

    assert {d["name"] for d in companies.search(min_salary="6")} == {"Infosys", "Zoho"}
    assert [d["name"] for d in companies.search(company_type="Service")] == ["TCS"]
    assert companies.search(min_salary="20") == []


def test_training_registration_is_idempotent():
    trainings = TrainingService()
    training_id = trainings.add_training({
        "title": "Aptitude Bootcamp",
        "trainer": "Placement Cell",
        "start_date": utcnow(),
        "end_date": utcnow() + timedelta(days=3),
        "eligibility": {"branches": [], "year": None},
    })
    trainings.register(training_id, "student-1")
    training = trainings.register(training_id, "student-1")
    assert training["participants"] == ["student-1"]

    with pytest.raises(NotFoundError):
        trainings.register("missing", "student-1")


def test_partial_training_eligibility_update_keeps_branches():
    trainings = TrainingService()
    training_id = trainings.add_training({
        "title": "Mock Interviews",
        "trainer": "Alumni Cell",
        "start_date": utcnow(),
        "end_date": utcnow() + timedelta(days=2),
        "eligibility": {"branches": ["CSE", "IT"], "year": 4},
    })
    training = trainings.update_training(training_id, {"eligibility": {"year": 3}})
    assert training["eligibility"] == {"branches": ["CSE", "IT"], "year": 3}


def test_training_dates_are_validated():
    trainings = TrainingService()
    with pytest.raises(PortalValidationError):
        trainings.add_training({
            "title": "Backwards",
            "trainer": "Nobody",
            "start_date": utcnow(),
            "end_date": utcnow() - timedelta(days=1),
        })
