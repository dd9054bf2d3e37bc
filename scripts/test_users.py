#!/usr/bin/env python3
"""
User Service Test Script

Tests:
1. Provisioning rules per role (who may create whom, forced scope)
2. Failed profile writes leave no orphan account
3. Visible scope per role
4. Profile lifecycle: PENDING -> APPROVAL_PENDING -> VERIFIED / back to PENDING
5. Placement ledger keeps student placement status in step

Run: pytest scripts/test_users.py
"""
import pytest

from campus_portal.core.errors import (
    DuplicateAccountError, PermissionDeniedError, PortalValidationError, RemoteStoreError
)
from campus_portal.schemas.schemas import UserRole, ProfileStatus, PlacementStatus
from campus_portal.services.placement_record_service import PlacementRecordService, validate_roll_no
from seed_admin import seed_admin


def test_class_coordinator_provisions_into_own_section(users, sessions):
    profile = users.provision(
        sessions["class"],
        email="New.Student@College.edu",
        password="pw123456",
        display_name="New Student",
        role=UserRole.student,
        department="MECH",
        section="Z",
        roll_no="21cs077",
    )
    assert profile["email"] == "new.student@college.edu"
    assert profile["department"] == "CSE"
    assert profile["section"] == "A"
    assert profile["roll_no"] == "21CS077"
    assert profile["profile_status"] == ProfileStatus.pending.value
    assert profile["profile_completed"] is False
    assert profile["placement_status"] == PlacementStatus.unplaced.value


def test_role_creation_rules(users, sessions):
    with pytest.raises(PermissionDeniedError):
        users.provision(sessions["class"], "x@college.edu", "pw", "X", UserRole.dept_coordinator, "CSE")
    with pytest.raises(PermissionDeniedError):
        users.provision(sessions["student"], "y@college.edu", "pw", "Y", UserRole.student, "CSE")
    with pytest.raises(PermissionDeniedError):
        users.provision(sessions["placement_head"], "z@college.edu", "pw", "Z", UserRole.student, "CSE")

    staff = users.provision(sessions["admin"], "th@college.edu", "pw", "Training Head", UserRole.training_head)
    assert staff["profile_status"] == ProfileStatus.verified.value
    assert staff["profile_completed"] is True
    assert "placement_status" not in staff


def test_coordinator_roles_need_a_department(users, sessions):
    with pytest.raises(PortalValidationError):
        users.provision(sessions["admin"], "hod@college.edu", "pw", "HOD", UserRole.dept_coordinator)


def test_duplicate_email_is_rejected(users, sessions):
    with pytest.raises(DuplicateAccountError):
        users.provision(sessions["admin"], "ASHA@college.edu", "pw", "Asha 2", UserRole.student, "CSE")


def test_failed_profile_write_frees_the_email(users, sessions, monkeypatch):
    def store_down(*args, **kwargs):
        raise RemoteStoreError("Document store unavailable: timed out")

    with monkeypatch.context() as m:
        m.setattr(users.store, "create", store_down)
        with pytest.raises(RemoteStoreError):
            users.provision(sessions["admin"], "late@college.edu", "pw", "Late", UserRole.student, "CSE")

    assert users.identity.existing_emails(["late@college.edu"]) == set()

    profile = users.provision(sessions["admin"], "late@college.edu", "pw", "Late", UserRole.student, "CSE")
    assert users.get_profile(profile["uid"])["email"] == "late@college.edu"


def test_seed_admin_creates_account_and_profile(users):
    uid = seed_admin("Root@College.edu", "pw123456", "Root")
    profile = users.get_profile(uid)
    assert profile["role"] == UserRole.admin.value
    assert profile["email"] == "root@college.edu"
    assert users.identity.sign_in("root@college.edu", "pw123456")


def test_visible_scope(users, sessions, people):
    def visible(key):
        return {u["uid"] for u in users.list_visible(sessions[key], role=UserRole.student)}

    student, other = people["student"]["uid"], people["other_student"]["uid"]
    assert visible("admin") == {student, other}
    assert visible("dept") == {student}
    assert visible("class") == {student}
    assert visible("student") == {student}

    with pytest.raises(PermissionDeniedError):
        users.get_visible(sessions["dept"], other)


def test_profile_lifecycle(users, sessions, people):
    uid = people["student"]["uid"]

    with pytest.raises(PortalValidationError):
        users.approve(sessions["class"], uid)

    profile = users.complete_profile(sessions["student"], {"phone": "9876543210", "cgpa": 8.1})
    assert profile["profile_completed"] is True
    assert profile["profile_status"] == ProfileStatus.approval_pending.value

    with pytest.raises(PermissionDeniedError):
        users.approve(sessions["placement_head"], uid)

    declined = users.decline(sessions["class"], uid)
    assert declined["profile_status"] == ProfileStatus.pending.value
    assert declined["profile_completed"] is False

    users.complete_profile(sessions["student"], {"phone": "9876543210"})
    approved = users.approve(sessions["dept"], uid)
    assert approved["profile_status"] == ProfileStatus.verified.value


def test_only_students_complete_profiles(users, sessions):
    with pytest.raises(PermissionDeniedError):
        users.complete_profile(sessions["class"], {"phone": "1"})


@pytest.mark.parametrize("roll_no", ["", None, "AB12", "21CS-001", "21CS001 EXTRA"])
def test_invalid_roll_numbers(roll_no):
    with pytest.raises(PortalValidationError):
        validate_roll_no(roll_no)


def test_roll_numbers_are_normalized():
    assert validate_roll_no(" 21cs001 ") == "21CS001"


def test_ledger_drives_placement_status(users, people):
    ledger = PlacementRecordService(users=users)
    uid = people["student"]["uid"]
    record = {"name": "Asha", "roll_no": "21cs001", "department": "CSE", "company_name": "Infosys", "package": "6 LPA"}

    first = ledger.add_record(record)
    second = ledger.add_record({**record, "company_name": "Zoho"})
    assert users.get_profile(uid)["placement_status"] == PlacementStatus.placed.value
    assert len(ledger.records_by_roll_no("21CS001")) == 2

    ledger.delete_record(first)
    assert users.get_profile(uid)["placement_status"] == PlacementStatus.placed.value

    ledger.delete_record(second)
    assert users.get_profile(uid)["placement_status"] == PlacementStatus.unplaced.value


def test_ledger_rejects_bad_roll_number_before_writing(users):
    ledger = PlacementRecordService(users=users)
    with pytest.raises(PortalValidationError):
        ledger.add_record({"name": "X", "roll_no": "??", "department": "CSE", "company_name": "TCS"})
    assert ledger.list_records() == []


def test_ledger_unknown_roll_number_is_fine(users):
    ledger = PlacementRecordService(users=users)
    ledger.add_record({"name": "Guest", "roll_no": "99XX999", "department": "EEE", "company_name": "TCS"})
    records = ledger.list_records(search="guest")
    assert len(records) == 1
    assert records[0]["academic_year"]
