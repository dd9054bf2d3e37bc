"""
Shared pytest fixtures.

Every test runs against a fresh in-memory MongoDB (mongomock) swapped in
through reset_mongo_client(), so no server is needed.
"""
import sys
sys.path.insert(0, '.')

import mongomock
import pytest
from fastapi.testclient import TestClient

from campus_portal.core.scopes import Session
from campus_portal.db.mongodb import init_mongo_indexes, reset_mongo_client
from campus_portal.schemas.schemas import UserRole
from campus_portal.services.identity_service import IdentityService
from campus_portal.services.user_service import UserService, new_profile

PASSWORD = "secret123"


def session_for(profile: dict) -> Session:
    return Session(
        uid=profile["uid"],
        email=profile["email"],
        role=UserRole(profile["role"]),
        department=profile.get("department"),
        section=profile.get("section"),
        profile=profile,
    )


def make_user(users: UserService, email, role, name, department=None, section=None, roll_no=None, **extra) -> dict:
    """Account + profile without going through a provisioning session."""
    uid = users.identity.create_account(email, PASSWORD)
    profile = new_profile(uid, email, role, name, department, section, roll_no)
    profile.update(extra)
    users.create_profile(profile)
    return users.get_profile(uid)


@pytest.fixture(autouse=True)
def mongo():
    client = mongomock.MongoClient()
    reset_mongo_client(client)
    init_mongo_indexes()
    yield client
    reset_mongo_client()


@pytest.fixture
def users():
    return UserService(identity=IdentityService())


@pytest.fixture
def people(users):
    """One profile per interesting role, CSE department, section A."""
    return {
        "admin": make_user(users, "admin@college.edu", UserRole.admin, "Admin"),
        "placement_head": make_user(users, "placement@college.edu", UserRole.placement_head, "Placement Head"),
        "dept": make_user(users, "cse.hod@college.edu", UserRole.dept_coordinator, "CSE Coordinator", "CSE"),
        "class": make_user(
            users, "cse.a@college.edu", UserRole.class_coordinator, "CSE-A Coordinator", "CSE", "A"
        ),
        "student": make_user(
            users, "asha@college.edu", UserRole.student, "Asha", "CSE", "A", "21CS001",
            cgpa=7.5, tenth_mark=85, twelfth_mark=80, standing_arrears=0, history_of_arrears=0, year=4,
        ),
        "other_student": make_user(
            users, "ravi@college.edu", UserRole.student, "Ravi", "ECE", "B", "21EC042",
            cgpa=6.2, tenth_mark=70, twelfth_mark=68, standing_arrears=2, history_of_arrears=3, year=4,
        ),
    }


@pytest.fixture
def sessions(people):
    return {key: session_for(profile) for key, profile in people.items()}


@pytest.fixture
def client():
    from campus_portal.main import app
    return TestClient(app)


@pytest.fixture
def auth_headers(client, people):
    """Login helper: auth_headers('student') -> Authorization header dict."""
    def headers(key: str) -> dict:
        response = client.post(
            "/api/auth/login",
            json={"email": people[key]["email"], "password": PASSWORD}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}
    return headers
