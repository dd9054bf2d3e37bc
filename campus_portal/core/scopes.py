"""
Role scopes - one capability descriptor per role.

Instead of per-role screens, every route asks the session's Capability
what it may do and which records it may see:

    ADMIN              everything, all records
    PLACEMENT_HEAD     drives, placement ledger, department coordinators
    TRAINING_HEAD      trainings, department coordinators
    DEPT_COORDINATOR   approve + provision students in own department
    CLASS_COORDINATOR  approve + provision students in own section
    STUDENT            own profile only
"""

from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Optional

from campus_portal.core.errors import PermissionDeniedError
from campus_portal.schemas.schemas import UserRole


SCOPE_ALL = "all"
SCOPE_DEPARTMENT = "department"
SCOPE_SECTION = "section"
SCOPE_SELF = "self"


@dataclass(frozen=True)
class Capability:
    can_create_roles: FrozenSet[UserRole] = frozenset()
    can_manage_drives: bool = False
    can_manage_trainings: bool = False
    can_manage_records: bool = False
    can_approve: bool = False
    visible_scope: str = SCOPE_SELF


CAPABILITIES = {
    UserRole.admin: Capability(
        can_create_roles=frozenset(r for r in UserRole if r != UserRole.admin),
        can_manage_drives=True,
        can_manage_trainings=True,
        can_manage_records=True,
        can_approve=True,
        visible_scope=SCOPE_ALL,
    ),
    UserRole.placement_head: Capability(
        can_create_roles=frozenset({UserRole.dept_coordinator}),
        can_manage_drives=True,
        can_manage_records=True,
        visible_scope=SCOPE_ALL,
    ),
    UserRole.training_head: Capability(
        can_create_roles=frozenset({UserRole.dept_coordinator}),
        can_manage_trainings=True,
        visible_scope=SCOPE_ALL,
    ),
    UserRole.dept_coordinator: Capability(
        can_create_roles=frozenset({UserRole.class_coordinator, UserRole.student}),
        can_approve=True,
        visible_scope=SCOPE_DEPARTMENT,
    ),
    UserRole.class_coordinator: Capability(
        can_create_roles=frozenset({UserRole.student}),
        can_approve=True,
        visible_scope=SCOPE_SECTION,
    ),
    UserRole.student: Capability(visible_scope=SCOPE_SELF),
}


def capability_for(role: UserRole) -> Capability:
    return CAPABILITIES[UserRole(role)]


@dataclass
class Session:
    """
    The signed-in caller. Built once per request by core.auth and passed
    explicitly to everything that needs to know who is asking.
    """
    uid: str
    email: str
    role: UserRole
    department: Optional[str] = None
    section: Optional[str] = None
    profile: dict = field(default_factory=dict)

    @property
    def capability(self) -> Capability:
        return capability_for(self.role)

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.student


def require(session: Session, permission: str) -> None:
    """Raise PermissionDeniedError unless the session's capability grants it."""
    if not getattr(session.capability, permission):
        raise PermissionDeniedError(f"{session.role.value} may not perform this action")


def require_can_create(session: Session, role: UserRole) -> None:
    if role not in session.capability.can_create_roles:
        raise PermissionDeniedError(f"{session.role.value} may not create {UserRole(role).value} accounts")


def visible_scope_filter(session: Session) -> Callable[[dict], bool]:
    """Predicate over user profile documents: may this session see the record?"""
    scope = session.capability.visible_scope

    def predicate(record: dict) -> bool:
        if scope == SCOPE_ALL:
            return True
        if scope == SCOPE_SELF:
            return record.get("uid") == session.uid
        if record.get("department") != session.department:
            return False
        if scope == SCOPE_SECTION:
            return record.get("section") == session.section
        return True

    return predicate


def require_visible(session: Session, record: dict) -> None:
    if not visible_scope_filter(session)(record):
        raise PermissionDeniedError("Record is outside your scope")
