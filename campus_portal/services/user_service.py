"""
User Service - profiles for all six roles.

One `users` collection keyed by uid. Profiles are never hard-deleted.

Lifecycle (students):
    PENDING  --complete_profile-->  APPROVAL_PENDING  --approve-->  VERIFIED
                                          |
                                          +--decline--> PENDING
Staff profiles are created VERIFIED.
"""

import logging
from typing import List, Optional

from campus_portal.core.errors import PortalError, PortalValidationError, PermissionDeniedError
from campus_portal.core.scopes import (
    SCOPE_DEPARTMENT, SCOPE_SECTION, Session, require, require_can_create, require_visible, visible_scope_filter
)
from campus_portal.db.mongodb import COLLECTIONS
from campus_portal.schemas.schemas import UserRole, ProfileStatus, PlacementStatus
from campus_portal.services.document_store import DocumentStore
from campus_portal.services.filters import apply_filters, field_equals
from campus_portal.services.identity_service import IdentityService, normalize_email
from campus_portal.utils.dates import utcnow

logger = logging.getLogger(__name__)


def normalize_roll_no(roll_no: Optional[str]) -> Optional[str]:
    if roll_no is None:
        return None
    return str(roll_no).strip().upper() or None


def new_profile(
    uid: str,
    email: str,
    role: UserRole,
    display_name: str,
    department: Optional[str] = None,
    section: Optional[str] = None,
    roll_no: Optional[str] = None,
) -> dict:
    """Initial profile document for a freshly provisioned account."""
    role = UserRole(role)
    is_student = role == UserRole.student
    profile = {
        "uid": uid,
        "email": email,
        "role": role.value,
        "display_name": display_name,
        "department": department or None,
        "section": section.upper() if section else None,
        "roll_no": normalize_roll_no(roll_no),
        "profile_completed": not is_student,
        "profile_status": (ProfileStatus.pending if is_student else ProfileStatus.verified).value,
        "created_at": utcnow(),
    }
    if is_student:
        profile["placement_status"] = PlacementStatus.unplaced.value
    return profile


class UserService:

    def __init__(self, identity: Optional[IdentityService] = None):
        self.store = DocumentStore(COLLECTIONS["users"], "User")
        self.identity = identity or IdentityService()

    # --------------------------------------------------------
    # Reads
    # --------------------------------------------------------

    def get_profile(self, uid: str) -> dict:
        return self.store.get_by_id(uid)

    def get_users_by_role(self, role: UserRole) -> List[dict]:
        return self.store.get_all({"role": UserRole(role).value}, sort=[("display_name", 1)])

    def list_visible(
        self,
        session: Session,
        role: Optional[UserRole] = None,
        department: Optional[str] = None,
        section: Optional[str] = None,
        status: Optional[ProfileStatus] = None,
    ) -> List[dict]:
        """Profiles the session may see, narrowed by optional facets."""
        query = {"role": UserRole(role).value} if role else {}
        users = self.store.get_all(query, sort=[("display_name", 1)])
        return apply_filters(
            users,
            visible_scope_filter(session),
            field_equals("department", department),
            field_equals("section", section.upper() if section else None),
            field_equals("profile_status", ProfileStatus(status).value if status else None),
        )

    def get_visible(self, session: Session, uid: str) -> dict:
        profile = self.get_profile(uid)
        require_visible(session, profile)
        return profile

    def students_in_scope(self, session: Session) -> List[dict]:
        return self.list_visible(session, role=UserRole.student)

    # --------------------------------------------------------
    # Provisioning
    # --------------------------------------------------------

    def create_profile(self, profile: dict) -> str:
        return self.store.create(profile, doc_id=profile["uid"])

    def create_account_with_profile(
        self,
        email: str,
        password: str,
        display_name: str,
        role: UserRole,
        department: Optional[str] = None,
        section: Optional[str] = None,
        roll_no: Optional[str] = None,
    ) -> dict:
        """
        Account first, then the profile under the same uid. If the profile
        write fails the account is deleted again, so the e-mail stays free
        for a retry.
        """
        uid = self.identity.create_account(email, password)
        profile = new_profile(uid, normalize_email(email), role, display_name, department, section, roll_no)
        try:
            self.create_profile(profile)
        except PortalError:
            logger.warning("Profile write for %s failed, removing account %s", profile["email"], uid)
            self.identity.delete_account(uid)
            raise
        return profile

    def provision(
        self,
        session: Session,
        email: str,
        password: str,
        display_name: str,
        role: UserRole,
        department: Optional[str] = None,
        section: Optional[str] = None,
        roll_no: Optional[str] = None,
    ) -> dict:
        """
        Create account + profile on behalf of a staff member.

        Coordinators can only provision into their own department (and
        section, for class coordinators); those fields are forced from the
        session rather than trusted from input.
        """
        role = UserRole(role)
        require_can_create(session, role)

        scope = session.capability.visible_scope
        if scope in (SCOPE_DEPARTMENT, SCOPE_SECTION):
            department = session.department
        if scope == SCOPE_SECTION:
            section = session.section
        if role in (UserRole.dept_coordinator, UserRole.class_coordinator, UserRole.student) and not department:
            raise PortalValidationError(f"{role.value} accounts need a department")

        profile = self.create_account_with_profile(
            email, password, display_name, role, department, section, roll_no
        )
        logger.info("%s %s provisioned %s %s", session.role.value, session.uid, role.value, profile["uid"])
        return profile

    # --------------------------------------------------------
    # Lifecycle
    # --------------------------------------------------------

    def complete_profile(self, session: Session, data: dict) -> dict:
        """Student submits academic details; awaits coordinator approval."""
        if not session.is_student:
            raise PermissionDeniedError("Only students complete a profile")
        if session.profile.get("profile_status") == ProfileStatus.verified.value:
            raise PortalValidationError("Profile is already verified")

        updates = dict(data)
        updates["profile_completed"] = True
        updates["profile_status"] = ProfileStatus.approval_pending.value
        return self.store.update(session.uid, updates)

    def approve(self, session: Session, uid: str) -> dict:
        require(session, "can_approve")
        profile = self.get_visible(session, uid)
        if profile.get("profile_status") != ProfileStatus.approval_pending.value:
            raise PortalValidationError("Only profiles awaiting approval can be approved")
        logger.info("%s approved profile %s", session.uid, uid)
        return self.store.update(uid, {"profile_status": ProfileStatus.verified.value})

    def decline(self, session: Session, uid: str) -> dict:
        require(session, "can_approve")
        profile = self.get_visible(session, uid)
        if profile.get("profile_status") != ProfileStatus.approval_pending.value:
            raise PortalValidationError("Only profiles awaiting approval can be declined")
        logger.info("%s declined profile %s", session.uid, uid)
        return self.store.update(uid, {
            "profile_status": ProfileStatus.pending.value,
            "profile_completed": False,
        })

    def set_placement_status_by_roll_no(self, roll_no: str, status: PlacementStatus) -> int:
        """Best-effort: no matching profile is not an error."""
        roll_no = normalize_roll_no(roll_no)
        if not roll_no:
            return 0
        updated = self.store.update_many(
            {"roll_no": roll_no, "role": UserRole.student.value},
            {"placement_status": PlacementStatus(status).value}
        )
        if updated == 0:
            logger.info("No student profile matched roll number %s", roll_no)
        return updated


def get_user_service() -> UserService:
    return UserService()
