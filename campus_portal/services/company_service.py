"""
Company Service - placement drives and student membership.

A drive document keeps two uid sets:
    applicants  students who opted in
    opted_out   students who declined

A uid may be in at most one of them. opt_in / opt_out enforce that at the
write itself: the $addToSet only matches while the uid is absent from the
other set, so two racing requests cannot both succeed. A blocked transition
is rejected with MembershipConflictError; nothing is removed from the other
set on the student's behalf.
"""

import logging
from typing import List, Optional

from campus_portal.core.errors import MembershipConflictError, PortalValidationError
from campus_portal.db.mongodb import COLLECTIONS
from campus_portal.schemas.schemas import RegistrationStatus
from campus_portal.services.document_store import DocumentStore, dotted_updates
from campus_portal.services.eligibility import evaluate
from campus_portal.services.filters import apply_filters, field_equals, min_salary_filter, registration_status
from campus_portal.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)

APPLICANTS = "applicants"
OPTED_OUT = "opted_out"
CRITERIA = "eligibility_criteria"


class CompanyService:

    def __init__(self):
        self.store = DocumentStore(COLLECTIONS["companies"], "Drive")

    # --------------------------------------------------------
    # CRUD
    # --------------------------------------------------------

    def add_company(self, data: dict) -> str:
        doc = dict(data)
        doc[APPLICANTS] = []
        doc[OPTED_OUT] = []
        doc["created_at"] = utcnow()
        drive_id = self.store.create(doc)
        logger.info("Created drive %s (%s)", drive_id, data.get("name"))
        return drive_id

    def get_all_companies(self) -> List[dict]:
        return self.store.get_all(sort=[("drive_date", 1)])

    def get_company(self, drive_id: str) -> dict:
        return self.store.get_by_id(drive_id)

    def update_company(self, drive_id: str, updates: dict) -> dict:
        # Membership sets only change through opt_in / opt_out
        updates = {k: v for k, v in updates.items() if k not in (APPLICANTS, OPTED_OUT)}
        return self.store.update(drive_id, dotted_updates(updates, CRITERIA))

    def delete_company(self, drive_id: str) -> None:
        self.store.delete(drive_id)
        logger.info("Deleted drive %s", drive_id)

    def search(
        self,
        min_salary: Optional[str] = None,
        company_type: Optional[str] = None,
        target_year: Optional[int] = None,
    ) -> List[dict]:
        return apply_filters(
            self.get_all_companies(),
            min_salary_filter(min_salary),
            field_equals("type", company_type),
            field_equals("target_year", target_year),
        )

    # --------------------------------------------------------
    # Membership
    # --------------------------------------------------------

    def _join(self, drive_id: str, uid: str, field: str, other: str) -> dict:
        if self.store.add_to_set(drive_id, field, uid, unless_in=other):
            return self.get_company(drive_id)

        # Either the drive is gone (get_company raises NotFoundError) or the guard blocked us
        drive = self.get_company(drive_id)
        if registration_status(drive, uid) == RegistrationStatus.inconsistent:
            raise MembershipConflictError(
                "Registration state for this drive is inconsistent; contact the placement office"
            )
        action, current = ("opt in", "opted out of") if field == APPLICANTS else ("opt out", "opted in to")
        raise MembershipConflictError(f"Cannot {action}: already {current} drive '{drive.get('name')}'")

    @staticmethod
    def ensure_open(drive: dict) -> None:
        """Membership changes close with the drive's deadline."""
        deadline = as_utc(drive.get("deadline"))
        if deadline and deadline < utcnow():
            raise PortalValidationError(f"Drive '{drive.get('name')}' has expired")

    def ensure_can_apply(self, drive: dict, student: dict) -> None:
        """Deadline and eligibility gate in front of opt_in."""
        self.ensure_open(drive)
        result = evaluate(student, drive.get("eligibility_criteria"))
        if not result.eligible:
            raise PortalValidationError(f"Not eligible: {result.reason}")

    def opt_in(self, drive_id: str, uid: str) -> dict:
        """Idempotent: a second opt-in leaves one occurrence of uid."""
        drive = self._join(drive_id, uid, APPLICANTS, OPTED_OUT)
        logger.info("Student %s opted in to drive %s", uid, drive_id)
        return drive

    def opt_out(self, drive_id: str, uid: str) -> dict:
        drive = self._join(drive_id, uid, OPTED_OUT, APPLICANTS)
        logger.info("Student %s opted out of drive %s", uid, drive_id)
        return drive


def get_company_service() -> CompanyService:
    return CompanyService()
