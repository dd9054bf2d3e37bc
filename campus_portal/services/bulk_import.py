"""
Bulk Import Service

Turns parsed spreadsheet rows into accounts/profiles or ledger entries,
one row at a time, and reports what happened to each row:

    SUCCESS  created
    SKIPPED  already exists (pre-check hit, or the store rejected a duplicate)
    FAILED   bad row or store error; the reason is kept and the batch goes on

A file missing a required column is rejected up front and nothing is
attempted.

Duplicate detection is one pre-check (query what already exists) plus one
authoritative path (the identity provider / ledger rejects the duplicate).
"""

import logging
from typing import Dict, List, Optional, Sequence

from campus_portal.core.config import get_settings
from campus_portal.core.errors import DuplicateAccountError, PortalError, PortalValidationError
from campus_portal.core.scopes import Session, require, require_can_create
from campus_portal.schemas.schemas import ImportOutcome, ImportReport, ImportRowResult, UserRole
from campus_portal.services.identity_service import normalize_email
from campus_portal.services.placement_record_service import PlacementRecordService
from campus_portal.services.spreadsheet import missing_columns, pick
from campus_portal.services.user_service import UserService

logger = logging.getLogger(__name__)


# ============================================================
# COLUMN ALIASES (normalized: lower-case, no spaces/underscores/dots)
# ============================================================

EMAIL = ("email", "username")
PASSWORD = ("password",)
NAME = ("displayname", "name", "studentname", "fullname")
SECTION = ("section",)
DEPARTMENT = ("department", "dept", "branch")
ROLL_NO = ("rollno", "regno", "rollnumber", "registernumber")
COMPANY = ("company", "companyname", "placedin")
PACKAGE = ("package", "ctc", "salary")
ACADEMIC_YEAR = ("academicyear", "year")

STUDENT_COLUMNS = {
    "email or username": EMAIL,
    "password": PASSWORD,
    "displayName or name": NAME,
    "section": SECTION,
}
STAFF_COLUMNS = {
    "email or username": EMAIL,
}
RECORD_COLUMNS = {
    "name": NAME,
    "roll number": ROLL_NO,
    "department": DEPARTMENT,
    "company": COMPANY,
}


class ImportTally:
    """Accumulates per-row outcomes into an ImportReport."""

    def __init__(self, total: int):
        self.report = ImportReport(total=total)

    def add(self, row: int, key: str, status: ImportOutcome, message: str = "") -> None:
        self.report.rows.append(ImportRowResult(row=row, key=key, status=status, message=message))
        if status == ImportOutcome.success:
            self.report.success += 1
        elif status == ImportOutcome.skipped:
            self.report.skipped += 1
        else:
            self.report.failed += 1


def check_columns(rows: List[Dict[str, str]], required: Dict[str, Sequence[str]]) -> None:
    if not rows:
        raise PortalValidationError("The uploaded file is empty.")
    missing = missing_columns(rows[0].keys(), required)
    if missing:
        raise PortalValidationError(
            f"The following required columns are missing: {', '.join(missing)}. "
            "Please ensure your file matches the required format."
        )


# ============================================================
# USERS
# ============================================================

def import_users(
    session: Session,
    rows: List[Dict[str, str]],
    role: UserRole,
    users: Optional[UserService] = None,
) -> ImportReport:
    """
    Provision one account + profile per row.

    Students need email/username, password, name and section columns;
    staff rows only need email/username (password falls back to the
    configured default).
    """
    role = UserRole(role)
    require_can_create(session, role)
    check_columns(rows, STUDENT_COLUMNS if role == UserRole.student else STAFF_COLUMNS)

    users = users or UserService()
    default_password = get_settings().default_import_password
    existing = users.identity.existing_emails(pick(r, EMAIL) for r in rows)
    tally = ImportTally(total=len(rows))
    seen = set()

    # Row numbers are 1-based spreadsheet data rows (header excluded)
    for index, row in enumerate(rows, start=1):
        email = normalize_email(pick(row, EMAIL))
        if not email:
            tally.add(index, "", ImportOutcome.failed, "Missing email")
            continue
        if email in existing or email in seen:
            tally.add(index, email, ImportOutcome.skipped, "Already registered")
            continue

        try:
            users.provision(
                session,
                email=email,
                password=pick(row, PASSWORD) or default_password,
                display_name=pick(row, NAME) or ("Student" if role == UserRole.student else "User"),
                role=role,
                department=pick(row, DEPARTMENT) or None,
                section=pick(row, SECTION) or None,
                roll_no=pick(row, ROLL_NO) or None,
            )
            tally.add(index, email, ImportOutcome.success, "Created")
            seen.add(email)
        except DuplicateAccountError:
            tally.add(index, email, ImportOutcome.skipped, "Email already in use")
            seen.add(email)
        except PortalError as e:
            logger.warning("Import row %d (%s) failed: %s", index, email, e.detail)
            tally.add(index, email, ImportOutcome.failed, e.detail)

    report = tally.report
    logger.info(
        "User import by %s: %d total, %d created, %d skipped, %d failed",
        session.uid, report.total, report.success, report.skipped, report.failed
    )
    return report


# ============================================================
# PLACEMENT RECORDS
# ============================================================

def import_placement_records(
    session: Session,
    rows: List[Dict[str, str]],
    records: Optional[PlacementRecordService] = None,
) -> ImportReport:
    require(session, "can_manage_records")
    check_columns(rows, RECORD_COLUMNS)

    records = records or PlacementRecordService()
    existing = records.existing_keys()
    tally = ImportTally(total=len(rows))

    for index, row in enumerate(rows, start=1):
        data = {
            "name": pick(row, NAME),
            "roll_no": pick(row, ROLL_NO),
            "department": pick(row, DEPARTMENT),
            "company_name": pick(row, COMPANY),
            "package": pick(row, PACKAGE),
            "academic_year": pick(row, ACADEMIC_YEAR) or None,
        }
        key = data["roll_no"] or f"row {index}"
        if not all((data["name"], data["roll_no"], data["department"], data["company_name"])):
            tally.add(index, key, ImportOutcome.failed, "Missing required fields")
            continue

        try:
            record = records.build_record(data)
            dedupe_key = (record["roll_no"], record["company_name"].lower())
            if dedupe_key in existing:
                tally.add(index, record["roll_no"], ImportOutcome.skipped, "Record already exists")
                continue
            records.insert_built(record)
            existing.add(dedupe_key)
            tally.add(index, record["roll_no"], ImportOutcome.success, "Created")
        except PortalError as e:
            logger.warning("Record import row %d (%s) failed: %s", index, key, e.detail)
            tally.add(index, key, ImportOutcome.failed, e.detail)

    report = tally.report
    logger.info(
        "Placement record import by %s: %d total, %d created, %d skipped, %d failed",
        session.uid, report.total, report.success, report.skipped, report.failed
    )
    return report
