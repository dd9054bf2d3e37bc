"""
Placement Record Service - the placement ledger.

Records are denormalized (student name, roll number, department, company,
package, academic year) and exist for reporting. The only link back to
profiles is the roll number: adding a record marks matching students
PLACED, deleting the last record for a roll number reverts them to
UNPLACED. No match is fine.
"""

import logging
import re
from typing import List, Optional

from campus_portal.core.config import get_settings
from campus_portal.core.errors import PortalValidationError
from campus_portal.db.mongodb import COLLECTIONS
from campus_portal.schemas.schemas import PlacementStatus
from campus_portal.services.document_store import DocumentStore
from campus_portal.services.filters import apply_filters, text_search_filter
from campus_portal.services.user_service import UserService, normalize_roll_no
from campus_portal.utils.dates import utcnow

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "roll_no", "company_name")
EXPORT_COLUMNS = ["Name", "RollNo", "Department", "Company", "Package", "Year"]


def validate_roll_no(roll_no: Optional[str]) -> str:
    """Normalized roll number, or PortalValidationError for a malformed one."""
    normalized = normalize_roll_no(roll_no)
    if not normalized or not re.fullmatch(get_settings().roll_number_pattern, normalized):
        raise PortalValidationError(f"Invalid roll number format: '{roll_no or ''}'")
    return normalized


def current_academic_year() -> str:
    return str(utcnow().year)


class PlacementRecordService:

    def __init__(self, users: Optional[UserService] = None):
        self.store = DocumentStore(COLLECTIONS["placement_records"], "Placement record")
        self.users = users or UserService()

    def build_record(self, data: dict) -> dict:
        """Validated document, ready to store. Raises before anything is written."""
        return {
            "name": data["name"].strip(),
            "roll_no": validate_roll_no(data.get("roll_no")),
            "department": data["department"].strip(),
            "company_name": data["company_name"].strip(),
            "package": (data.get("package") or "").strip(),
            "academic_year": data.get("academic_year") or current_academic_year(),
            "created_at": utcnow(),
        }

    def add_record(self, data: dict) -> str:
        record = self.build_record(data)
        record_id = self.store.create(record)
        self.users.set_placement_status_by_roll_no(record["roll_no"], PlacementStatus.placed)
        logger.info("Placement record %s: %s -> %s", record_id, record["roll_no"], record["company_name"])
        return record_id

    def insert_built(self, record: dict) -> str:
        """Store a record produced by build_record (bulk import path)."""
        record_id = self.store.create(record)
        self.users.set_placement_status_by_roll_no(record["roll_no"], PlacementStatus.placed)
        return record_id

    def list_records(self, search: Optional[str] = None) -> List[dict]:
        records = self.store.get_all(sort=[("created_at", -1)])
        return apply_filters(records, text_search_filter(search, SEARCH_FIELDS))

    def records_by_roll_no(self, roll_no: str) -> List[dict]:
        return self.store.get_all({"roll_no": normalize_roll_no(roll_no)}, sort=[("created_at", -1)])

    def delete_record(self, record_id: str) -> None:
        record = self.store.get_by_id(record_id)
        self.store.delete(record_id)

        remaining = self.records_by_roll_no(record["roll_no"])
        if not remaining:
            self.users.set_placement_status_by_roll_no(record["roll_no"], PlacementStatus.unplaced)
        logger.info("Deleted placement record %s (%d left for %s)", record_id, len(remaining), record["roll_no"])

    def existing_keys(self) -> set:
        """(roll_no, lower-cased company) pairs already in the ledger."""
        return {
            (r["roll_no"], r["company_name"].strip().lower())
            for r in self.store.get_all()
        }

    @staticmethod
    def export_view(records: List[dict]) -> List[dict]:
        return [
            {
                "Name": r.get("name"),
                "RollNo": r.get("roll_no"),
                "Department": r.get("department"),
                "Company": r.get("company_name"),
                "Package": r.get("package"),
                "Year": r.get("academic_year"),
            }
            for r in records
        ]


def get_placement_record_service() -> PlacementRecordService:
    return PlacementRecordService()
