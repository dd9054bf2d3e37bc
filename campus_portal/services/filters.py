"""
Faceted list filters.

Each factory returns a pure predicate over one record, or None when the
filter is unset. apply_filters() ANDs whatever predicates it is given and
skips the Nones, so callers mix and match axes freely:

    apply_filters(
        students,
        eligibility_filter(drive["eligibility_criteria"], eligible=True),
        registration_filter(drive, RegistrationFilter.opted_in),
        field_equals("department", "CSE"),
    )

Predicates never mutate their record, so the order they run in does not
change the result.
"""

import logging
import re
from typing import Any, Callable, Iterable, List, Optional, Sequence

from campus_portal.schemas.schemas import RegistrationFilter, RegistrationStatus
from campus_portal.services.eligibility import is_eligible

logger = logging.getLogger(__name__)

Predicate = Callable[[dict], bool]

_NUMBER = re.compile(r"\d+(?:\.\d+)?")


# ============================================================
# COMPOSITION
# ============================================================

def apply_filters(records: Iterable[dict], *predicates: Optional[Predicate]) -> List[dict]:
    active = [p for p in predicates if p is not None]
    return [r for r in records if all(p(r) for p in active)]


# ============================================================
# ELIGIBILITY AXIS
# ============================================================

def eligibility_filter(criteria: Any, eligible: Optional[bool]) -> Optional[Predicate]:
    if eligible is None:
        return None
    return lambda student: is_eligible(student, criteria) == eligible


# ============================================================
# REGISTRATION-STATUS AXIS
# ============================================================

def registration_status(drive: dict, uid: str) -> RegistrationStatus:
    """
    Where does `uid` stand on this drive?

    A uid in both sets should never happen; it is logged for follow-up and
    reported as INCONSISTENT rather than raised.
    """
    opted_in = uid in (drive.get("applicants") or [])
    opted_out = uid in (drive.get("opted_out") or [])
    if opted_in and opted_out:
        logger.error(
            "Inconsistent membership: uid %s is both applicant and opted out of drive %s",
            uid, drive.get("id")
        )
        return RegistrationStatus.inconsistent
    if opted_in:
        return RegistrationStatus.opted_in
    if opted_out:
        return RegistrationStatus.opted_out
    return RegistrationStatus.not_registered


def registration_filter(drive: dict, status: Optional[RegistrationFilter]) -> Optional[Predicate]:
    if status is None or status == RegistrationFilter.all:
        return None
    wanted = RegistrationStatus(RegistrationFilter(status).value)
    return lambda student: registration_status(drive, student.get("uid")) == wanted


def participation_filter(training: dict, applied: Optional[bool]) -> Optional[Predicate]:
    """Training axis: registered (True) or not registered (False)."""
    if applied is None:
        return None
    participants = set(training.get("participants") or [])
    return lambda student: (student.get("uid") in participants) == applied


# ============================================================
# CATEGORICAL AXIS
# ============================================================

def field_equals(field: str, value: Any) -> Optional[Predicate]:
    if value is None or value == "":
        return None
    return lambda record: record.get(field) == value


# ============================================================
# NUMERIC THRESHOLD AXIS (drive search)
# ============================================================

def parse_salary(text: Any) -> float:
    """
    First number in a free-text package string.
    "10 LPA" -> 10.0, "CTC 4.5 - 6 LPA" -> 4.5, None / "TBD" -> 0.0
    """
    if text is None:
        return 0.0
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return float(text)
    match = _NUMBER.search(str(text))
    return float(match.group()) if match else 0.0


def min_salary_filter(min_salary: Any) -> Optional[Predicate]:
    if min_salary is None or str(min_salary).strip() == "":
        return None
    threshold = parse_salary(min_salary)
    return lambda drive: parse_salary(drive.get("salary")) >= threshold


# ============================================================
# TEXT SEARCH (ledger)
# ============================================================

def text_search_filter(term: Optional[str], fields: Sequence[str]) -> Optional[Predicate]:
    if not term or not term.strip():
        return None
    needle = term.strip().lower()
    return lambda record: any(needle in str(record.get(f) or "").lower() for f in fields)
