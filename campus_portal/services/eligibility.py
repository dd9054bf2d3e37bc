"""
Eligibility Service

PURPOSE:
Decide whether a student may apply to a drive (or join a training).

RULES (checked in this order, first failure wins):
1. CGPA              cgpa < min_cgpa
2. 10th mark         tenth_mark < sslc
3. 12th mark         twelfth_mark < hsc
4. Standing arrears  standing_arrears > backlogs_allowed
5. Arrear history    history_of_arrears > history_of_arrears_allowed (only if set)
6. Branch            department not in branches (only if branches is non-empty
                     and the student has a department)

Missing student numbers count as 0: a profile without marks is evaluated
as having none, not as exempt.

Everything here is pure: no store access, no session lookups, no raising.
Inputs may be plain dicts (stored documents) or pydantic models.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class EligibilityResult:
    eligible: bool
    reason: Optional[str] = None

    def as_dict(self) -> dict:
        return {"eligible": self.eligible, "reason": self.reason}


ELIGIBLE = EligibilityResult(eligible=True)


# ============================================================
# HELPERS
# ============================================================

def _read(source: Any, key: str) -> Any:
    """Field access for dicts and attribute-style objects alike."""
    if source is None:
        return None
    if isinstance(source, dict):
        return source.get(key)
    return getattr(source, key, None)


def _as_number(value: Any) -> float:
    """None, booleans, blanks and garbage all become 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number:  # NaN
        return 0.0
    return number


def _as_optional_number(value: Any) -> Optional[float]:
    if value is None:
        return None
    return _as_number(value)


def _branch_set(value: Any) -> set:
    if not value or isinstance(value, (str, bytes)):
        return set()
    try:
        return {str(b) for b in value if b}
    except TypeError:
        return set()


def _fmt(number: float) -> str:
    """8.0 -> "8", 7.5 -> "7.5"."""
    return f"{number:g}"


# ============================================================
# DRIVE ELIGIBILITY
# ============================================================

def evaluate(student: Any, criteria: Any) -> EligibilityResult:
    """
    Evaluate one student against one drive's eligibility criteria.

    Args:
        student: profile with cgpa, tenth_mark, twelfth_mark,
                 standing_arrears, history_of_arrears, department
        criteria: min_cgpa, sslc, hsc, backlogs_allowed,
                  history_of_arrears_allowed, branches

    Returns:
        EligibilityResult - reason names the first failed check
    """
    if student is None:
        return EligibilityResult(False, "Profile not loaded")

    cgpa = _as_number(_read(student, "cgpa"))
    tenth = _as_number(_read(student, "tenth_mark"))
    twelfth = _as_number(_read(student, "twelfth_mark"))
    arrears = _as_number(_read(student, "standing_arrears"))
    history = _as_number(_read(student, "history_of_arrears"))
    department = _read(student, "department")

    min_cgpa = _as_number(_read(criteria, "min_cgpa"))
    sslc = _as_number(_read(criteria, "sslc"))
    hsc = _as_number(_read(criteria, "hsc"))
    backlogs_allowed = _as_number(_read(criteria, "backlogs_allowed"))
    history_allowed = _as_optional_number(_read(criteria, "history_of_arrears_allowed"))
    branches = _branch_set(_read(criteria, "branches"))

    if cgpa < min_cgpa:
        return EligibilityResult(False, f"CGPA < {_fmt(min_cgpa)}")
    if tenth < sslc:
        return EligibilityResult(False, f"10th Mark < {_fmt(sslc)}%")
    if twelfth < hsc:
        return EligibilityResult(False, f"12th Mark < {_fmt(hsc)}%")
    if arrears > backlogs_allowed:
        return EligibilityResult(False, f"Arrears > {_fmt(backlogs_allowed)}")
    if history_allowed is not None and history > history_allowed:
        return EligibilityResult(False, f"History of arrears > {_fmt(history_allowed)}")
    if branches and department and str(department) not in branches:
        return EligibilityResult(False, "Dept mismatch")

    return ELIGIBLE


def is_eligible(student: Any, criteria: Any) -> bool:
    return evaluate(student, criteria).eligible


# ============================================================
# TRAINING ELIGIBILITY
# ============================================================

def evaluate_training(student: Any, eligibility: Any) -> EligibilityResult:
    """
    Branch membership (empty = all branches) and, when the training targets
    a year, an exact match on the student's current year.
    """
    if student is None:
        return EligibilityResult(False, "Profile not loaded")

    branches = _branch_set(_read(eligibility, "branches"))
    department = _read(student, "department")
    if branches and department and str(department) not in branches:
        return EligibilityResult(False, "Dept mismatch")

    target_year = _as_optional_number(_read(eligibility, "year"))
    if target_year:
        year = _as_number(_read(student, "year"))
        if year != target_year:
            return EligibilityResult(False, f"Open to year {_fmt(target_year)} only")

    return ELIGIBLE
