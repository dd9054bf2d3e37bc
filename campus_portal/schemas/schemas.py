"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    admin = "ADMIN"
    placement_head = "PLACEMENT_HEAD"
    training_head = "TRAINING_HEAD"
    dept_coordinator = "DEPT_COORDINATOR"
    class_coordinator = "CLASS_COORDINATOR"
    student = "STUDENT"


class ProfileStatus(str, Enum):
    pending = "PENDING"
    approval_pending = "APPROVAL_PENDING"
    verified = "VERIFIED"


class PlacementStatus(str, Enum):
    placed = "PLACED"
    unplaced = "UNPLACED"


class RegistrationStatus(str, Enum):
    opted_in = "opted_in"
    opted_out = "opted_out"
    not_registered = "not_registered"
    inconsistent = "inconsistent"


class RegistrationFilter(str, Enum):
    all = "all"
    opted_in = "opted_in"
    opted_out = "opted_out"
    not_registered = "not_registered"


class EligibilityFilter(str, Enum):
    eligible = "eligible"
    not_eligible = "not_eligible"


class ImportOutcome(str, Enum):
    success = "SUCCESS"
    skipped = "SKIPPED"
    failed = "FAILED"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    uid: str
    role: UserRole
    profile_completed: bool


# ============================================================
# USER / PROFILE SCHEMAS
# ============================================================

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    display_name: str = Field(..., min_length=1, max_length=100)
    role: UserRole
    department: Optional[str] = None
    section: Optional[str] = None
    roll_no: Optional[str] = None

    @field_validator("section", "roll_no")
    @classmethod
    def upper(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().upper() if value else value


class ProfileCompletion(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=100)
    phone: str
    address: str
    cgpa: float = Field(..., ge=0, le=10)
    tenth_mark: float = Field(..., ge=0, le=100)
    twelfth_mark: float = Field(..., ge=0, le=100)
    standing_arrears: int = Field(..., ge=0)
    history_of_arrears: int = Field(..., ge=0)
    year: Optional[int] = Field(None, ge=1, le=5)


class UserResponse(BaseModel):
    uid: str
    email: str
    role: UserRole
    display_name: str
    department: Optional[str] = None
    section: Optional[str] = None
    roll_no: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    year: Optional[int] = None
    cgpa: Optional[float] = None
    tenth_mark: Optional[float] = None
    twelfth_mark: Optional[float] = None
    standing_arrears: Optional[int] = None
    history_of_arrears: Optional[int] = None
    profile_completed: bool = False
    profile_status: ProfileStatus = ProfileStatus.pending
    placement_status: Optional[PlacementStatus] = None
    created_at: Optional[datetime] = None


# ============================================================
# DRIVE (COMPANY) SCHEMAS
# ============================================================

class EligibilityCriteria(BaseModel):
    """Thresholds a drive sets. Input accepts snake_case or the camelCase names."""

    min_cgpa: float = Field(0, ge=0, le=10, validation_alias=AliasChoices("min_cgpa", "minCGPA"))
    sslc: float = Field(0, ge=0, le=100)
    hsc: float = Field(0, ge=0, le=100)
    backlogs_allowed: int = Field(
        0, ge=0, validation_alias=AliasChoices("backlogs_allowed", "backlogsAllowed")
    )
    history_of_arrears_allowed: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("history_of_arrears_allowed", "historyOfArrears")
    )
    branches: List[str] = []


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    roles: List[str] = []
    type: Optional[str] = None
    target_year: Optional[int] = Field(None, ge=2000, le=2100)
    salary: Optional[str] = None
    eligibility_criteria: EligibilityCriteria = EligibilityCriteria()
    deadline: Optional[datetime] = None
    drive_date: Optional[datetime] = None
    rounds: List[str] = []
    requirements: Optional[str] = None

class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    roles: Optional[List[str]] = None
    type: Optional[str] = None
    target_year: Optional[int] = Field(None, ge=2000, le=2100)
    salary: Optional[str] = None
    eligibility_criteria: Optional[EligibilityCriteria] = None
    deadline: Optional[datetime] = None
    drive_date: Optional[datetime] = None
    rounds: Optional[List[str]] = None
    requirements: Optional[str] = None

class EligibilityResponse(BaseModel):
    eligible: bool
    reason: Optional[str] = None

class CompanyResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    roles: List[str] = []
    type: Optional[str] = None
    target_year: Optional[int] = None
    salary: Optional[str] = None
    eligibility_criteria: EligibilityCriteria
    deadline: Optional[datetime] = None
    drive_date: Optional[datetime] = None
    rounds: List[str] = []
    requirements: Optional[str] = None
    applicant_count: int = 0
    opted_out_count: int = 0
    # Only filled in for student callers
    registration_status: Optional[RegistrationStatus] = None
    eligibility: Optional[EligibilityResponse] = None
    created_at: Optional[datetime] = None


class StudentListEntry(BaseModel):
    student: UserResponse
    eligibility: Optional[EligibilityResponse] = None
    registration_status: Optional[RegistrationStatus] = None
    registered: Optional[bool] = None


# ============================================================
# TRAINING SCHEMAS
# ============================================================

class TrainingEligibility(BaseModel):
    branches: List[str] = []
    year: Optional[int] = Field(None, ge=1, le=5)

class TrainingCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=200)
    trainer: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    eligibility: TrainingEligibility = TrainingEligibility()

class TrainingUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    trainer: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    eligibility: Optional[TrainingEligibility] = None

class TrainingResponse(BaseModel):
    id: str
    title: str
    trainer: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    eligibility: TrainingEligibility
    participant_count: int = 0
    registered: Optional[bool] = None
    eligibility_result: Optional[EligibilityResponse] = None
    created_at: Optional[datetime] = None


# ============================================================
# PLACEMENT RECORD SCHEMAS
# ============================================================

class PlacementRecordCreate(BaseModel):
    name: str = Field(..., min_length=1)
    roll_no: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    company_name: str = Field(..., min_length=1)
    package: Optional[str] = None
    academic_year: Optional[str] = None

class PlacementRecordResponse(BaseModel):
    id: str
    name: str
    roll_no: str
    department: str
    company_name: str
    package: Optional[str] = None
    academic_year: str
    created_at: datetime


# ============================================================
# BULK IMPORT SCHEMAS
# ============================================================

class ImportRowResult(BaseModel):
    row: int
    key: str
    status: ImportOutcome
    message: str = ""

class ImportReport(BaseModel):
    total: int = 0
    success: int = 0
    skipped: int = 0
    failed: int = 0
    rows: List[ImportRowResult] = []


# ============================================================
# DASHBOARD SCHEMAS
# ============================================================

class DashboardSummary(BaseModel):
    role: UserRole
    students: int
    verified_students: int
    awaiting_approval: int
    placed_students: int
    drives: int
    upcoming_drives: int
    trainings: int

class CalendarEvent(BaseModel):
    date: datetime
    kind: str
    title: str
    ref_id: str


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class CreatedResponse(BaseModel):
    id: str
    message: str
