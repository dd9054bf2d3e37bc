"""
User Routes

POST /users - Provision an account + profile (staff only)
GET /users - List profiles within the caller's scope
GET /users/export - Download visible students as .xlsx
POST /users/import - Bulk provision from a spreadsheet
PUT /users/me/profile - Student completes their profile
GET /users/{uid} - Get one profile
POST /users/{uid}/approve - Approve a completed student profile
POST /users/{uid}/decline - Send a completed profile back to the student
"""

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile
from typing import List, Optional

from campus_portal.core.auth import get_current_session, get_current_student
from campus_portal.core.scopes import Session
from campus_portal.services.bulk_import import import_users
from campus_portal.services.spreadsheet import XLSX_MEDIA_TYPE, export_rows
from campus_portal.services.user_service import get_user_service
from campus_portal.utils.file_upload import read_spreadsheet_upload
from campus_portal.schemas.schemas import (
    UserCreate, UserResponse, ProfileCompletion, UserRole, ProfileStatus,
    ImportReport, CreatedResponse, MessageResponse
)

router = APIRouter(prefix="/users", tags=["Users"])

STUDENT_EXPORT_COLUMNS = [
    "Name", "Email", "RollNo", "Department", "Section", "Year",
    "CGPA", "10th", "12th", "Arrears", "Status", "Placement",
]


@router.post("", response_model=CreatedResponse, status_code=201)
async def create_user(data: UserCreate, session: Session = Depends(get_current_session)):
    """
    Create an account and its profile.

    Department coordinators and class coordinators provision into their
    own department / section regardless of what the body says.
    """
    profile = get_user_service().provision(
        session,
        email=data.email,
        password=data.password,
        display_name=data.display_name,
        role=data.role,
        department=data.department,
        section=data.section,
        roll_no=data.roll_no,
    )
    return CreatedResponse(id=profile["uid"], message=f"{data.role.value} account created")


@router.get("", response_model=List[UserResponse])
async def list_users(
    role: Optional[UserRole] = Query(None),
    department: Optional[str] = Query(None),
    section: Optional[str] = Query(None),
    status: Optional[ProfileStatus] = Query(None),
    session: Session = Depends(get_current_session)
):
    """Profiles visible to the caller, optionally narrowed."""
    users = get_user_service().list_visible(session, role, department, section, status)
    return [UserResponse(**u) for u in users]


@router.get("/export")
async def export_students(
    department: Optional[str] = Query(None),
    section: Optional[str] = Query(None),
    session: Session = Depends(get_current_session)
):
    """Visible student profiles as a spreadsheet."""
    students = get_user_service().list_visible(session, UserRole.student, department, section)
    rows = [
        {
            "Name": s.get("display_name"),
            "Email": s.get("email"),
            "RollNo": s.get("roll_no"),
            "Department": s.get("department"),
            "Section": s.get("section"),
            "Year": s.get("year"),
            "CGPA": s.get("cgpa"),
            "10th": s.get("tenth_mark"),
            "12th": s.get("twelfth_mark"),
            "Arrears": s.get("standing_arrears"),
            "Status": s.get("profile_status"),
            "Placement": s.get("placement_status"),
        }
        for s in students
    ]
    content = export_rows(rows, sheet_name="Students", columns=STUDENT_EXPORT_COLUMNS)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="students.xlsx"'}
    )


@router.post("/import", response_model=ImportReport)
async def import_users_file(
    role: UserRole = Query(UserRole.student),
    file: UploadFile = File(...),
    session: Session = Depends(get_current_session)
):
    """
    Bulk-provision accounts of one role from an .xlsx/.xls/.csv file.

    Each row is reported as SUCCESS, SKIPPED (already registered) or
    FAILED (with the reason); one bad row never stops the batch.
    """
    rows = await read_spreadsheet_upload(file)
    return import_users(session, rows, role)


@router.put("/me/profile", response_model=UserResponse)
async def complete_profile(data: ProfileCompletion, session: Session = Depends(get_current_student)):
    """Submit academic details. The profile then waits for coordinator approval."""
    profile = get_user_service().complete_profile(session, data.model_dump(exclude_none=True))
    return UserResponse(**profile)


@router.get("/{uid}", response_model=UserResponse)
async def get_user(uid: str, session: Session = Depends(get_current_session)):
    return UserResponse(**get_user_service().get_visible(session, uid))


@router.post("/{uid}/approve", response_model=MessageResponse)
async def approve_user(uid: str, session: Session = Depends(get_current_session)):
    get_user_service().approve(session, uid)
    return MessageResponse(message="Profile verified")


@router.post("/{uid}/decline", response_model=MessageResponse)
async def decline_user(uid: str, session: Session = Depends(get_current_session)):
    get_user_service().decline(session, uid)
    return MessageResponse(message="Profile sent back for changes")
