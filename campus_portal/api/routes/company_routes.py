"""
Drive (Company) Routes

POST /drives - Create a placement drive
GET /drives - List / search drives (min_salary, type, target_year)
GET /drives/{id} - Get one drive
PUT /drives/{id} - Update a drive
DELETE /drives/{id} - Delete a drive
POST /drives/{id}/opt-in - Student applies
POST /drives/{id}/opt-out - Student declines
GET /drives/{id}/eligibility - Eligibility of the calling student
GET /drives/{id}/students - Faceted student list for the drive
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from campus_portal.core.auth import get_current_session, get_current_student, require_capability
from campus_portal.core.scopes import Session
from campus_portal.services.company_service import get_company_service
from campus_portal.services.eligibility import evaluate
from campus_portal.services.filters import apply_filters, eligibility_filter, field_equals, registration_filter, registration_status
from campus_portal.services.user_service import get_user_service
from campus_portal.schemas.schemas import (
    CompanyCreate, CompanyUpdate, CompanyResponse, EligibilityResponse, EligibilityFilter,
    RegistrationFilter, StudentListEntry, UserResponse, CreatedResponse, MessageResponse
)

router = APIRouter(prefix="/drives", tags=["Drives"])


def to_company_response(drive: dict, session: Session) -> CompanyResponse:
    """Stored drive -> API shape. Students also get their own standing."""
    response = CompanyResponse(
        **drive,
        applicant_count=len(drive.get("applicants") or []),
        opted_out_count=len(drive.get("opted_out") or []),
    )
    if session.is_student:
        response.registration_status = registration_status(drive, session.uid)
        response.eligibility = EligibilityResponse(
            **evaluate(session.profile, drive.get("eligibility_criteria")).as_dict()
        )
    return response


@router.post("", response_model=CreatedResponse, status_code=201)
async def create_drive(data: CompanyCreate, session: Session = Depends(require_capability("can_manage_drives"))):
    drive_id = get_company_service().add_company(data.model_dump())
    return CreatedResponse(id=drive_id, message="Drive created successfully")


@router.get("", response_model=List[CompanyResponse])
async def list_drives(
    min_salary: Optional[str] = Query(None, description="e.g. '6' or '6 LPA'"),
    type: Optional[str] = Query(None),
    target_year: Optional[int] = Query(None),
    session: Session = Depends(get_current_session)
):
    """All drives, filtered by the optional search facets."""
    drives = get_company_service().search(min_salary, type, target_year)
    return [to_company_response(d, session) for d in drives]


@router.get("/{drive_id}", response_model=CompanyResponse)
async def get_drive(drive_id: str, session: Session = Depends(get_current_session)):
    return to_company_response(get_company_service().get_company(drive_id), session)


@router.put("/{drive_id}", response_model=CompanyResponse)
async def update_drive(
    drive_id: str,
    data: CompanyUpdate,
    session: Session = Depends(require_capability("can_manage_drives"))
):
    """Update a drive. Only provided fields are updated."""
    drive = get_company_service().update_company(drive_id, data.model_dump(exclude_unset=True))
    return to_company_response(drive, session)


@router.delete("/{drive_id}", response_model=MessageResponse)
async def delete_drive(drive_id: str, session: Session = Depends(require_capability("can_manage_drives"))):
    get_company_service().delete_company(drive_id)
    return MessageResponse(message="Drive deleted")


@router.post("/{drive_id}/opt-in", response_model=CompanyResponse)
async def opt_in(drive_id: str, session: Session = Depends(get_current_student)):
    """
    Apply to a drive. Rejected when the deadline has passed, the student is
    not eligible, or the student already opted out.
    """
    service = get_company_service()
    service.ensure_can_apply(service.get_company(drive_id), session.profile)
    return to_company_response(service.opt_in(drive_id, session.uid), session)


@router.post("/{drive_id}/opt-out", response_model=CompanyResponse)
async def opt_out(drive_id: str, session: Session = Depends(get_current_student)):
    """Decline a drive. Rejected when the student already opted in."""
    service = get_company_service()
    service.ensure_open(service.get_company(drive_id))
    return to_company_response(service.opt_out(drive_id, session.uid), session)


@router.get("/{drive_id}/eligibility", response_model=EligibilityResponse)
async def check_eligibility(drive_id: str, session: Session = Depends(get_current_student)):
    drive = get_company_service().get_company(drive_id)
    return EligibilityResponse(**evaluate(session.profile, drive.get("eligibility_criteria")).as_dict())


@router.get("/{drive_id}/students", response_model=List[StudentListEntry])
async def drive_students(
    drive_id: str,
    eligibility: Optional[EligibilityFilter] = Query(None),
    status: RegistrationFilter = Query(RegistrationFilter.all),
    department: Optional[str] = Query(None),
    session: Session = Depends(get_current_session)
):
    """
    Students in the caller's scope, annotated with eligibility and
    registration status for this drive. Filters combine with AND.
    """
    drive = get_company_service().get_company(drive_id)
    criteria = drive.get("eligibility_criteria")
    wanted = None if eligibility is None else eligibility == EligibilityFilter.eligible

    students = apply_filters(
        get_user_service().students_in_scope(session),
        eligibility_filter(criteria, wanted),
        registration_filter(drive, status),
        field_equals("department", department),
    )
    return [
        StudentListEntry(
            student=UserResponse(**s),
            eligibility=EligibilityResponse(**evaluate(s, criteria).as_dict()),
            registration_status=registration_status(drive, s["uid"]),
        )
        for s in students
    ]
