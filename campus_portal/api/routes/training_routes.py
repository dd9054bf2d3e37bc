"""
Training Routes

POST /trainings - Create a training program
GET /trainings - List programs
GET /trainings/{id} - Get one program
PUT /trainings/{id} - Update a program
DELETE /trainings/{id} - Delete a program
POST /trainings/{id}/register - Student registers
GET /trainings/{id}/students - Students in scope with registration flag
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from campus_portal.core.auth import get_current_session, get_current_student, require_capability
from campus_portal.core.scopes import Session
from campus_portal.services.eligibility import evaluate_training
from campus_portal.services.filters import apply_filters, field_equals, participation_filter
from campus_portal.services.training_service import get_training_service
from campus_portal.services.user_service import get_user_service
from campus_portal.schemas.schemas import (
    TrainingCreate, TrainingUpdate, TrainingResponse, EligibilityResponse,
    StudentListEntry, UserResponse, CreatedResponse, MessageResponse
)

router = APIRouter(prefix="/trainings", tags=["Trainings"])


def to_training_response(training: dict, session: Session) -> TrainingResponse:
    response = TrainingResponse(
        **training,
        participant_count=len(training.get("participants") or []),
    )
    if session.is_student:
        response.registered = session.uid in (training.get("participants") or [])
        response.eligibility_result = EligibilityResponse(
            **evaluate_training(session.profile, training.get("eligibility")).as_dict()
        )
    return response


@router.post("", response_model=CreatedResponse, status_code=201)
async def create_training(
    data: TrainingCreate,
    session: Session = Depends(require_capability("can_manage_trainings"))
):
    training_id = get_training_service().add_training(data.model_dump())
    return CreatedResponse(id=training_id, message="Training created successfully")


@router.get("", response_model=List[TrainingResponse])
async def list_trainings(session: Session = Depends(get_current_session)):
    return [to_training_response(t, session) for t in get_training_service().get_all_trainings()]


@router.get("/{training_id}", response_model=TrainingResponse)
async def get_training(training_id: str, session: Session = Depends(get_current_session)):
    return to_training_response(get_training_service().get_training(training_id), session)


@router.put("/{training_id}", response_model=TrainingResponse)
async def update_training(
    training_id: str,
    data: TrainingUpdate,
    session: Session = Depends(require_capability("can_manage_trainings"))
):
    training = get_training_service().update_training(training_id, data.model_dump(exclude_unset=True))
    return to_training_response(training, session)


@router.delete("/{training_id}", response_model=MessageResponse)
async def delete_training(
    training_id: str,
    session: Session = Depends(require_capability("can_manage_trainings"))
):
    get_training_service().delete_training(training_id)
    return MessageResponse(message="Training deleted")


@router.post("/{training_id}/register", response_model=TrainingResponse)
async def register(training_id: str, session: Session = Depends(get_current_student)):
    """Register for a program. Registering twice is a no-op."""
    training = get_training_service().register(training_id, session.uid)
    return to_training_response(training, session)


@router.get("/{training_id}/students", response_model=List[StudentListEntry])
async def training_students(
    training_id: str,
    registered: Optional[bool] = Query(None),
    department: Optional[str] = Query(None),
    session: Session = Depends(get_current_session)
):
    training = get_training_service().get_training(training_id)
    participants = set(training.get("participants") or [])

    students = apply_filters(
        get_user_service().students_in_scope(session),
        participation_filter(training, registered),
        field_equals("department", department),
    )
    return [
        StudentListEntry(
            student=UserResponse(**s),
            eligibility=EligibilityResponse(**evaluate_training(s, training.get("eligibility")).as_dict()),
            registered=s["uid"] in participants,
        )
        for s in students
    ]
