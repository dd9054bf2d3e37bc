"""
Dashboard Routes

GET /dashboard/summary - Counts for the caller's scope
GET /dashboard/calendar - Drive and training dates, oldest first
"""

from fastapi import APIRouter, Depends
from typing import List

from campus_portal.core.auth import get_current_session
from campus_portal.core.scopes import Session
from campus_portal.services.dashboard_service import get_dashboard_service
from campus_portal.schemas.schemas import DashboardSummary, CalendarEvent

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/summary", response_model=DashboardSummary)
async def summary(session: Session = Depends(get_current_session)):
    return DashboardSummary(**get_dashboard_service().summary(session))


@router.get("/calendar", response_model=List[CalendarEvent])
async def calendar(session: Session = Depends(get_current_session)):
    return [CalendarEvent(**e) for e in get_dashboard_service().calendar(session)]
