"""
Dashboard Service - per-role summary counts and the event calendar.

Student counts honour the caller's visible scope; drives and trainings
are visible to every role.
"""

from typing import List, Optional

from campus_portal.core.scopes import Session
from campus_portal.schemas.schemas import ProfileStatus, PlacementStatus
from campus_portal.services.company_service import CompanyService
from campus_portal.services.training_service import TrainingService
from campus_portal.services.user_service import UserService
from campus_portal.utils.dates import as_utc, utcnow


class DashboardService:

    def __init__(
        self,
        users: Optional[UserService] = None,
        companies: Optional[CompanyService] = None,
        trainings: Optional[TrainingService] = None,
    ):
        self.users = users or UserService()
        self.companies = companies or CompanyService()
        self.trainings = trainings or TrainingService()

    def summary(self, session: Session) -> dict:
        students = self.users.students_in_scope(session)
        drives = self.companies.get_all_companies()
        now = utcnow()

        def count_status(field: str, value: str) -> int:
            return sum(1 for s in students if s.get(field) == value)

        return {
            "role": session.role,
            "students": len(students),
            "verified_students": count_status("profile_status", ProfileStatus.verified.value),
            "awaiting_approval": count_status("profile_status", ProfileStatus.approval_pending.value),
            "placed_students": count_status("placement_status", PlacementStatus.placed.value),
            "drives": len(drives),
            "upcoming_drives": sum(
                1 for d in drives if d.get("drive_date") and as_utc(d["drive_date"]) >= now
            ),
            "trainings": len(self.trainings.get_all_trainings()),
        }

    def calendar(self, session: Session) -> List[dict]:
        """Drive dates, drive deadlines and training start/end dates, oldest first."""
        events = []
        for drive in self.companies.get_all_companies():
            for field, kind in (("deadline", "drive_deadline"), ("drive_date", "drive")):
                if drive.get(field):
                    events.append({
                        "date": as_utc(drive[field]),
                        "kind": kind,
                        "title": drive.get("name", ""),
                        "ref_id": drive["id"],
                    })
        for training in self.trainings.get_all_trainings():
            for field, kind in (("start_date", "training_start"), ("end_date", "training_end")):
                if training.get(field):
                    events.append({
                        "date": as_utc(training[field]),
                        "kind": kind,
                        "title": training.get("title", ""),
                        "ref_id": training["id"],
                    })
        events.sort(key=lambda e: e["date"])
        return events


def get_dashboard_service() -> DashboardService:
    return DashboardService()
