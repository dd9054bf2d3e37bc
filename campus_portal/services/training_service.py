"""
Training Service - training programs and their participant sets.
"""

import logging
from typing import List

from campus_portal.core.errors import PortalValidationError
from campus_portal.db.mongodb import COLLECTIONS
from campus_portal.services.document_store import DocumentStore, dotted_updates
from campus_portal.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)

PARTICIPANTS = "participants"
ELIGIBILITY = "eligibility"


def _check_dates(data: dict) -> None:
    start, end = as_utc(data.get("start_date")), as_utc(data.get("end_date"))
    if start and end and end < start:
        raise PortalValidationError("Training cannot end before it starts")


class TrainingService:

    def __init__(self):
        self.store = DocumentStore(COLLECTIONS["trainings"], "Training")

    def add_training(self, data: dict) -> str:
        _check_dates(data)
        doc = dict(data)
        doc[PARTICIPANTS] = []
        doc["created_at"] = utcnow()
        training_id = self.store.create(doc)
        logger.info("Created training %s (%s)", training_id, data.get("title"))
        return training_id

    def get_all_trainings(self) -> List[dict]:
        return self.store.get_all(sort=[("start_date", 1)])

    def get_training(self, training_id: str) -> dict:
        return self.store.get_by_id(training_id)

    def update_training(self, training_id: str, updates: dict) -> dict:
        updates = {k: v for k, v in updates.items() if k != PARTICIPANTS}
        if "start_date" in updates or "end_date" in updates:
            current = self.get_training(training_id)
            _check_dates({**current, **updates})
        return self.store.update(training_id, dotted_updates(updates, ELIGIBILITY))

    def delete_training(self, training_id: str) -> None:
        self.store.delete(training_id)
        logger.info("Deleted training %s", training_id)

    def register(self, training_id: str, uid: str) -> dict:
        """Idempotent set-union into participants."""
        if not self.store.add_to_set(training_id, PARTICIPANTS, uid):
            # Raises NotFoundError
            self.get_training(training_id)
        logger.info("Student %s registered for training %s", uid, training_id)
        return self.get_training(training_id)


def get_training_service() -> TrainingService:
    return TrainingService()
