"""Class timetable management."""

import logging
import re
import uuid
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy.orm import Session

from core.exceptions import RecordNotFoundError, ValidationError
from models.class_model import ClassModel
from models.timetable import TimetableEntryModel
from models.user import UserRoleModel
from schemas.timetable import DAYS_OF_WEEK

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _day_index(day: str) -> int:
    return DAYS_OF_WEEK.index(day) if day in DAYS_OF_WEEK else len(DAYS_OF_WEEK)


def sort_entries(entries: List[TimetableEntryModel]) -> List[TimetableEntryModel]:
    """Order entries Monday to Friday, then by start time."""
    return sorted(entries, key=lambda e: (_day_index(e.day_of_week), e.start_time))


class TimetableManager:
    """Manages weekly timetable slots of classes."""

    def __init__(self, db: Session):
        self.db = db

    def create_entry(
        self,
        class_id: str,
        day_of_week: str,
        start_time: str,
        end_time: str,
        subject: str,
        teacher_id: str,
        created_by: str,
        room: Optional[str] = None,
    ) -> TimetableEntryModel:
        """Add a slot to a class timetable.

        Raises:
            ValidationError: On an unknown weekday, a malformed time, an end
                time not after the start time, or a non-teacher teacher_id.
            RecordNotFoundError: If the class does not exist.
        """
        if day_of_week not in DAYS_OF_WEEK:
            raise ValidationError(f"Invalid day of week: {day_of_week}")
        for value in (start_time, end_time):
            if not _TIME_RE.match(value):
                raise ValidationError(f"Invalid time: {value} (expected HH:MM)")
        if start_time >= end_time:
            raise ValidationError("End time must be after start time")
        if not subject.strip():
            raise ValidationError("Subject is required")

        if self.db.query(ClassModel).filter(ClassModel.id == class_id).first() is None:
            raise RecordNotFoundError("Class", class_id)
        is_teacher = (
            self.db.query(UserRoleModel)
            .filter(UserRoleModel.user_id == teacher_id, UserRoleModel.role == "teacher")
            .first()
        )
        if is_teacher is None:
            raise ValidationError("The selected user is not a teacher")

        model = TimetableEntryModel(
            id=str(uuid.uuid4()),
            class_id=class_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            subject=subject.strip(),
            teacher_id=teacher_id,
            room=room or None,
            created_by=created_by,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Added %s %s-%s to class %s", day_of_week, start_time, end_time, class_id)
        return model

    def list_for_class(self, class_id: str) -> List[TimetableEntryModel]:
        rows = (
            self.db.query(TimetableEntryModel)
            .filter(TimetableEntryModel.class_id == class_id)
            .all()
        )
        return sort_entries(rows)

    def list_for_classes(self, class_ids: List[str]) -> List[TimetableEntryModel]:
        if not class_ids:
            return []
        rows = (
            self.db.query(TimetableEntryModel)
            .filter(TimetableEntryModel.class_id.in_(class_ids))
            .all()
        )
        return sort_entries(rows)

    def delete_entry(self, entry_id: str) -> None:
        model = (
            self.db.query(TimetableEntryModel)
            .filter(TimetableEntryModel.id == entry_id)
            .first()
        )
        if model is None:
            raise RecordNotFoundError("Timetable entry", entry_id)
        self.db.delete(model)
        self.db.commit()
