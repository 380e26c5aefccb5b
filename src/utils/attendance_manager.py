"""Attendance register management.

A register holds one row per (child, class, date); marking the same child
twice on a day overwrites the earlier mark.
"""

import logging
import uuid
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

import pytz
from sqlalchemy.orm import Session

from core.exceptions import ValidationError
from models.attendance import AttendanceModel
from models.class_model import ClassModel
from schemas.attendance import AttendanceMark

logger = logging.getLogger(__name__)

ATTENDANCE_STATUSES = ("present", "absent", "late")

HISTORY_LIMIT = 30


def _check_date(value: str) -> str:
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError as e:
        raise ValidationError(f"Invalid date: {value}") from e


class AttendanceManager:
    """Reads and writes the daily attendance register."""

    def __init__(self, db: Session):
        self.db = db

    def mark(
        self, class_id: str, day: str, records: List[AttendanceMark], marked_by: str
    ) -> List[AttendanceModel]:
        """Upsert the marks of a class register for one day."""
        day = _check_date(day)
        existing = {
            row.child_id: row
            for row in self.db.query(AttendanceModel).filter(
                AttendanceModel.class_id == class_id, AttendanceModel.date == day
            )
        }
        now = datetime.now(pytz.utc).isoformat()
        saved = []
        for record in records:
            row = existing.get(record.child_id)
            if row is None:
                row = AttendanceModel(
                    id=str(uuid.uuid4()),
                    child_id=record.child_id,
                    class_id=class_id,
                    date=day,
                    created_at=now,
                )
                self.db.add(row)
                existing[record.child_id] = row
            row.status = record.status
            row.notes = record.notes
            row.marked_by = marked_by
            saved.append(row)
        self.db.commit()
        logger.info("Saved %d attendance marks for class %s on %s", len(saved), class_id, day)
        return saved

    def get_sheet(self, class_id: str, day: str) -> Tuple[List[AttendanceModel], Dict[str, int]]:
        """Marks of one class on one day with per-status counts."""
        day = _check_date(day)
        rows = (
            self.db.query(AttendanceModel)
            .filter(AttendanceModel.class_id == class_id, AttendanceModel.date == day)
            .all()
        )
        counts = {status: 0 for status in ATTENDANCE_STATUSES}
        for row in rows:
            counts[row.status] = counts.get(row.status, 0) + 1
        return rows, counts

    def history_for_child(
        self, child_id: str, limit: int = HISTORY_LIMIT
    ) -> List[Tuple[AttendanceModel, Optional[str]]]:
        """Most recent marks of a child with the class name."""
        return (
            self.db.query(AttendanceModel, ClassModel.name)
            .outerjoin(ClassModel, ClassModel.id == AttendanceModel.class_id)
            .filter(AttendanceModel.child_id == child_id)
            .order_by(AttendanceModel.date.desc())
            .limit(limit)
            .all()
        )
