"""Saved lesson plan storage."""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy.orm import Session

from core.exceptions import PermissionDeniedError, RecordNotFoundError
from models.lesson_plan import LessonPlanModel

logger = logging.getLogger(__name__)


class LessonPlanManager:
    """Persists lesson plans a teacher chose to keep."""

    def __init__(self, db: Session):
        self.db = db

    def save(self, teacher_id: str, subject: str, grade: str, topic: str, content: str) -> LessonPlanModel:
        model = LessonPlanModel(
            id=str(uuid.uuid4()),
            teacher_id=teacher_id,
            subject=subject.strip(),
            grade=grade.strip(),
            topic=topic.strip(),
            content=content,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Saved lesson plan %s for teacher %s", model.id, teacher_id)
        return model

    def list_plans(self, teacher_id: Optional[str] = None) -> List[LessonPlanModel]:
        """List plans newest first; all plans when teacher_id is None."""
        query = self.db.query(LessonPlanModel)
        if teacher_id is not None:
            query = query.filter(LessonPlanModel.teacher_id == teacher_id)
        return query.order_by(LessonPlanModel.created_at.desc()).all()

    def get_plan(self, plan_id: str) -> LessonPlanModel:
        model = self.db.query(LessonPlanModel).filter(LessonPlanModel.id == plan_id).first()
        if model is None:
            raise RecordNotFoundError("Lesson plan", plan_id)
        return model

    def delete_plan(self, plan_id: str, user_id: str, is_admin: bool = False) -> None:
        model = self.get_plan(plan_id)
        if not is_admin and model.teacher_id != user_id:
            raise PermissionDeniedError("You can only delete your own lesson plans")
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted lesson plan: %s", plan_id)
