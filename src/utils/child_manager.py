"""Child (learner) record management.

Besides plain CRUD for parents and administrators, this module turns
extracted document candidates into child records. Registration is
best-effort: every candidate is inserted and committed on its own, so one bad
row never undoes the rows before it.
"""

import logging
import uuid
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

import pytz
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import REPORT_CARDS_BUCKET
from core.exceptions import PermissionDeniedError, RecordNotFoundError, ValidationError
from models.attendance import AttendanceModel
from models.child import ChildClassAssignmentModel, ChildModel
from models.report_card import ReportCardModel
from models.user import UserModel
from schemas.extraction import ExtractionCandidate
from utils.storage import BlobStorage
from utils.user_manager import normalize_email

logger = logging.getLogger(__name__)

DEFAULT_FAVORITE_ANIMAL = "Not specified"

REGISTRABLE_STATUSES = ("pending", "success")


def parse_birth_date(value: Optional[str]) -> str:
    """Return an ISO date string; today when no value is given.

    Raises:
        ValidationError: If the value is not a YYYY-MM-DD date.
    """
    if not value:
        return date.today().isoformat()
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError as e:
        raise ValidationError(f"Invalid date of birth: {value}") from e


class ChildManager:
    """Manages child records and their parent links."""

    def __init__(self, db: Session, storage: Optional[BlobStorage] = None):
        self.db = db
        self.storage = storage or BlobStorage()

    def _now(self) -> str:
        return datetime.now(pytz.utc).isoformat()

    def _insert_child(
        self,
        name: str,
        date_of_birth: str,
        parent_id: Optional[str],
        grade: Optional[str] = None,
        favorite_animal: str = DEFAULT_FAVORITE_ANIMAL,
    ) -> ChildModel:
        model = ChildModel(
            id=str(uuid.uuid4()),
            name=name,
            date_of_birth=date_of_birth,
            favorite_animal=favorite_animal,
            grade=grade,
            parent_id=parent_id,
            created_at=self._now(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return model

    def find_parent_id(self, email: Optional[str]) -> Optional[str]:
        """Resolve a parent email to a user id, first match wins."""
        if not email or not email.strip():
            return None
        row = (
            self.db.query(UserModel.user_id)
            .filter(UserModel.email == normalize_email(email))
            .order_by(UserModel.created_at)
            .first()
        )
        return row.user_id if row else None

    def register_candidates(
        self, candidates: List[ExtractionCandidate]
    ) -> List[ExtractionCandidate]:
        """Create child records from extracted candidates.

        Candidates already in ``error`` are returned unchanged. Each other
        candidate is linked to the user whose email matches ``parentEmail``,
        or left unlinked, and inserted in its own transaction. A failure marks
        only that candidate as ``error``.

        Args:
            candidates: Candidates in document order.

        Returns:
            Updated candidates, same order and length as the input.
        """
        results: List[ExtractionCandidate] = []
        for candidate in candidates:
            if candidate.status not in REGISTRABLE_STATUSES:
                results.append(candidate)
                continue

            try:
                name = (candidate.name or "").strip()
                if not name:
                    raise ValidationError("Learner name is required")
                parent_id = self.find_parent_id(candidate.parentEmail)
                self._insert_child(
                    name=name,
                    date_of_birth=parse_birth_date(candidate.dateOfBirth),
                    parent_id=parent_id,
                    grade=candidate.grade or None,
                )
            except (SQLAlchemyError, ValidationError) as e:
                self.db.rollback()
                logger.warning("Failed to register learner %r: %s", candidate.name, e)
                results.append(
                    candidate.model_copy(update={"status": "error", "message": str(e)})
                )
                continue

            results.append(
                candidate.model_copy(
                    update={"status": "success", "message": "Registered successfully"}
                )
            )

        success_count = sum(1 for c in results if c.status == "success")
        logger.info(
            "Registered %d of %d learners from document", success_count, len(results)
        )
        return results

    # --- CRUD ---

    def get_child(self, child_id: str) -> ChildModel:
        model = self.db.query(ChildModel).filter(ChildModel.id == child_id).first()
        if model is None:
            raise RecordNotFoundError("Child", child_id)
        return model

    def get_owned_child(self, child_id: str, parent_id: str) -> ChildModel:
        """Get a child that belongs to the given parent.

        Raises:
            RecordNotFoundError: If the child does not exist.
            PermissionDeniedError: If the child belongs to someone else.
        """
        model = self.get_child(child_id)
        if model.parent_id != parent_id:
            raise PermissionDeniedError("This child is not linked to your account")
        return model

    def create_child(
        self,
        parent_id: Optional[str],
        name: str,
        date_of_birth: str,
        favorite_animal: str,
        grade: Optional[str] = None,
    ) -> ChildModel:
        name = name.strip()
        if not name:
            raise ValidationError("Child name is required")
        model = self._insert_child(
            name=name,
            date_of_birth=parse_birth_date(date_of_birth),
            parent_id=parent_id,
            grade=grade or None,
            favorite_animal=favorite_animal.strip() or DEFAULT_FAVORITE_ANIMAL,
        )
        logger.info("Created child %s for parent %s", model.id, parent_id)
        return model

    def list_children_for_parent(self, parent_id: str) -> List[ChildModel]:
        return (
            self.db.query(ChildModel)
            .filter(ChildModel.parent_id == parent_id)
            .order_by(ChildModel.created_at.asc())
            .all()
        )

    def list_child_ids_for_parent(self, parent_id: str) -> List[str]:
        return [c.id for c in self.list_children_for_parent(parent_id)]

    def list_all_children(self) -> List[Tuple[ChildModel, Optional[str]]]:
        """List every child with the linked parent's name, newest first."""
        return (
            self.db.query(ChildModel, UserModel.full_name)
            .outerjoin(UserModel, UserModel.user_id == ChildModel.parent_id)
            .order_by(ChildModel.created_at.desc())
            .all()
        )

    def list_unlinked_children(self) -> List[ChildModel]:
        return (
            self.db.query(ChildModel)
            .filter(ChildModel.parent_id.is_(None))
            .order_by(ChildModel.created_at.desc())
            .all()
        )

    def update_child(self, model: ChildModel, fields: Dict[str, Optional[str]]) -> ChildModel:
        """Apply the non-None fields to a child record."""
        if fields.get("name") is not None:
            name = fields["name"].strip()
            if not name:
                raise ValidationError("Child name is required")
            model.name = name
        if fields.get("date_of_birth") is not None:
            model.date_of_birth = parse_birth_date(fields["date_of_birth"])
        if fields.get("favorite_animal") is not None:
            model.favorite_animal = fields["favorite_animal"].strip() or DEFAULT_FAVORITE_ANIMAL
        if fields.get("grade") is not None:
            model.grade = fields["grade"] or None
        self.db.commit()
        self.db.refresh(model)
        return model

    def link_parent(self, child_id: str, parent_email: str) -> ChildModel:
        """Attach a child to the parent account with the given email.

        Raises:
            RecordNotFoundError: If the child or the parent account is missing.
        """
        model = self.get_child(child_id)
        parent_id = self.find_parent_id(parent_email)
        if parent_id is None:
            raise RecordNotFoundError("User", normalize_email(parent_email))
        model.parent_id = parent_id
        self.db.commit()
        self.db.refresh(model)
        logger.info("Linked child %s to parent %s", child_id, parent_id)
        return model

    def delete_child(self, model: ChildModel) -> None:
        """Delete a child with its class assignments, attendance and report cards.

        Report card files are removed from the bucket once the rows are gone.
        """
        file_paths = [
            row.file_path
            for row in self.db.query(ReportCardModel.file_path).filter(
                ReportCardModel.child_id == model.id
            )
        ]
        for dependent in (ChildClassAssignmentModel, AttendanceModel, ReportCardModel):
            self.db.query(dependent).filter(dependent.child_id == model.id).delete()
        self.db.delete(model)
        self.db.commit()
        if file_paths:
            self.storage.remove(REPORT_CARDS_BUCKET, file_paths)
        logger.info("Deleted child %s and %d report card files", model.id, len(file_paths))

    def delete_children_for_parent(self, parent_id: str) -> int:
        """Delete every child linked to a parent. Returns how many were deleted."""
        children = self.list_children_for_parent(parent_id)
        for model in children:
            self.delete_child(model)
        return len(children)
