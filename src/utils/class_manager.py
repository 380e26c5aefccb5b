"""Class management utilities."""

import logging
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import DuplicateRecordError, RecordNotFoundError
from models.attendance import AttendanceModel
from models.child import ChildClassAssignmentModel, ChildModel
from models.class_model import ClassMemberModel, ClassModel
from models.timetable import TimetableEntryModel
from models.user import UserModel, UserRoleModel

logger = logging.getLogger(__name__)


class ClassManager:
    """Manages classes, staff memberships, and child assignments."""

    def __init__(self, db: Session):
        self.db = db

    def create_class(self, name: str, grade: str, created_by: str) -> ClassModel:
        now = datetime.now(pytz.utc).isoformat()
        class_model = ClassModel(
            id=str(uuid.uuid4()),
            name=name.strip(),
            grade=grade.strip(),
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        self.db.add(class_model)
        self.db.commit()
        self.db.refresh(class_model)
        logger.info("Created class %s (%s)", class_model.name, class_model.id)
        return class_model

    def get_class(self, class_id: str) -> ClassModel:
        model = self.db.query(ClassModel).filter(ClassModel.id == class_id).first()
        if not model:
            raise RecordNotFoundError("Class", class_id)
        return model

    def list_classes(self) -> List[ClassModel]:
        return self.db.query(ClassModel).order_by(ClassModel.created_at.desc()).all()

    def list_classes_for_user(self, user_id: str) -> List[ClassModel]:
        return (
            self.db.query(ClassModel)
            .join(ClassMemberModel, ClassMemberModel.class_id == ClassModel.id)
            .filter(ClassMemberModel.user_id == user_id)
            .order_by(ClassModel.name)
            .all()
        )

    def list_class_ids_for_children(self, child_ids: List[str]) -> List[str]:
        if not child_ids:
            return []
        rows = (
            self.db.query(ChildClassAssignmentModel.class_id)
            .filter(ChildClassAssignmentModel.child_id.in_(child_ids))
            .distinct()
            .all()
        )
        return [row.class_id for row in rows]

    def is_member(self, class_id: str, user_id: str) -> bool:
        return (
            self.db.query(ClassMemberModel)
            .filter(
                ClassMemberModel.class_id == class_id,
                ClassMemberModel.user_id == user_id,
            )
            .first()
            is not None
        )

    def add_member(self, class_id: str, user_id: str) -> ClassMemberModel:
        """Add a staff member to a class.

        Raises:
            RecordNotFoundError: If the class or user does not exist.
            DuplicateRecordError: If the user is already a member.
        """
        self.get_class(class_id)
        if self.db.query(UserModel).filter(UserModel.user_id == user_id).first() is None:
            raise RecordNotFoundError("User", user_id)
        if self.is_member(class_id, user_id):
            raise DuplicateRecordError("This user is already a member of this class")

        membership = ClassMemberModel(
            id=str(uuid.uuid4()),
            class_id=class_id,
            user_id=user_id,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        try:
            self.db.add(membership)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateRecordError("This user is already a member of this class") from e
        return membership

    def remove_member(self, class_id: str, user_id: str) -> None:
        deleted = (
            self.db.query(ClassMemberModel)
            .filter(
                ClassMemberModel.class_id == class_id,
                ClassMemberModel.user_id == user_id,
            )
            .delete()
        )
        if not deleted:
            raise RecordNotFoundError("Class member", user_id)
        self.db.commit()
        logger.info("Removed user %s from class %s", user_id, class_id)

    def list_members(
        self, class_id: str
    ) -> List[Tuple[UserModel, Optional[str]]]:
        """Return (user, role) pairs for the members of a class."""
        return (
            self.db.query(UserModel, UserRoleModel.role)
            .join(ClassMemberModel, ClassMemberModel.user_id == UserModel.user_id)
            .outerjoin(UserRoleModel, UserRoleModel.user_id == UserModel.user_id)
            .filter(ClassMemberModel.class_id == class_id)
            .order_by(UserModel.full_name)
            .all()
        )

    def assign_child(self, class_id: str, child_id: str, assigned_by: str) -> None:
        """Place a child in a class.

        Raises:
            RecordNotFoundError: If the class or child does not exist.
            DuplicateRecordError: If the child is already in the class.
        """
        self.get_class(class_id)
        if self.db.query(ChildModel).filter(ChildModel.id == child_id).first() is None:
            raise RecordNotFoundError("Child", child_id)

        assignment = ChildClassAssignmentModel(
            id=str(uuid.uuid4()),
            child_id=child_id,
            class_id=class_id,
            assigned_by=assigned_by,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        try:
            self.db.add(assignment)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateRecordError("This child is already assigned to this class") from e

    def unassign_child(self, class_id: str, child_id: str) -> None:
        deleted = (
            self.db.query(ChildClassAssignmentModel)
            .filter(
                ChildClassAssignmentModel.class_id == class_id,
                ChildClassAssignmentModel.child_id == child_id,
            )
            .delete()
        )
        if not deleted:
            raise RecordNotFoundError("Class assignment", child_id)
        self.db.commit()

    def list_children(self, class_id: str) -> List[ChildModel]:
        return (
            self.db.query(ChildModel)
            .join(
                ChildClassAssignmentModel,
                ChildClassAssignmentModel.child_id == ChildModel.id,
            )
            .filter(ChildClassAssignmentModel.class_id == class_id)
            .order_by(ChildModel.name)
            .all()
        )

    def delete_class(self, class_id: str) -> None:
        """Delete a class with its memberships, child assignments, timetable
        and attendance register.

        Raises:
            RecordNotFoundError: If class not found.
        """
        class_model = self.get_class(class_id)
        for dependent in (ChildClassAssignmentModel, AttendanceModel, TimetableEntryModel):
            self.db.query(dependent).filter(dependent.class_id == class_id).delete()
        # Memberships go through the relationship cascade
        self.db.delete(class_model)
        self.db.commit()
        logger.info("Deleted class: %s", class_id)
