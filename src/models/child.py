from sqlalchemy import Column, ForeignKey, String, UniqueConstraint
from .base import Base


class ChildModel(Base):
    __tablename__ = "children"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    date_of_birth = Column(String, nullable=False)  # YYYY-MM-DD
    favorite_animal = Column(String, nullable=False)
    grade = Column(String, nullable=True)
    # NULL means the learner is not linked to a parent account yet
    parent_id = Column(
        String, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(String, nullable=False)


class ChildClassAssignmentModel(Base):
    __tablename__ = "child_class_assignments"

    id = Column(String, primary_key=True, index=True)
    child_id = Column(String, ForeignKey("children.id", ondelete="CASCADE"), index=True)
    class_id = Column(String, ForeignKey("classes.id", ondelete="CASCADE"), index=True)
    assigned_by = Column(String, nullable=False)
    created_at = Column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("child_id", "class_id", name="uq_child_class_assignment"),
    )
