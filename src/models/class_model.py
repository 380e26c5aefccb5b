from sqlalchemy import Column, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base


class ClassModel(Base):
    __tablename__ = "classes"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    grade = Column(String, nullable=False)
    created_by = Column(String, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    members = relationship(
        "ClassMemberModel", back_populates="class_", cascade="all, delete-orphan"
    )


class ClassMemberModel(Base):
    __tablename__ = "class_members"

    id = Column(String, primary_key=True, index=True)
    class_id = Column(String, ForeignKey("classes.id", ondelete="CASCADE"), index=True)
    user_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True)
    created_at = Column(String, nullable=False)

    class_ = relationship("ClassModel", back_populates="members")

    __table_args__ = (
        UniqueConstraint("class_id", "user_id", name="uq_class_member"),
    )
