from sqlalchemy import Column, ForeignKey, String, UniqueConstraint
from .base import Base


class AttendanceModel(Base):
    __tablename__ = "attendance"

    id = Column(String, primary_key=True, index=True)
    child_id = Column(String, ForeignKey("children.id", ondelete="CASCADE"), index=True)
    class_id = Column(String, ForeignKey("classes.id", ondelete="CASCADE"), index=True)
    date = Column(String, nullable=False, index=True)  # YYYY-MM-DD
    status = Column(String, nullable=False)  # 'present', 'absent' or 'late'
    notes = Column(String, nullable=True)
    marked_by = Column(String, nullable=False)
    created_at = Column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("child_id", "class_id", "date", name="uq_attendance_child_class_date"),
    )
