from sqlalchemy import Column, ForeignKey, String
from .base import Base


class TimetableEntryModel(Base):
    __tablename__ = "timetables"

    id = Column(String, primary_key=True, index=True)
    class_id = Column(String, ForeignKey("classes.id", ondelete="CASCADE"), index=True)
    day_of_week = Column(String, nullable=False)
    start_time = Column(String, nullable=False)  # HH:MM
    end_time = Column(String, nullable=False)  # HH:MM
    subject = Column(String, nullable=False)
    teacher_id = Column(String, nullable=False)
    room = Column(String, nullable=True)
    created_by = Column(String, nullable=False)
    created_at = Column(String, nullable=False)
