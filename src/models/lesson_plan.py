from sqlalchemy import Column, String, Text
from .base import Base


class LessonPlanModel(Base):
    __tablename__ = "lesson_plans"

    id = Column(String, primary_key=True, index=True)
    teacher_id = Column(String, nullable=False, index=True)
    subject = Column(String, nullable=False)
    grade = Column(String, nullable=False)
    topic = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(String, nullable=False)
