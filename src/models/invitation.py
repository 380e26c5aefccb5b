"""Teacher invitation database model."""

from sqlalchemy import Column, String
from .base import Base


class TeacherInvitationModel(Base):
    """Single-use registration token bound to an email address."""

    __tablename__ = "teacher_invitations"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    token = Column(String, unique=True, index=True, nullable=False)
    status = Column(String, nullable=False, default="pending")  # 'pending' or 'accepted'
    invited_by = Column(String, nullable=False)  # user_id of the admin
    created_at = Column(String, nullable=False)  # ISO format string
    expires_at = Column(String, nullable=False)  # ISO format string
