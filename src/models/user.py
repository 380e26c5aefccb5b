"""User and role database models.

This module defines the account (identity) and role records using SQLAlchemy.
"""

from sqlalchemy import Boolean, Column, ForeignKey, String
from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    full_name = Column(String, nullable=False)
    created_at = Column(String, nullable=False)  # ISO format string


class UserRoleModel(Base):
    """Role assignment for a user; one row per user."""

    __tablename__ = "user_roles"

    user_id = Column(
        String, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True
    )
    role = Column(String, nullable=False)  # 'admin', 'teacher', or 'parent'
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(String, nullable=False)
