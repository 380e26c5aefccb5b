from sqlalchemy import Boolean, Column, String, Text
from .base import Base


class PostModel(Base):
    """School announcement."""

    __tablename__ = "posts"

    id = Column(String, primary_key=True, index=True)
    author_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    is_published = Column(Boolean, nullable=False, default=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
