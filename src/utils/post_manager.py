"""Announcement (post) management."""

import logging
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

import pytz
from sqlalchemy.orm import Session

from core.exceptions import PermissionDeniedError, RecordNotFoundError
from models.post import PostModel
from models.user import UserModel

logger = logging.getLogger(__name__)


class PostManager:
    """Manages school announcements."""

    def __init__(self, db: Session):
        self.db = db

    def create_post(
        self, author_id: str, title: str, content: str, is_published: bool = True
    ) -> PostModel:
        now = datetime.now(pytz.utc).isoformat()
        model = PostModel(
            id=str(uuid.uuid4()),
            author_id=author_id,
            title=title.strip(),
            content=content,
            is_published=is_published,
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Post %s created by %s", model.id, author_id)
        return model

    def get_post(self, post_id: str) -> PostModel:
        model = self.db.query(PostModel).filter(PostModel.id == post_id).first()
        if model is None:
            raise RecordNotFoundError("Post", post_id)
        return model

    def _check_author(self, model: PostModel, user_id: str, is_admin: bool) -> None:
        if not is_admin and model.author_id != user_id:
            raise PermissionDeniedError("You can only change your own posts")

    def list_posts_by_author(self, author_id: str) -> List[PostModel]:
        return (
            self.db.query(PostModel)
            .filter(PostModel.author_id == author_id)
            .order_by(PostModel.created_at.desc())
            .all()
        )

    def list_all_posts(self) -> List[Tuple[PostModel, Optional[str]]]:
        return (
            self.db.query(PostModel, UserModel.full_name)
            .outerjoin(UserModel, UserModel.user_id == PostModel.author_id)
            .order_by(PostModel.created_at.desc())
            .all()
        )

    def list_published(self, limit: Optional[int] = None) -> List[Tuple[PostModel, Optional[str]]]:
        """Published posts, newest first, with the author's name."""
        query = (
            self.db.query(PostModel, UserModel.full_name)
            .outerjoin(UserModel, UserModel.user_id == PostModel.author_id)
            .filter(PostModel.is_published.is_(True))
            .order_by(PostModel.created_at.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def set_published(
        self, post_id: str, is_published: bool, user_id: str, is_admin: bool = False
    ) -> PostModel:
        model = self.get_post(post_id)
        self._check_author(model, user_id, is_admin)
        model.is_published = is_published
        model.updated_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        self.db.refresh(model)
        return model

    def delete_post(self, post_id: str, user_id: str, is_admin: bool = False) -> None:
        model = self.get_post(post_id)
        self._check_author(model, user_id, is_admin)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted post: %s", post_id)
