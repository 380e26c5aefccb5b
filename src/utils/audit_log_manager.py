"""Audit log persistence."""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import pytz
from sqlalchemy.orm import Session

from models.audit_log import AuditLogModel
from models.user import UserModel

logger = logging.getLogger(__name__)

RECENT_LOG_LIMIT = 100


class AuditLogManager:
    """Records and lists user actions."""

    def __init__(self, db: Session):
        self.db = db

    def log_action(
        self,
        user_id: Optional[str],
        action: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditLogModel:
        model = AuditLogModel(
            id=str(uuid.uuid4()),
            user_id=user_id,
            action=action,
            details=details or {},
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(model)
        self.db.commit()
        logger.info("Audit: %s by %s", action, user_id or "anonymous")
        return model

    def list_recent(
        self, limit: int = RECENT_LOG_LIMIT
    ) -> List[Tuple[AuditLogModel, Optional[str]]]:
        """Return the newest entries together with the acting user's email."""
        return (
            self.db.query(AuditLogModel, UserModel.email)
            .outerjoin(UserModel, UserModel.user_id == AuditLogModel.user_id)
            .order_by(AuditLogModel.created_at.desc())
            .limit(limit)
            .all()
        )
