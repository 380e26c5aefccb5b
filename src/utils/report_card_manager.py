"""Report card records and their files."""

import logging
import re
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

import pytz
from sqlalchemy.orm import Session

from config import REPORT_CARDS_BUCKET
from core.exceptions import RecordNotFoundError, ValidationError
from models.child import ChildModel
from models.report_card import ReportCardModel
from utils.storage import BlobStorage

logger = logging.getLogger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")


def report_card_path(child_id: str, year: int, term: str, file_name: str) -> str:
    """Blob path of a report card: ``{child_id}/{year}_{term}_{file_name}``."""
    safe_name = _UNSAFE_CHARS_RE.sub("_", file_name).strip("._") or "report"
    safe_term = _UNSAFE_CHARS_RE.sub("_", term)
    return f"{child_id}/{year}_{safe_term}_{safe_name}"


class ReportCardManager:
    """Stores report card files in the report-cards bucket."""

    def __init__(self, db: Session, storage: Optional[BlobStorage] = None):
        self.db = db
        self.storage = storage or BlobStorage()

    def upload(
        self,
        child_id: str,
        term: str,
        year: int,
        file_name: str,
        data: bytes,
        uploaded_by: str,
    ) -> ReportCardModel:
        """Store the file (overwriting one at the same path) and record it.

        Raises:
            RecordNotFoundError: If the child does not exist.
            ValidationError: If the file is empty or term is blank.
        """
        if self.db.query(ChildModel).filter(ChildModel.id == child_id).first() is None:
            raise RecordNotFoundError("Child", child_id)
        if not data:
            raise ValidationError("The uploaded file is empty")
        if not term.strip():
            raise ValidationError("Term is required")

        path = report_card_path(child_id, year, term.strip(), file_name)
        self.storage.upload(REPORT_CARDS_BUCKET, path, data, upsert=True)

        model = ReportCardModel(
            id=str(uuid.uuid4()),
            child_id=child_id,
            term=term.strip(),
            year=year,
            file_path=path,
            file_name=file_name,
            uploaded_by=uploaded_by,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Uploaded report card %s for child %s", path, child_id)
        return model

    def get_report_card(self, report_card_id: str) -> ReportCardModel:
        model = (
            self.db.query(ReportCardModel)
            .filter(ReportCardModel.id == report_card_id)
            .first()
        )
        if model is None:
            raise RecordNotFoundError("Report card", report_card_id)
        return model

    def list_all(self) -> List[Tuple[ReportCardModel, Optional[str]]]:
        return (
            self.db.query(ReportCardModel, ChildModel.name)
            .outerjoin(ChildModel, ChildModel.id == ReportCardModel.child_id)
            .order_by(ReportCardModel.created_at.desc())
            .all()
        )

    def list_for_children(
        self, child_ids: List[str]
    ) -> List[Tuple[ReportCardModel, Optional[str]]]:
        if not child_ids:
            return []
        return (
            self.db.query(ReportCardModel, ChildModel.name)
            .join(ChildModel, ChildModel.id == ReportCardModel.child_id)
            .filter(ReportCardModel.child_id.in_(child_ids))
            .order_by(ReportCardModel.year.desc(), ReportCardModel.term.desc())
            .all()
        )

    def download(self, model: ReportCardModel) -> bytes:
        return self.storage.download(REPORT_CARDS_BUCKET, model.file_path)

    def delete(self, report_card_id: str) -> None:
        model = self.get_report_card(report_card_id)
        self.storage.remove(REPORT_CARDS_BUCKET, [model.file_path])
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted report card: %s", report_card_id)
