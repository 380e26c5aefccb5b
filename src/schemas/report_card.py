from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ReportCardInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    child_id: str
    term: str
    year: int
    file_path: str
    file_name: str
    uploaded_by: str
    created_at: str
    child_name: Optional[str] = None


class ReportCardListResponse(BaseModel):
    report_cards: List[ReportCardInfo]
