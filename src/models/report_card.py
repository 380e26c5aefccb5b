from sqlalchemy import Column, ForeignKey, Integer, String
from .base import Base


class ReportCardModel(Base):
    __tablename__ = "report_cards"

    id = Column(String, primary_key=True, index=True)
    child_id = Column(String, ForeignKey("children.id", ondelete="CASCADE"), index=True)
    term = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    file_path = Column(String, nullable=False)  # path inside the report-cards bucket
    file_name = Column(String, nullable=False)
    uploaded_by = Column(String, nullable=False)
    created_at = Column(String, nullable=False)
