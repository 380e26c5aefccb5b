from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict

AttendanceStatus = Literal["present", "absent", "late"]


class AttendanceMark(BaseModel):
    child_id: str
    status: AttendanceStatus
    notes: Optional[str] = None


class MarkAttendanceRequest(BaseModel):
    class_id: str
    date: str
    records: List[AttendanceMark]


class AttendanceRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    child_id: str
    class_id: str
    date: str
    status: AttendanceStatus
    notes: Optional[str] = None
    marked_by: str
    class_name: Optional[str] = None


class AttendanceSheet(BaseModel):
    class_id: str
    date: str
    records: List[AttendanceRecord]
    counts: Dict[str, int]


class AttendanceHistory(BaseModel):
    child_id: str
    records: List[AttendanceRecord]
