from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

DAYS_OF_WEEK = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]

DayOfWeek = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]


class CreateTimetableEntryRequest(BaseModel):
    class_id: str
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    subject: str
    teacher_id: str
    room: Optional[str] = None


class TimetableEntryInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    class_id: str
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    subject: str
    teacher_id: str
    room: Optional[str] = None
    teacher_name: Optional[str] = None
    class_name: Optional[str] = None


class TimetableResponse(BaseModel):
    entries: List[TimetableEntryInfo]
