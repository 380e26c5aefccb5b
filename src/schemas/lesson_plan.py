from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class GenerateLessonPlanRequest(BaseModel):
    """Request body of the lesson plan generator.

    ``mode`` selects between generating a new plan from subject/grade/topic,
    digitising a photographed plan, or editing an existing one.
    """

    mode: Literal["generate", "extract", "edit"] = "generate"
    subject: Optional[str] = None
    grade: Optional[str] = None
    topic: Optional[str] = None
    image_base64: Optional[str] = Field(
        default=None, description="Data URL of an image, e.g. 'data:image/png;base64,...'"
    )
    current_plan: Optional[str] = None
    instruction: Optional[str] = None


class GenerateLessonPlanResponse(BaseModel):
    content: str


class CreateLessonPlanRequest(BaseModel):
    subject: str = Field(min_length=1)
    grade: str = Field(min_length=1)
    topic: str = Field(min_length=1)
    content: str = Field(min_length=1)


class LessonPlanInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    teacher_id: str
    subject: str
    grade: str
    topic: str
    content: str
    created_at: str


class LessonPlanListResponse(BaseModel):
    lesson_plans: List[LessonPlanInfo]
