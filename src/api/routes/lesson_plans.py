"""Lesson plan routes: AI generation and saved plans."""

import logging

from fastapi import APIRouter

from api.errors import DOMAIN_ERRORS, http_error
from api.routes.auth import StaffSession
from core.dependencies import LessonPlanGeneratorDep, LessonPlanManagerDep
from schemas.lesson_plan import (
    CreateLessonPlanRequest,
    GenerateLessonPlanRequest,
    GenerateLessonPlanResponse,
    LessonPlanInfo,
    LessonPlanListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/lesson-plans", tags=["Lesson Plans"])


@router.post("/generate", response_model=GenerateLessonPlanResponse, summary="Generate, digitise or edit a lesson plan")
def generate_lesson_plan(
    req: GenerateLessonPlanRequest,
    session: StaffSession,
    generator: LessonPlanGeneratorDep,
) -> GenerateLessonPlanResponse:
    """Run the lesson plan generator in the requested mode.

    - generate: subject, grade and topic are required
    - extract: image_base64 is required
    - edit: current_plan is required; instruction and image_base64 optional
    """
    try:
        if req.mode == "extract":
            content = generator.extract(req.image_base64)
        elif req.mode == "edit":
            content = generator.edit(req.current_plan, req.instruction, req.image_base64)
        else:
            content = generator.generate(req.subject, req.grade, req.topic)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return GenerateLessonPlanResponse(content=content)


@router.post("", response_model=LessonPlanInfo, summary="Save a lesson plan")
def save_lesson_plan(
    req: CreateLessonPlanRequest,
    session: StaffSession,
    lesson_plan_manager: LessonPlanManagerDep,
) -> LessonPlanInfo:
    model = lesson_plan_manager.save(
        teacher_id=session.user_id,
        subject=req.subject,
        grade=req.grade,
        topic=req.topic,
        content=req.content,
    )
    return LessonPlanInfo.model_validate(model)


@router.get("", response_model=LessonPlanListResponse, summary="List lesson plans")
def list_lesson_plans(
    session: StaffSession,
    lesson_plan_manager: LessonPlanManagerDep,
) -> LessonPlanListResponse:
    """Teachers see their own plans, admins see every plan."""
    teacher_id = None if session.role == "admin" else session.user_id
    models = lesson_plan_manager.list_plans(teacher_id=teacher_id)
    return LessonPlanListResponse(
        lesson_plans=[LessonPlanInfo.model_validate(m) for m in models]
    )


@router.delete("/{plan_id}", summary="Delete a lesson plan")
def delete_lesson_plan(
    plan_id: str,
    session: StaffSession,
    lesson_plan_manager: LessonPlanManagerDep,
) -> dict:
    try:
        lesson_plan_manager.delete_plan(plan_id, session.user_id, is_admin=session.role == "admin")
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return {"success": True, "message": "Lesson plan deleted successfully"}
