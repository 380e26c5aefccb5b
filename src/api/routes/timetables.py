"""Timetable routes."""

from typing import Dict, List

from fastapi import APIRouter

from api.errors import DOMAIN_ERRORS, http_error
from api.routes.auth import AdminSession, CurrentSession, ParentSession
from core.dependencies import (
    ChildManagerDep,
    ClassManagerDep,
    TimetableManagerDep,
    UserManagerDep,
)
from models.timetable import TimetableEntryModel
from schemas.timetable import (
    CreateTimetableEntryRequest,
    TimetableEntryInfo,
    TimetableResponse,
)
from utils.user_manager import UserManager

router = APIRouter(prefix="/api/timetables", tags=["Timetables"])


def _build_entries(
    models: List[TimetableEntryModel],
    user_manager: UserManager,
    class_names: Dict[str, str] = None,
) -> List[TimetableEntryInfo]:
    teacher_names = user_manager.display_names(m.teacher_id for m in models)
    entries = []
    for model in models:
        info = TimetableEntryInfo.model_validate(model)
        info.teacher_name = teacher_names.get(model.teacher_id)
        if class_names:
            info.class_name = class_names.get(model.class_id)
        entries.append(info)
    return entries


@router.post("", response_model=TimetableEntryInfo, summary="Add a timetable slot")
def create_entry(
    req: CreateTimetableEntryRequest,
    session: AdminSession,
    timetable_manager: TimetableManagerDep,
    user_manager: UserManagerDep,
) -> TimetableEntryInfo:
    try:
        model = timetable_manager.create_entry(
            class_id=req.class_id,
            day_of_week=req.day_of_week,
            start_time=req.start_time,
            end_time=req.end_time,
            subject=req.subject,
            teacher_id=req.teacher_id,
            created_by=session.user_id,
            room=req.room,
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return _build_entries([model], user_manager)[0]


@router.delete("/{entry_id}", summary="Delete a timetable slot")
def delete_entry(entry_id: str, session: AdminSession, timetable_manager: TimetableManagerDep) -> dict:
    try:
        timetable_manager.delete_entry(entry_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return {"success": True, "message": "Timetable entry deleted successfully"}


@router.get("/classes/{class_id}", response_model=TimetableResponse, summary="Timetable of a class")
def class_timetable(
    class_id: str,
    session: CurrentSession,
    timetable_manager: TimetableManagerDep,
    user_manager: UserManagerDep,
) -> TimetableResponse:
    models = timetable_manager.list_for_class(class_id)
    return TimetableResponse(entries=_build_entries(models, user_manager))


@router.get("/mine", response_model=TimetableResponse, summary="Timetables of my children's classes")
def my_children_timetable(
    session: ParentSession,
    timetable_manager: TimetableManagerDep,
    child_manager: ChildManagerDep,
    class_manager: ClassManagerDep,
    user_manager: UserManagerDep,
) -> TimetableResponse:
    child_ids = child_manager.list_child_ids_for_parent(session.user_id)
    class_ids = class_manager.list_class_ids_for_children(child_ids)
    class_names = {c_id: class_manager.get_class(c_id).name for c_id in class_ids}
    models = timetable_manager.list_for_classes(class_ids)
    return TimetableResponse(entries=_build_entries(models, user_manager, class_names))
