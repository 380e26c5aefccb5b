"""Class management routes."""

from typing import List

from fastapi import APIRouter

from api.errors import DOMAIN_ERRORS, http_error
from api.routes.auth import AdminSession, StaffSession
from core.dependencies import ClassManagerDep
from models.class_model import ClassModel
from schemas.child import ChildInfo
from schemas.class_schema import (
    AddMemberRequest,
    AssignChildRequest,
    ClassInfo,
    ClassMemberInfo,
    CreateClassRequest,
)
from utils.class_manager import ClassManager

router = APIRouter(prefix="/api/classes", tags=["Class"])


def _build_class_info(model: ClassModel, class_manager: ClassManager) -> ClassInfo:
    members = [
        ClassMemberInfo(
            user_id=user.user_id,
            full_name=user.full_name,
            email=user.email,
            role=role,
        )
        for user, role in class_manager.list_members(model.id)
    ]
    return ClassInfo(
        id=model.id,
        name=model.name,
        grade=model.grade,
        created_by=model.created_by,
        created_at=model.created_at,
        updated_at=model.updated_at,
        members=members,
    )


@router.post("", response_model=ClassInfo, summary="Create a class")
def create_class(
    req: CreateClassRequest,
    session: AdminSession,
    class_manager: ClassManagerDep,
) -> ClassInfo:
    model = class_manager.create_class(req.name, req.grade, session.user_id)
    return _build_class_info(model, class_manager)


@router.get("", response_model=List[ClassInfo], summary="List classes")
def list_classes(
    session: StaffSession,
    class_manager: ClassManagerDep,
) -> List[ClassInfo]:
    """Admins see every class, teachers the classes they belong to."""
    if session.role == "admin":
        models = class_manager.list_classes()
    else:
        models = class_manager.list_classes_for_user(session.user_id)
    return [_build_class_info(model, class_manager) for model in models]


@router.delete("/{class_id}", summary="Delete a class")
def delete_class(class_id: str, session: AdminSession, class_manager: ClassManagerDep) -> dict:
    try:
        class_manager.delete_class(class_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return {"success": True, "message": "Class deleted successfully"}


@router.post("/{class_id}/members", response_model=ClassInfo, summary="Add a staff member")
def add_member(
    class_id: str,
    req: AddMemberRequest,
    session: AdminSession,
    class_manager: ClassManagerDep,
) -> ClassInfo:
    try:
        class_manager.add_member(class_id, req.user_id)
        model = class_manager.get_class(class_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return _build_class_info(model, class_manager)


@router.delete("/{class_id}/members/{user_id}", summary="Remove a staff member")
def remove_member(
    class_id: str,
    user_id: str,
    session: AdminSession,
    class_manager: ClassManagerDep,
) -> dict:
    try:
        class_manager.remove_member(class_id, user_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return {"success": True, "message": "Member removed successfully"}


@router.get("/{class_id}/children", response_model=List[ChildInfo], summary="List children in a class")
def list_class_children(
    class_id: str,
    session: StaffSession,
    class_manager: ClassManagerDep,
) -> List[ChildInfo]:
    try:
        class_manager.get_class(class_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return [ChildInfo.model_validate(c) for c in class_manager.list_children(class_id)]


@router.post("/{class_id}/children", summary="Assign a child to a class")
def assign_child(
    class_id: str,
    req: AssignChildRequest,
    session: AdminSession,
    class_manager: ClassManagerDep,
) -> dict:
    try:
        class_manager.assign_child(class_id, req.child_id, session.user_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return {"success": True, "message": "Child assigned successfully"}


@router.delete("/{class_id}/children/{child_id}", summary="Remove a child from a class")
def unassign_child(
    class_id: str,
    child_id: str,
    session: AdminSession,
    class_manager: ClassManagerDep,
) -> dict:
    try:
        class_manager.unassign_child(class_id, child_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return {"success": True, "message": "Child removed from class"}
