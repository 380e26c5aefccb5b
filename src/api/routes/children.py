"""Child record routes for parents and administrators."""

from typing import Optional

from fastapi import APIRouter

from api.errors import DOMAIN_ERRORS, http_error
from api.routes.auth import AdminSession, ParentSession
from core.dependencies import ChildManagerDep
from models.child import ChildModel
from schemas.child import (
    ChildInfo,
    ChildListResponse,
    CreateChildRequest,
    LinkParentRequest,
    UpdateChildRequest,
)

router = APIRouter(prefix="/api/children", tags=["Children"])


def _build_child_info(model: ChildModel, parent_name: Optional[str] = None) -> ChildInfo:
    info = ChildInfo.model_validate(model)
    info.parent_name = parent_name
    return info


# --- Parent ---


@router.get("/mine", response_model=ChildListResponse, summary="List my children")
def list_my_children(session: ParentSession, child_manager: ChildManagerDep) -> ChildListResponse:
    models = child_manager.list_children_for_parent(session.user_id)
    return ChildListResponse(
        children=[_build_child_info(m, session.user.full_name) for m in models]
    )


@router.post("/mine", response_model=ChildInfo, summary="Add a child")
def add_my_child(
    req: CreateChildRequest,
    session: ParentSession,
    child_manager: ChildManagerDep,
) -> ChildInfo:
    try:
        model = child_manager.create_child(
            parent_id=session.user_id,
            name=req.name,
            date_of_birth=req.date_of_birth,
            favorite_animal=req.favorite_animal,
            grade=req.grade,
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return _build_child_info(model, session.user.full_name)


@router.patch("/mine/{child_id}", response_model=ChildInfo, summary="Update my child")
def update_my_child(
    child_id: str,
    req: UpdateChildRequest,
    session: ParentSession,
    child_manager: ChildManagerDep,
) -> ChildInfo:
    try:
        model = child_manager.get_owned_child(child_id, session.user_id)
        model = child_manager.update_child(model, req.model_dump())
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return _build_child_info(model, session.user.full_name)


@router.delete("/mine/{child_id}", summary="Remove my child")
def delete_my_child(child_id: str, session: ParentSession, child_manager: ChildManagerDep) -> dict:
    try:
        model = child_manager.get_owned_child(child_id, session.user_id)
        child_manager.delete_child(model)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return {"success": True, "message": "Child removed successfully"}


# --- Admin ---


@router.get("", response_model=ChildListResponse, summary="List all children")
def list_children(
    session: AdminSession,
    child_manager: ChildManagerDep,
    unlinked: bool = False,
) -> ChildListResponse:
    """All children with their parent's name; ``unlinked=true`` lists only
    children that still need a parent account."""
    if unlinked:
        return ChildListResponse(
            children=[_build_child_info(m) for m in child_manager.list_unlinked_children()]
        )
    return ChildListResponse(
        children=[_build_child_info(m, name) for m, name in child_manager.list_all_children()]
    )


@router.patch("/{child_id}", response_model=ChildInfo, summary="Update a child")
def update_child(
    child_id: str,
    req: UpdateChildRequest,
    session: AdminSession,
    child_manager: ChildManagerDep,
) -> ChildInfo:
    try:
        model = child_manager.get_child(child_id)
        model = child_manager.update_child(model, req.model_dump())
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return _build_child_info(model)


@router.post("/{child_id}/parent", response_model=ChildInfo, summary="Link a child to a parent")
def link_parent(
    child_id: str,
    req: LinkParentRequest,
    session: AdminSession,
    child_manager: ChildManagerDep,
) -> ChildInfo:
    try:
        model = child_manager.link_parent(child_id, req.parent_email)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return _build_child_info(model)


@router.delete("/{child_id}", summary="Delete a child")
def delete_child(child_id: str, session: AdminSession, child_manager: ChildManagerDep) -> dict:
    try:
        child_manager.delete_child(child_manager.get_child(child_id))
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return {"success": True, "message": "Child deleted successfully"}
