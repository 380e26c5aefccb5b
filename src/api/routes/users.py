"""User administration routes."""

from typing import List

from fastapi import APIRouter, HTTPException, status

from api.errors import DOMAIN_ERRORS, http_error
from api.routes.auth import AdminSession
from core.dependencies import AuditLogManagerDep, ChildManagerDep, UserManagerDep
from schemas.user import SetVerificationRequest, UserWithRole

router = APIRouter(prefix="/api/users", tags=["Users"])


def _build_user(user, role_model) -> UserWithRole:
    role = role_model.role if role_model else None
    is_verified = bool(role_model) and (
        role in ("admin", "parent") or bool(role_model.is_verified)
    )
    return UserWithRole(
        user_id=user.user_id,
        email=user.email,
        full_name=user.full_name,
        created_at=user.created_at,
        role=role,
        is_verified=is_verified,
    )


@router.get("", response_model=List[UserWithRole], summary="List users with roles")
def list_users(session: AdminSession, user_manager: UserManagerDep) -> List[UserWithRole]:
    return [_build_user(user, role) for user, role in user_manager.list_users()]


@router.get("/teachers", response_model=List[UserWithRole], summary="List teachers")
def list_teachers(session: AdminSession, user_manager: UserManagerDep) -> List[UserWithRole]:
    return [
        _build_user(user, role) for user, role in user_manager.list_users_by_role("teacher")
    ]


@router.put("/{user_id}/verification", summary="Approve or revoke a teacher")
def set_verification(
    user_id: str,
    req: SetVerificationRequest,
    session: AdminSession,
    user_manager: UserManagerDep,
    audit_log_manager: AuditLogManagerDep,
) -> dict:
    try:
        user_manager.set_teacher_verified(user_id, req.is_verified)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e

    action = "teacher_verified" if req.is_verified else "teacher_unverified"
    audit_log_manager.log_action(session.user_id, action, {"teacher_id": user_id})
    return {"success": True, "message": "Teacher verification updated"}


@router.delete("/{user_id}", summary="Delete a user")
def delete_user(
    user_id: str,
    session: AdminSession,
    user_manager: UserManagerDep,
    child_manager: ChildManagerDep,
    audit_log_manager: AuditLogManagerDep,
) -> dict:
    """Delete a user together with their children and role record."""
    if user_id == session.user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account.",
        )
    user = user_manager.get_user_by_id(user_id)
    try:
        if user is not None:
            child_manager.delete_children_for_parent(user_id)
        user_manager.delete_user(user_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e

    audit_log_manager.log_action(session.user_id, "user_deleted", {"email": user.email})
    return {"success": True, "message": "User deleted successfully"}
