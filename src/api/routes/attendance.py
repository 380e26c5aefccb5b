"""Attendance routes."""

from fastapi import APIRouter, HTTPException, status

from api.errors import DOMAIN_ERRORS, http_error
from api.routes.auth import ParentSession, StaffSession
from core.dependencies import AttendanceManagerDep, ChildManagerDep, ClassManagerDep
from schemas.attendance import (
    AttendanceHistory,
    AttendanceRecord,
    AttendanceSheet,
    MarkAttendanceRequest,
)
from schemas.user import AuthSession
from utils.class_manager import ClassManager

router = APIRouter(prefix="/api/attendance", tags=["Attendance"])


def _check_class_access(session: AuthSession, class_id: str, class_manager: ClassManager) -> None:
    try:
        class_manager.get_class(class_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    if session.role != "admin" and not class_manager.is_member(class_id, session.user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not assigned to this class.",
        )


@router.post("", response_model=AttendanceSheet, summary="Mark a class register")
def mark_attendance(
    req: MarkAttendanceRequest,
    session: StaffSession,
    attendance_manager: AttendanceManagerDep,
    class_manager: ClassManagerDep,
) -> AttendanceSheet:
    _check_class_access(session, req.class_id, class_manager)
    enrolled = {c.id for c in class_manager.list_children(req.class_id)}
    strangers = [r.child_id for r in req.records if r.child_id not in enrolled]
    if strangers:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Children not in this class: {', '.join(strangers)}",
        )
    try:
        attendance_manager.mark(req.class_id, req.date, req.records, session.user_id)
        rows, counts = attendance_manager.get_sheet(req.class_id, req.date)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return AttendanceSheet(
        class_id=req.class_id,
        date=req.date,
        records=[AttendanceRecord.model_validate(r) for r in rows],
        counts=counts,
    )


@router.get("/classes/{class_id}", response_model=AttendanceSheet, summary="Class register for a day")
def get_sheet(
    class_id: str,
    date: str,
    session: StaffSession,
    attendance_manager: AttendanceManagerDep,
    class_manager: ClassManagerDep,
) -> AttendanceSheet:
    _check_class_access(session, class_id, class_manager)
    try:
        rows, counts = attendance_manager.get_sheet(class_id, date)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return AttendanceSheet(
        class_id=class_id,
        date=date,
        records=[AttendanceRecord.model_validate(r) for r in rows],
        counts=counts,
    )


@router.get("/children/{child_id}", response_model=AttendanceHistory, summary="Recent attendance of my child")
def child_history(
    child_id: str,
    session: ParentSession,
    attendance_manager: AttendanceManagerDep,
    child_manager: ChildManagerDep,
) -> AttendanceHistory:
    try:
        child_manager.get_owned_child(child_id, session.user_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e

    records = []
    for row, class_name in attendance_manager.history_for_child(child_id):
        record = AttendanceRecord.model_validate(row)
        record.class_name = class_name
        records.append(record)
    return AttendanceHistory(child_id=child_id, records=records)
