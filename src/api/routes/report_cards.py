"""Report card routes."""

import mimetypes

from fastapi import APIRouter, File, Form, HTTPException, Response, UploadFile, status

from api.errors import DOMAIN_ERRORS, http_error
from api.routes.auth import CurrentSession, ParentSession, StaffSession
from core.dependencies import AuditLogManagerDep, ChildManagerDep, ReportCardManagerDep
from schemas.report_card import ReportCardInfo, ReportCardListResponse

router = APIRouter(prefix="/api/report-cards", tags=["Report Cards"])


def _build_list(rows) -> ReportCardListResponse:
    cards = []
    for model, child_name in rows:
        info = ReportCardInfo.model_validate(model)
        info.child_name = child_name
        cards.append(info)
    return ReportCardListResponse(report_cards=cards)


@router.post("", response_model=ReportCardInfo, summary="Upload a report card")
async def upload_report_card(
    session: StaffSession,
    report_card_manager: ReportCardManagerDep,
    audit_log_manager: AuditLogManagerDep,
    child_id: str = Form(...),
    term: str = Form(...),
    year: int = Form(...),
    file: UploadFile = File(..., description="Report card file"),
) -> ReportCardInfo:
    data = await file.read()
    try:
        model = report_card_manager.upload(
            child_id=child_id,
            term=term,
            year=year,
            file_name=file.filename or "report",
            data=data,
            uploaded_by=session.user_id,
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e

    audit_log_manager.log_action(
        session.user_id,
        "report_card_uploaded",
        {"child_id": child_id, "term": model.term, "year": model.year},
    )
    return ReportCardInfo.model_validate(model)


@router.get("", response_model=ReportCardListResponse, summary="List report cards")
def list_report_cards(
    session: StaffSession,
    report_card_manager: ReportCardManagerDep,
) -> ReportCardListResponse:
    return _build_list(report_card_manager.list_all())


@router.get("/mine", response_model=ReportCardListResponse, summary="Report cards of my children")
def list_my_report_cards(
    session: ParentSession,
    report_card_manager: ReportCardManagerDep,
    child_manager: ChildManagerDep,
) -> ReportCardListResponse:
    child_ids = child_manager.list_child_ids_for_parent(session.user_id)
    return _build_list(report_card_manager.list_for_children(child_ids))


@router.get("/{report_card_id}/download", summary="Download a report card")
def download_report_card(
    report_card_id: str,
    session: CurrentSession,
    report_card_manager: ReportCardManagerDep,
    child_manager: ChildManagerDep,
) -> Response:
    """Staff can download any card; parents only their own children's."""
    try:
        model = report_card_manager.get_report_card(report_card_id)
        if session.role == "parent":
            child_manager.get_owned_child(model.child_id, session.user_id)
        elif session.role not in ("admin", "teacher") or (
            session.role == "teacher" and not session.is_verified
        ):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action.",
            )
        data = report_card_manager.download(model)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e

    media_type = mimetypes.guess_type(model.file_name)[0] or "application/octet-stream"
    return Response(
        content=data,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{model.file_name}"'},
    )


@router.delete("/{report_card_id}", summary="Delete a report card")
def delete_report_card(
    report_card_id: str,
    session: StaffSession,
    report_card_manager: ReportCardManagerDep,
) -> dict:
    try:
        report_card_manager.delete(report_card_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return {"success": True, "message": "Report card deleted successfully"}
