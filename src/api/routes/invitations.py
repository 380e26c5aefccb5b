"""Teacher invitation routes."""

import logging

from fastapi import APIRouter, HTTPException, Request, status

from api.errors import DOMAIN_ERRORS, http_error
from api.routes.auth import AdminSession
from core.dependencies import AuditLogManagerDep, InvitationManagerDep
from core.exceptions import InvitationDeliveryError
from models.invitation import TeacherInvitationModel
from schemas.invitation import (
    AcceptInvitationRequest,
    InvitationInfo,
    InvitationListResponse,
    InvitationValidation,
    SendInvitationRequest,
    SendInvitationResponse,
)
from utils.invitation_manager import display_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/invitations", tags=["Invitation"])


def _build_invitation_info(model: TeacherInvitationModel, now) -> InvitationInfo:
    return InvitationInfo(
        id=model.id,
        email=model.email,
        status=display_status(model, now),
        invited_by=model.invited_by,
        created_at=model.created_at,
        expires_at=model.expires_at,
    )


def _send(
    req: SendInvitationRequest,
    request: Request,
    session,
    invitation_manager,
    audit_log_manager,
) -> SendInvitationResponse:
    origin = request.headers.get("origin")
    try:
        model = invitation_manager.issue(req.email, session.user_id, origin=origin)
    except InvitationDeliveryError as e:
        # The token is stored; only the email failed
        audit_log_manager.log_action(
            session.user_id, "invitation_sent", {"email": str(req.email), "delivered": False}
        )
        raise http_error(e) from e
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e

    audit_log_manager.log_action(
        session.user_id, "invitation_sent", {"email": model.email, "delivered": True}
    )
    return SendInvitationResponse(
        success=True,
        message="Invitation sent successfully",
        invitation=_build_invitation_info(model, invitation_manager.now()),
    )


@router.post("", response_model=SendInvitationResponse, summary="Invite a teacher")
def send_invitation(
    req: SendInvitationRequest,
    request: Request,
    session: AdminSession,
    invitation_manager: InvitationManagerDep,
    audit_log_manager: AuditLogManagerDep,
) -> SendInvitationResponse:
    return _send(req, request, session, invitation_manager, audit_log_manager)


@router.post("/resend", response_model=SendInvitationResponse, summary="Resend an invitation")
def resend_invitation(
    req: SendInvitationRequest,
    request: Request,
    session: AdminSession,
    invitation_manager: InvitationManagerDep,
    audit_log_manager: AuditLogManagerDep,
) -> SendInvitationResponse:
    """Rotate the token of an invitation and email the new link."""
    return _send(req, request, session, invitation_manager, audit_log_manager)


@router.get("", response_model=InvitationListResponse, summary="List invitations")
def list_invitations(
    session: AdminSession,
    invitation_manager: InvitationManagerDep,
) -> InvitationListResponse:
    now = invitation_manager.now()
    return InvitationListResponse(
        invitations=[
            _build_invitation_info(model, now)
            for model in invitation_manager.list_invitations()
        ]
    )


@router.get("/validate", response_model=InvitationValidation, summary="Check an invitation token")
def validate_invitation(
    token: str,
    invitation_manager: InvitationManagerDep,
) -> InvitationValidation:
    try:
        return invitation_manager.validate(token)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e


@router.post("/accept", summary="Create a teacher account from an invitation")
def accept_invitation(
    req: AcceptInvitationRequest,
    invitation_manager: InvitationManagerDep,
    audit_log_manager: AuditLogManagerDep,
) -> dict:
    """Register the invited teacher.

    The account email always comes from the invitation, never from the
    request body.
    """
    if req.password != req.confirm_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Passwords do not match",
        )
    try:
        user = invitation_manager.consume(req.token, req.password, req.full_name)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e

    audit_log_manager.log_action(
        user.user_id, "teacher_registered", {"email": user.email, "via": "invitation"}
    )
    return {
        "success": True,
        "message": "Your teacher account has been created. You can now log in.",
        "user_id": user.user_id,
        "email": user.email,
    }
