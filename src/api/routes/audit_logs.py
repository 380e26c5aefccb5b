"""Audit log routes."""

from fastapi import APIRouter

from api.routes.auth import AdminSession
from core.dependencies import AuditLogManagerDep
from schemas.audit_log import AuditLogInfo, AuditLogListResponse

router = APIRouter(prefix="/api/audit-logs", tags=["Audit Log"])


@router.get("", response_model=AuditLogListResponse, summary="Most recent audit entries")
def list_audit_logs(
    session: AdminSession,
    audit_log_manager: AuditLogManagerDep,
) -> AuditLogListResponse:
    logs = []
    for model, email in audit_log_manager.list_recent():
        info = AuditLogInfo.model_validate(model)
        info.user_email = email or "Unknown"
        logs.append(info)
    return AuditLogListResponse(logs=logs)
