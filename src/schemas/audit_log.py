from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class AuditLogInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    action: str
    details: Optional[Dict[str, Any]] = None
    created_at: str
    user_email: str = "Unknown"


class AuditLogListResponse(BaseModel):
    logs: List[AuditLogInfo]
