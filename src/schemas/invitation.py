"""Teacher invitation schemas."""

from typing import List, Literal

from pydantic import BaseModel, EmailStr, Field

InvitationDisplayStatus = Literal["pending", "accepted", "expired"]


class SendInvitationRequest(BaseModel):
    email: EmailStr


class InvitationInfo(BaseModel):
    id: str
    email: str
    status: InvitationDisplayStatus = Field(
        description="Derived status: 'expired' is computed from expires_at, not stored."
    )
    invited_by: str
    created_at: str
    expires_at: str


class InvitationListResponse(BaseModel):
    invitations: List[InvitationInfo]


class InvitationValidation(BaseModel):
    """Result of a successful token validation."""

    email: str
    status: Literal["pending"]


class AcceptInvitationRequest(BaseModel):
    token: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    password: str
    confirm_password: str


class SendInvitationResponse(BaseModel):
    success: bool
    message: str
    invitation: InvitationInfo
