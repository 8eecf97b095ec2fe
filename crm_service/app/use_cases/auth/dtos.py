"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from crm_service.domain.entities import Session
from crm_service.domain.value_objects import UserContext


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(BaseModel):
    """Validated registration intent"""

    first_name: str
    last_name: str
    email: str
    password: str
    organization_name: str


class ResetPasswordCommand(BaseModel):
    email: str
    code: str
    new_password: str


class ChangePasswordCommand(BaseModel):
    current_password: str
    new_password: str


# ============================================================================
# Response DTOs
# ============================================================================


class RegisterResponse(BaseModel):
    """Response for registration; the code itself travels out-of-band"""

    success: bool = True
    message: str
    otp_expires_at: datetime


class VerifyEmailResponse(BaseModel):
    success: bool = True
    message: str


class ResendCodeResponse(BaseModel):
    success: bool = True
    message: str
    otp_expires_at: Optional[datetime] = None


class ForgotPasswordResponse(BaseModel):
    """Identical for every internal outcome"""

    success: bool = True
    message: str


class ResetPasswordResponse(BaseModel):
    success: bool = True
    message: str


class ChangePasswordResponse(BaseModel):
    success: bool = True
    message: str
    other_sessions_revoked: int


class LogoutResponse(BaseModel):
    success: bool = True
    message: str
    sessions_revoked: int


class ProfileInfo(BaseModel):
    first_name: str
    last_name: str


class OrganizationInfo(BaseModel):
    id: str
    name: str
    slug: str


class UserInfo(BaseModel):
    """User details shared by login and /me responses"""

    id: str
    email: str
    verified: bool
    profile: Optional[ProfileInfo] = None
    organization: Optional[OrganizationInfo] = None
    permissions: List[str]

    @classmethod
    def from_context(cls, context: UserContext) -> "UserInfo":
        user = context.user
        profile = None
        if context.profile is not None:
            profile = ProfileInfo(
                first_name=context.profile.first_name,
                last_name=context.profile.last_name,
            )
        organization = None
        if context.organization is not None:
            organization = OrganizationInfo(
                id=str(context.organization.id),
                name=context.organization.name,
                slug=context.organization.slug,
            )
        return cls(
            id=str(user.id),
            email=user.email,
            verified=user.verified,
            profile=profile,
            organization=organization,
            permissions=list(context.permissions),
        )


class SessionInfo(BaseModel):
    id: str
    expires_at: datetime
    last_activity: datetime
    token_last_four: str

    @classmethod
    def from_session(cls, session: Session) -> "SessionInfo":
        return cls(
            id=str(session.id),
            expires_at=session.expires_at,
            last_activity=session.last_activity,
            token_last_four=session.token_last_four,
        )


class LoginResponse(BaseModel):
    """Response for user login use case"""

    success: bool = True
    message: str
    user: UserInfo
    session: SessionInfo


class LoginResult(BaseModel):
    """Login outcome; the raw token is handed to the cookie, never the body"""

    response: LoginResponse
    session_token: str
