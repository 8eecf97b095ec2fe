from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from crm_service.domain.clock import utcnow
from .enums import OtpAttemptStatus, OtpPurpose


class OtpAttempt(SQLModel, table=True):
    """Append-only record of one verification attempt or token rotation."""

    __tablename__ = "otp_attempts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    session_id: UUID = Field(foreign_key="otp_sessions.id", index=True)
    token_id: Optional[UUID] = Field(default=None, foreign_key="otp_tokens.id")
    user_id: Optional[UUID] = Field(default=None, foreign_key="users.id")
    email: str = Field(max_length=255)
    purpose: OtpPurpose
    status: OtpAttemptStatus
    reason: Optional[str] = Field(default=None, max_length=50)
    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
