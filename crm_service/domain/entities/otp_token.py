from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from crm_service.domain.clock import utcnow
from crm_service.domain.constants import OTP_LENGTH
from .enums import OtpTokenState


class OtpToken(SQLModel, table=True):
    """
    One issued code, child of an OtpSession.

    Only the newest unconsumed token of a session is checked; older ones are
    consumed in bulk on rotation.
    """

    __tablename__ = "otp_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    session_id: UUID = Field(foreign_key="otp_sessions.id", index=True)
    code_hash: str = Field(max_length=64)
    code_length: int = Field(default=OTP_LENGTH)
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    consumed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    def state(self, now: datetime) -> OtpTokenState:
        if self.consumed_at is not None:
            return OtpTokenState.consumed
        if self.expires_at < now:
            return OtpTokenState.expired
        return OtpTokenState.usable
