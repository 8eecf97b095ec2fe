"""
OtpSession Entity

Time-boxed container for one verification cycle of an (email, purpose) key,
grouping the attempt counter, the lock and the rotated tokens.
"""

import math
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from crm_service.domain.clock import utcnow
from crm_service.domain.constants import OTP_MAX_ATTEMPTS
from .enums import OtpPurpose, OtpSessionState


class OtpSession(SQLModel, table=True):
    """
    OtpSession entity.

    Business Rules:
    - At most one active session per (email, purpose), backed by a partial
      unique index
    - Reaching max_attempts sets lock_until; attempt_count is not reset
    - Marked inactive on success or replacement, never deleted
    """

    __tablename__ = "otp_sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    organization_id: UUID = Field(foreign_key="organizations.id")

    email: str = Field(max_length=255, index=True)
    purpose: OtpPurpose
    active: bool = Field(default=True)
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    attempt_count: int = Field(default=0)
    max_attempts: int = Field(default=OTP_MAX_ATTEMPTS)
    lock_until: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    resend_count: int = Field(default=0)
    last_sent_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    last_attempt_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None, max_length=500)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_otp_session_email_purpose", "email", "purpose"),
        Index(
            "uq_otp_session_active_email_purpose",
            "email",
            "purpose",
            unique=True,
            sqlite_where=text("active = 1"),
            postgresql_where=text("active = true"),
        ),
    )

    def is_locked(self, now: datetime) -> bool:
        return self.lock_until is not None and self.lock_until > now

    def lock_wait_seconds(self, now: datetime) -> int:
        if self.lock_until is None:
            return 0
        return max(0, math.ceil((self.lock_until - now).total_seconds()))

    def state(self, now: datetime) -> OtpSessionState:
        if not self.active:
            return OtpSessionState.inactive
        if self.expires_at < now:
            return OtpSessionState.expired
        if self.is_locked(now):
            return OtpSessionState.locked
        return OtpSessionState.active
