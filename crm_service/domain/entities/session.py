"""
Session Entity

A logged-in browser or device, identified by an opaque bearer token held
in an HTTP-only cookie. Only the SHA-256 of the token is stored.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from crm_service.domain.clock import utcnow
from .enums import SessionState


class Session(SQLModel, table=True):
    """
    Session entity - authentication session.

    Business Rules:
    - Active iff not revoked and not expired
    - Never deleted, only revoked (revoked_reason kept for audit)
    - token_last_four is for display only
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    organization_id: UUID = Field(foreign_key="organizations.id", index=True)

    token_hash: str = Field(unique=True, index=True, max_length=64)
    token_last_four: str = Field(max_length=4)

    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None, max_length=500)

    last_activity: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    revoked_reason: Optional[str] = Field(default=None, max_length=50)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_session_user_revoked", "user_id", "revoked_at"),)

    def state(self, now: datetime) -> SessionState:
        if self.revoked_at is not None:
            return SessionState.revoked
        if self.expires_at <= now:
            return SessionState.expired
        return SessionState.active
