"""
User Entity

Identity and credential holder, owned by one organization.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from crm_service.domain.clock import utcnow


class User(SQLModel, table=True):
    """
    User entity - identity + credential holder.

    Business Rules:
    - Email is unique and stored lower-cased
    - is_locked is set exactly when login_attempts reaches MAX_LOGIN_ATTEMPTS
    - Only a password reset unlocks an account (clears both fields)
    - Password stored as bcrypt hash
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)

    verified: bool = Field(default=False)
    verified_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    is_locked: bool = Field(default=False)
    login_attempts: int = Field(default=0)
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    organization_id: UUID = Field(foreign_key="organizations.id", index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_verified", "verified"),)

    def mark_verified(self, now: datetime) -> None:
        self.verified = True
        self.verified_at = now

    def apply_password_reset(self, password_hash: str, now: datetime) -> None:
        """New credentials unlock the account and double as email verification."""
        self.password_hash = password_hash
        self.login_attempts = 0
        self.is_locked = False
        if not self.verified:
            self.mark_verified(now)
