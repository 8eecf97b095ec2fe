"""
AuditLog Entity

Immutable record of every security-relevant transition.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from crm_service.domain.clock import utcnow
from .enums import AuditAction


class AuditLog(SQLModel, table=True):
    """
    AuditLog entity - append-only security log.

    Business Rules:
    - Never updated or deleted
    - before/after hold JSON snapshots of the fields that changed
    - organization_id is nullable for events without a resolved tenant
    """

    __tablename__ = "audit_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    organization_id: Optional[UUID] = Field(default=None, index=True)
    user_id: Optional[UUID] = Field(default=None, index=True)

    action: AuditAction
    resource: str = Field(max_length=50)
    resource_id: Optional[str] = Field(default=None, max_length=64)

    before: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    after: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None, max_length=500)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_audit_log_created_at", "created_at"),
        Index("idx_audit_log_org_action", "organization_id", "action"),
    )
