"""
Organization Entity

The tenant boundary. Every user and session belongs to exactly one.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from crm_service.domain.clock import utcnow


class Organization(SQLModel, table=True):
    """
    Organization entity - tenant boundary.

    Business Rules:
    - Slug is unique, derived from the name and disambiguated on collision
    - Soft-deleted organizations (deleted_at set) block login and authentication
    """

    __tablename__ = "organizations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100)
    slug: str = Field(unique=True, index=True, max_length=120)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None
