"""
RBAC Entities

Roles group permissions; users hold roles. A user's effective permission
set is the union of the permissions of all assigned roles.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel, UniqueConstraint

from crm_service.domain.clock import utcnow


class Role(SQLModel, table=True):
    """
    Role entity.

    Business Rules:
    - organization_id is NULL for system-wide roles (e.g. OWNER)
    """

    __tablename__ = "roles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=50, index=True)
    description: Optional[str] = Field(default=None, max_length=255)
    organization_id: Optional[UUID] = Field(
        default=None, foreign_key="organizations.id", index=True
    )
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        UniqueConstraint("name", "organization_id", name="uq_role_name_organization"),
    )


class Permission(SQLModel, table=True):
    """A single resource:action grant. Either part may be the wildcard "*"."""

    __tablename__ = "permissions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    resource: str = Field(max_length=50)
    action: str = Field(max_length=50)
    description: Optional[str] = Field(default=None, max_length=255)

    __table_args__ = (
        UniqueConstraint("resource", "action", name="uq_permission_resource_action"),
    )

    @property
    def key(self) -> str:
        return f"{self.resource}:{self.action}"


class UserRole(SQLModel, table=True):
    __tablename__ = "user_roles"

    user_id: UUID = Field(foreign_key="users.id", primary_key=True)
    role_id: UUID = Field(foreign_key="roles.id", primary_key=True)


class RolePermission(SQLModel, table=True):
    __tablename__ = "role_permissions"

    role_id: UUID = Field(foreign_key="roles.id", primary_key=True)
    permission_id: UUID = Field(foreign_key="permissions.id", primary_key=True)
