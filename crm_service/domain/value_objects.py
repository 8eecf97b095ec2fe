"""
Immutable value objects passed between the HTTP layer and the use cases.
"""

from dataclasses import dataclass, field
from typing import List, Literal, Optional
from uuid import UUID

from crm_service.domain.entities import Organization, Profile, User


@dataclass(frozen=True)
class RequestContext:
    """Client metadata recorded on sessions, OTP rows and audit logs."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_id: Optional[str] = None


@dataclass(frozen=True)
class AuthContext:
    """Minimal identity attached to an authenticated request."""

    user_id: UUID
    session_id: UUID
    organization_id: UUID


@dataclass(frozen=True)
class PermissionScope:
    """Visibility of a resource for one request: whole organization or own records."""

    can_access_all: bool
    filter_type: Literal["organization", "own"]


@dataclass
class UserContext:
    """User with profile, organization and flattened permission strings."""

    user: User
    organization: Optional[Organization]
    profile: Optional[Profile] = None
    permissions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AuthorizationContext:
    """Result of a permission check, used to filter downstream queries."""

    auth: AuthContext
    permissions: List[str]
    scope: PermissionScope
