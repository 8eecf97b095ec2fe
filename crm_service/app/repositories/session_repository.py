from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from crm_service.domain.entities import Session


@dataclass
class SessionAuthView:
    """Session joined with the minimal user/organization fields the auth gate needs"""

    session: Session
    user_id: Optional[UUID] = None
    user_verified: Optional[bool] = None
    user_is_locked: Optional[bool] = None
    organization_id: Optional[UUID] = None
    organization_deleted_at: Optional[datetime] = None


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def find_by_token_hash(self, token_hash: str) -> Optional[Session]:
        """Find session by the SHA-256 of its bearer token"""
        pass

    @abstractmethod
    async def find_for_auth(self, token_hash: str) -> Optional[SessionAuthView]:
        """Find session with minimal joined user/organization fields"""
        pass

    @abstractmethod
    async def touch(self, session_id: UUID, now: datetime) -> None:
        """Set last_activity"""
        pass

    @abstractmethod
    async def revoke(self, session_id: UUID, reason: str) -> bool:
        """Revoke one active session. Returns True if it was active."""
        pass

    @abstractmethod
    async def revoke_all_for_user(self, user_id: UUID, reason: str) -> int:
        """Revoke every active session of a user. Returns count."""
        pass

    @abstractmethod
    async def revoke_all_except(self, user_id: UUID, session_id: UUID, reason: str) -> int:
        """Revoke every active session of a user except one. Returns count."""
        pass

    @abstractmethod
    async def list_active(
        self, organization_id: UUID, user_id: Optional[UUID] = None
    ) -> List[Session]:
        """List active sessions of an organization, optionally of one user"""
        pass
