from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_service.app.repositories.session_repository import (
    ISessionRepository,
    SessionAuthView,
)
from crm_service.domain.clock import utcnow
from crm_service.domain.entities import Organization, Session, User


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def find_by_token_hash(self, token_hash: str) -> Optional[Session]:
        stmt = select(Session).where(Session.token_hash == token_hash)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_for_auth(self, token_hash: str) -> Optional[SessionAuthView]:
        """
        Single query for the authentication gate.

        Outer joins so that a dangling user or organization reference comes
        back as None instead of hiding the session.
        """
        stmt = (
            select(
                Session,
                User.id.label("user_id"),
                User.verified,
                User.is_locked,
                Organization.id.label("organization_id"),
                Organization.deleted_at,
            )
            .outerjoin(User, User.id == Session.user_id)
            .outerjoin(Organization, Organization.id == Session.organization_id)
            .where(Session.token_hash == token_hash)
        )
        result = await self.session.execute(stmt)
        row = result.first()
        if row is None:
            return None

        session_obj, user_id, verified, is_locked, organization_id, deleted_at = row
        return SessionAuthView(
            session=session_obj,
            user_id=user_id,
            user_verified=verified,
            user_is_locked=is_locked,
            organization_id=organization_id,
            organization_deleted_at=deleted_at,
        )

    async def touch(self, session_id: UUID, now: datetime) -> None:
        stmt = update(Session).where(Session.id == session_id).values(last_activity=now)
        await self.session.execute(stmt)
        await self.session.flush()

    async def revoke(self, session_id: UUID, reason: str) -> bool:
        """Revoke a specific session by ID"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked_at.is_(None))
            .values(revoked_at=utcnow(), revoked_reason=reason)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_all_for_user(self, user_id: UUID, reason: str) -> int:
        """Revoke all active sessions for a user"""
        stmt = (
            update(Session)
            .where(Session.user_id == user_id, Session.revoked_at.is_(None))
            .values(revoked_at=utcnow(), revoked_reason=reason)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_all_except(self, user_id: UUID, session_id: UUID, reason: str) -> int:
        """Revoke all sessions for a user except the specified session"""
        stmt = (
            update(Session)
            .where(
                Session.user_id == user_id,
                Session.id != session_id,
                Session.revoked_at.is_(None),
            )
            .values(revoked_at=utcnow(), revoked_reason=reason)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def list_active(
        self, organization_id: UUID, user_id: Optional[UUID] = None
    ) -> List[Session]:
        stmt = select(Session).where(
            Session.organization_id == organization_id,
            Session.revoked_at.is_(None),
            Session.expires_at > utcnow(),
        )
        if user_id is not None:
            stmt = stmt.where(Session.user_id == user_id)
        stmt = stmt.order_by(Session.last_activity.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
