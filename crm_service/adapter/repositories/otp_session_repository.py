from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import case
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_service.app.repositories.otp_session_repository import IOtpSessionRepository
from crm_service.domain.entities import OtpPurpose, OtpSession


class OtpSessionRepository(IOtpSessionRepository):
    """OTP session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, otp_session: OtpSession) -> OtpSession:
        self.session.add(otp_session)
        await self.session.flush()
        await self.session.refresh(otp_session)
        return otp_session

    async def find_active(self, email: str, purpose: OtpPurpose) -> Optional[OtpSession]:
        stmt = (
            select(OtpSession)
            .where(
                OtpSession.email == email,
                OtpSession.purpose == purpose,
                OtpSession.active == True,  # noqa: E712
            )
            .order_by(OtpSession.created_at.desc())
            .limit(1)
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def find_latest(self, email: str, purpose: OtpPurpose) -> Optional[OtpSession]:
        stmt = (
            select(OtpSession)
            .where(OtpSession.email == email, OtpSession.purpose == purpose)
            .order_by(OtpSession.created_at.desc())
            .limit(1)
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def find_locked(
        self, email: str, purpose: OtpPurpose, now: datetime
    ) -> Optional[OtpSession]:
        """Any session for the key, active or not, whose lock outlives now"""
        stmt = (
            select(OtpSession)
            .where(
                OtpSession.email == email,
                OtpSession.purpose == purpose,
                OtpSession.lock_until > now,
            )
            .order_by(OtpSession.lock_until.desc())
            .limit(1)
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def register_failed_attempt(
        self, session_id: UUID, now: datetime, lock_duration: timedelta
    ) -> OtpSession:
        """
        Increment attempt_count in one UPDATE; lock_until is set when the new
        count reaches max_attempts and cleared otherwise.
        """
        new_count = OtpSession.attempt_count + 1
        stmt = (
            update(OtpSession)
            .where(OtpSession.id == session_id)
            .values(
                attempt_count=new_count,
                last_attempt_at=now,
                lock_until=case(
                    (new_count >= OtpSession.max_attempts, now + lock_duration),
                    else_=None,
                ),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return await self.session.get(OtpSession, session_id, populate_existing=True)

    async def deactivate(self, session_id: UUID) -> None:
        stmt = update(OtpSession).where(OtpSession.id == session_id).values(active=False)
        await self.session.execute(stmt)
        await self.session.flush()

    async def deactivate_active(self, email: str, purpose: OtpPurpose) -> int:
        stmt = (
            update(OtpSession)
            .where(
                OtpSession.email == email,
                OtpSession.purpose == purpose,
                OtpSession.active == True,  # noqa: E712
            )
            .values(active=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def record_resend(self, session_id: UUID, now: datetime) -> OtpSession:
        stmt = (
            update(OtpSession)
            .where(OtpSession.id == session_id)
            .values(resend_count=OtpSession.resend_count + 1, last_sent_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return await self.session.get(OtpSession, session_id, populate_existing=True)
