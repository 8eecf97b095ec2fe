from datetime import datetime
from typing import List
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_service.app.repositories.otp_token_repository import IOtpTokenRepository
from crm_service.domain.entities import OtpToken


class OtpTokenRepository(IOtpTokenRepository):
    """OTP token repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, token: OtpToken) -> OtpToken:
        self.session.add(token)
        await self.session.flush()
        await self.session.refresh(token)
        return token

    async def find_unconsumed(self, session_id: UUID) -> List[OtpToken]:
        stmt = (
            select(OtpToken)
            .where(OtpToken.session_id == session_id, OtpToken.consumed_at.is_(None))
            .order_by(OtpToken.created_at.desc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def consume(self, token_id: UUID, now: datetime) -> None:
        stmt = (
            update(OtpToken)
            .where(OtpToken.id == token_id, OtpToken.consumed_at.is_(None))
            .values(consumed_at=now)
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def consume_all(self, session_id: UUID, now: datetime) -> int:
        stmt = (
            update(OtpToken)
            .where(OtpToken.session_id == session_id, OtpToken.consumed_at.is_(None))
            .values(consumed_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
