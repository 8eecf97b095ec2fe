from sqlmodel.ext.asyncio.session import AsyncSession

from crm_service.app.repositories.otp_attempt_repository import IOtpAttemptRepository
from crm_service.domain.entities import OtpAttempt


class OtpAttemptRepository(IOtpAttemptRepository):
    """OTP attempt repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, attempt: OtpAttempt) -> OtpAttempt:
        self.session.add(attempt)
        await self.session.flush()
        return attempt
