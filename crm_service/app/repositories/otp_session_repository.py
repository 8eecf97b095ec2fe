from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from crm_service.domain.entities import OtpPurpose, OtpSession


class IOtpSessionRepository(ABC):
    """OTP session repository interface - application layer"""

    @abstractmethod
    async def create(self, otp_session: OtpSession) -> OtpSession:
        """Create a new OTP session"""
        pass

    @abstractmethod
    async def find_active(self, email: str, purpose: OtpPurpose) -> Optional[OtpSession]:
        """Get the newest active session for (email, purpose)"""
        pass

    @abstractmethod
    async def find_latest(self, email: str, purpose: OtpPurpose) -> Optional[OtpSession]:
        """Get the newest session for (email, purpose) regardless of state"""
        pass

    @abstractmethod
    async def find_locked(
        self, email: str, purpose: OtpPurpose, now: datetime
    ) -> Optional[OtpSession]:
        """Get the most restrictive session for (email, purpose) locked past now"""
        pass

    @abstractmethod
    async def register_failed_attempt(
        self, session_id: UUID, now: datetime, lock_duration: timedelta
    ) -> OtpSession:
        """Atomically count a wrong code, locking the session at max_attempts"""
        pass

    @abstractmethod
    async def deactivate(self, session_id: UUID) -> None:
        """Mark one session inactive"""
        pass

    @abstractmethod
    async def deactivate_active(self, email: str, purpose: OtpPurpose) -> int:
        """Mark every active session for (email, purpose) inactive. Returns count."""
        pass

    @abstractmethod
    async def record_resend(self, session_id: UUID, now: datetime) -> OtpSession:
        """Increment resend_count and set last_sent_at"""
        pass
