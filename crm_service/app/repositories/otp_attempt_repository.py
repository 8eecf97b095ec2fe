from abc import ABC, abstractmethod

from crm_service.domain.entities import OtpAttempt


class IOtpAttemptRepository(ABC):
    """OTP attempt repository interface - application layer"""

    @abstractmethod
    async def create(self, attempt: OtpAttempt) -> OtpAttempt:
        """Append an attempt record"""
        pass
