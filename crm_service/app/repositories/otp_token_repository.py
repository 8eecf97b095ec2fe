from abc import ABC, abstractmethod
from datetime import datetime
from typing import List
from uuid import UUID

from crm_service.domain.entities import OtpToken


class IOtpTokenRepository(ABC):
    """OTP token repository interface - application layer"""

    @abstractmethod
    async def create(self, token: OtpToken) -> OtpToken:
        """Create a new token"""
        pass

    @abstractmethod
    async def find_unconsumed(self, session_id: UUID) -> List[OtpToken]:
        """Get unconsumed tokens of a session, newest first"""
        pass

    @abstractmethod
    async def consume(self, token_id: UUID, now: datetime) -> None:
        """Mark a token consumed"""
        pass

    @abstractmethod
    async def consume_all(self, session_id: UUID, now: datetime) -> int:
        """Mark every unconsumed token of a session consumed. Returns count."""
        pass
