from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from crm_service.domain.entities import Profile, User
from crm_service.domain.value_objects import UserContext


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def create(self, user: User, profile: Profile) -> User:
        """Create a new user together with its profile"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def find_for_login(self, email: str) -> Optional[UserContext]:
        """Get user with profile, organization and flattened permissions by email"""
        pass

    @abstractmethod
    async def find_context_by_id(self, user_id: UUID) -> Optional[UserContext]:
        """Get user with profile, organization and flattened permissions by ID"""
        pass

    @abstractmethod
    async def increment_login_attempts(self, user_id: UUID, max_attempts: int) -> User:
        """Atomically count a failed login, locking the account at max_attempts"""
        pass
