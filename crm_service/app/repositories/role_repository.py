from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from crm_service.domain.entities import Permission, Role


class IRoleRepository(ABC):
    """Role repository interface - application layer"""

    @abstractmethod
    async def get_system_role(self, name: str) -> Optional[Role]:
        """Get a system-wide role (no organization) by name"""
        pass

    @abstractmethod
    async def assign_to_user(self, user_id: UUID, role_id: UUID) -> None:
        """Grant a role to a user"""
        pass

    @abstractmethod
    async def get_permissions_for_user(self, user_id: UUID) -> List[Permission]:
        """Get every permission granted through the user's roles"""
        pass
