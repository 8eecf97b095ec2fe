from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_service.app.repositories.role_repository import IRoleRepository
from crm_service.domain.entities import Permission, Role, RolePermission, UserRole


class RoleRepository(IRoleRepository):
    """Role repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_system_role(self, name: str) -> Optional[Role]:
        """Get system-wide role by name"""
        stmt = select(Role).where(Role.name == name, Role.organization_id.is_(None))
        result = await self.session.exec(stmt)
        return result.first()

    async def assign_to_user(self, user_id: UUID, role_id: UUID) -> None:
        self.session.add(UserRole(user_id=user_id, role_id=role_id))
        await self.session.flush()

    async def get_permissions_for_user(self, user_id: UUID) -> List[Permission]:
        """Permissions reachable through user_roles -> role_permissions"""
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(UserRole, UserRole.role_id == RolePermission.role_id)
            .where(UserRole.user_id == user_id)
        )
        result = await self.session.exec(stmt)
        return list(result.all())
