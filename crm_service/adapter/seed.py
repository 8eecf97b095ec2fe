"""
Seed data required at runtime.

Registration assigns the system-wide OWNER role to every new account, so a
deployment without it cannot register anyone.
"""

import logging

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_service.domain.constants import OWNER_ROLE_NAME
from crm_service.domain.entities import Permission, Role, RolePermission

logger = logging.getLogger(__name__)


async def seed_system_roles(session: AsyncSession) -> Role:
    """Create the OWNER role holding "*:*". Safe to run repeatedly."""
    result = await session.exec(
        select(Permission).where(Permission.resource == "*", Permission.action == "*")
    )
    permission = result.first()
    if permission is None:
        permission = Permission(resource="*", action="*", description="Full access")
        session.add(permission)
        await session.flush()

    result = await session.exec(
        select(Role).where(Role.name == OWNER_ROLE_NAME, Role.organization_id.is_(None))
    )
    role = result.first()
    if role is None:
        role = Role(name=OWNER_ROLE_NAME, description="Organization owner")
        session.add(role)
        await session.flush()
        session.add(RolePermission(role_id=role.id, permission_id=permission.id))
        logger.info("Seeded system OWNER role")

    await session.commit()
    return role
