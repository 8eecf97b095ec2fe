from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_service.adapter.repositories.role_repository import RoleRepository
from crm_service.app.repositories.user_repository import IUserRepository
from crm_service.app.utils.permissions import flatten_permissions
from crm_service.domain.entities import Organization, Profile, User
from crm_service.domain.value_objects import UserContext


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, user: User, profile: Profile) -> User:
        """Create a new user and its profile"""
        self.session.add(user)
        await self.session.flush()
        profile.user_id = user.id
        self.session.add(profile)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """Update existing user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def find_for_login(self, email: str) -> Optional[UserContext]:
        return await self._load_context(User.email == email.strip().lower())

    async def find_context_by_id(self, user_id: UUID) -> Optional[UserContext]:
        return await self._load_context(User.id == user_id)

    async def increment_login_attempts(self, user_id: UUID, max_attempts: int) -> User:
        """
        Count a failed login in a single UPDATE so concurrent failures are
        never lost. is_locked flips in the same statement.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                login_attempts=User.login_attempts + 1,
                is_locked=(User.login_attempts + 1) >= max_attempts,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return await self.session.get(User, user_id, populate_existing=True)

    async def _load_context(self, condition) -> Optional[UserContext]:
        stmt = (
            select(User, Organization, Profile)
            .outerjoin(Organization, Organization.id == User.organization_id)
            .outerjoin(Profile, Profile.user_id == User.id)
            .where(condition)
        )
        result = await self.session.execute(stmt)
        row = result.first()
        if row is None:
            return None

        user, organization, profile = row
        permissions = await RoleRepository(self.session).get_permissions_for_user(user.id)
        return UserContext(
            user=user,
            organization=organization,
            profile=profile,
            permissions=flatten_permissions(permissions),
        )
