from sqlmodel.ext.asyncio.session import AsyncSession

from crm_service.adapter.repositories.audit_log_repository import AuditLogRepository
from crm_service.adapter.repositories.organization_repository import OrganizationRepository
from crm_service.adapter.repositories.otp_attempt_repository import OtpAttemptRepository
from crm_service.adapter.repositories.otp_session_repository import OtpSessionRepository
from crm_service.adapter.repositories.otp_token_repository import OtpTokenRepository
from crm_service.adapter.repositories.role_repository import RoleRepository
from crm_service.adapter.repositories.session_repository import SessionRepository
from crm_service.adapter.repositories.user_repository import UserRepository
from crm_service.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """
    SQLAlchemy implementation of UnitOfWork pattern.

    Every repository shares one AsyncSession, so all writes made between
    __aenter__ and commit() belong to the same transaction. Leaving the
    block without commit() rolls everything back.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        self.users = UserRepository(self.session)
        self.organizations = OrganizationRepository(self.session)
        self.roles = RoleRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.otp_sessions = OtpSessionRepository(self.session)
        self.otp_tokens = OtpTokenRepository(self.session)
        self.otp_attempts = OtpAttemptRepository(self.session)
        self.audit_logs = AuditLogRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
