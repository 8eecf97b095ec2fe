from abc import ABC, abstractmethod

from crm_service.app.repositories.audit_log_repository import IAuditLogRepository
from crm_service.app.repositories.organization_repository import IOrganizationRepository
from crm_service.app.repositories.otp_attempt_repository import IOtpAttemptRepository
from crm_service.app.repositories.otp_session_repository import IOtpSessionRepository
from crm_service.app.repositories.otp_token_repository import IOtpTokenRepository
from crm_service.app.repositories.role_repository import IRoleRepository
from crm_service.app.repositories.session_repository import ISessionRepository
from crm_service.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    organizations: IOrganizationRepository
    roles: IRoleRepository
    sessions: ISessionRepository
    otp_sessions: IOtpSessionRepository
    otp_tokens: IOtpTokenRepository
    otp_attempts: IOtpAttemptRepository
    audit_logs: IAuditLogRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
