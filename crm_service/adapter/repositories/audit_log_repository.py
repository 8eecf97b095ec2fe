from sqlmodel.ext.asyncio.session import AsyncSession

from crm_service.app.repositories.audit_log_repository import IAuditLogRepository
from crm_service.domain.entities import AuditLog


class AuditLogRepository(IAuditLogRepository):
    """Audit log repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, audit_log: AuditLog) -> AuditLog:
        """Append an audit record (never updated afterwards)"""
        self.session.add(audit_log)
        await self.session.flush()
        return audit_log
