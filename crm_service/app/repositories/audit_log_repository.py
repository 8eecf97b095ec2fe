from abc import ABC, abstractmethod

from crm_service.domain.entities import AuditLog


class IAuditLogRepository(ABC):
    """Audit log repository interface - application layer"""

    @abstractmethod
    async def create(self, audit_log: AuditLog) -> AuditLog:
        """Append an audit record"""
        pass
