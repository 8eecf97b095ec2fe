import logging
from typing import Optional

from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.app.utils.credentials import hash_session_token
from crm_service.domain.entities import AuditAction, AuditLog
from crm_service.domain.value_objects import RequestContext
from crm_service.libs.result import Result, Return
from .dtos import LogoutResponse

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Revoke the caller's session, or every session of the user.

    Never fails: a missing, unknown or already revoked token is reported as
    a successful logout with nothing revoked, and internal errors are logged
    and swallowed.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        session_token: Optional[str],
        everywhere: bool,
        context: RequestContext,
    ) -> Result[LogoutResponse]:
        try:
            revoked = await self._revoke(session_token, everywhere, context)
        except Exception:
            logger.exception("Logout failed, reporting success to the client")
            revoked = 0

        return Return.ok(
            LogoutResponse(message="Logged out successfully", sessions_revoked=revoked)
        )

    async def _revoke(
        self,
        session_token: Optional[str],
        everywhere: bool,
        context: RequestContext,
    ) -> int:
        if not session_token:
            return 0

        async with self.uow:
            session = await self.uow.sessions.find_by_token_hash(
                hash_session_token(session_token)
            )
            if session is None or session.revoked_at is not None:
                return 0

            if everywhere:
                revoked = await self.uow.sessions.revoke_all_for_user(
                    session.user_id, "logout_everywhere"
                )
            else:
                revoked = 1 if await self.uow.sessions.revoke(session.id, "logout") else 0

            await self.uow.audit_logs.create(
                AuditLog(
                    organization_id=session.organization_id,
                    user_id=session.user_id,
                    action=AuditAction.logout,
                    resource="session",
                    resource_id=str(session.id),
                    event_metadata={"everywhere": everywhere, "sessions_revoked": revoked},
                    ip_address=context.ip_address,
                    user_agent=context.user_agent,
                )
            )
            await self.uow.commit()
            logger.info(f"Logout: user_id={session.user_id} sessions_revoked={revoked}")
            return revoked
