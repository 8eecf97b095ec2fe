import logging

from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.app.utils.credentials import hash_password, verify_password
from crm_service.domain.entities import AuditAction, AuditLog
from crm_service.domain.value_objects import AuthContext, RequestContext
from crm_service.libs.result import Error, Result, Return
from .dtos import ChangePasswordCommand, ChangePasswordResponse

logger = logging.getLogger(__name__)


class ChangePasswordUseCase:
    """
    Authenticated password change.

    The calling session survives; every other session of the user is revoked.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        auth: AuthContext,
        command: ChangePasswordCommand,
        context: RequestContext,
    ) -> Result[ChangePasswordResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(auth.user_id)
            if user is None:
                return Return.err(
                    Error("DATA_INTEGRITY_ERROR", "Authenticated user no longer exists")
                )

            if not verify_password(command.current_password, user.password_hash):
                return Return.err(
                    Error("INVALID_CURRENT_PASSWORD", "Current password is incorrect")
                )

            user.password_hash = hash_password(command.new_password)
            await self.uow.users.update(user)

            revoked = await self.uow.sessions.revoke_all_except(
                user.id, auth.session_id, "password_changed"
            )

            await self.uow.audit_logs.create(
                AuditLog(
                    organization_id=user.organization_id,
                    user_id=user.id,
                    action=AuditAction.password_change,
                    resource="user",
                    resource_id=str(user.id),
                    before={"password_changed": False},
                    after={"password_changed": True},
                    event_metadata={
                        "other_sessions_revoked": revoked,
                        "session_id": str(auth.session_id),
                    },
                    ip_address=context.ip_address,
                    user_agent=context.user_agent,
                )
            )

            await self.uow.commit()
            logger.info(f"Password changed: user_id={user.id} other_sessions_revoked={revoked}")

            return Return.ok(
                ChangePasswordResponse(
                    message="Password changed successfully",
                    other_sessions_revoked=revoked,
                )
            )
