import logging

from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.app.utils.permissions import compute_scope, has_permission
from crm_service.domain.entities import AuditAction, AuditLog
from crm_service.domain.value_objects import AuthContext, AuthorizationContext
from crm_service.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class AuthorizeUseCase:
    """
    Check one resource:action permission for an authenticated user.

    Exact grant, resource wildcard or super wildcard all pass. A denial is
    logged with the user's full permission set and written to the audit log.
    On success the visibility scope for the resource is computed.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, auth: AuthContext, resource: str, action: str
    ) -> Result[AuthorizationContext]:
        required = f"{resource}:{action}"

        async with self.uow:
            user_context = await self.uow.users.find_context_by_id(auth.user_id)
            if user_context is None:
                return Return.err(Error("DATA_INTEGRITY_ERROR", "User not found"))

            permissions = user_context.permissions

            if not has_permission(permissions, resource, action):
                logger.warning(
                    f"Permission denied: user_id={auth.user_id} required={required} "
                    f"permissions={permissions}"
                )
                await self.uow.audit_logs.create(
                    AuditLog(
                        organization_id=auth.organization_id,
                        user_id=auth.user_id,
                        action=AuditAction.permission_denied,
                        resource=resource,
                        event_metadata={
                            "required_permission": required,
                            "permissions": permissions,
                        },
                    )
                )
                await self.uow.commit()
                return Return.err(
                    Error(
                        "FORBIDDEN",
                        f"Missing permission: {required}",
                        details={"required_permission": required},
                    )
                )

            return Return.ok(
                AuthorizationContext(
                    auth=auth,
                    permissions=permissions,
                    scope=compute_scope(permissions, resource),
                )
            )
