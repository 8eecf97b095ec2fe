from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.domain.value_objects import AuthorizationContext
from crm_service.libs.result import Result, Return
from .dtos import SessionListResponse, SessionSummary


class ListSessionsUseCase:
    """Active sessions visible to the caller: whole organization or own only."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, authz: AuthorizationContext) -> Result[SessionListResponse]:
        auth = authz.auth
        owner_filter = None if authz.scope.can_access_all else auth.user_id

        async with self.uow:
            sessions = await self.uow.sessions.list_active(
                auth.organization_id, user_id=owner_filter
            )
            return Return.ok(
                SessionListResponse(
                    scope=authz.scope.filter_type,
                    sessions=[
                        SessionSummary(
                            id=str(session.id),
                            user_id=str(session.user_id),
                            token_last_four=session.token_last_four,
                            ip_address=session.ip_address,
                            user_agent=session.user_agent,
                            last_activity=session.last_activity,
                            expires_at=session.expires_at,
                            current=session.id == auth.session_id,
                        )
                        for session in sessions
                    ],
                )
            )
