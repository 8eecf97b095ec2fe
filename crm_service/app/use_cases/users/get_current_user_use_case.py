"""
Get Current User Use Case

Loads the authenticated user and session in the same shape as the login
response.
"""

from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.app.use_cases.auth.dtos import SessionInfo, UserInfo
from crm_service.domain.value_objects import AuthContext
from crm_service.libs.result import Error, Result, Return
from .dtos import MeResponse


class GetCurrentUserUseCase:
    """
    Use case for loading current user context.

    Business Rules:
    - Auth context comes from the session gate, so user and session are
      expected to exist; their absence is a data integrity failure
    - Permissions are flattened from every assigned role
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, auth: AuthContext) -> Result[MeResponse]:
        async with self.uow:
            user_context = await self.uow.users.find_context_by_id(auth.user_id)
            if user_context is None:
                return Return.err(Error("DATA_INTEGRITY_ERROR", "User not found"))

            session = await self.uow.sessions.get_by_id(auth.session_id)
            if session is None:
                return Return.err(Error("DATA_INTEGRITY_ERROR", "Session not found"))

            return Return.ok(
                MeResponse(
                    user=UserInfo.from_context(user_context),
                    session=SessionInfo.from_session(session),
                )
            )
