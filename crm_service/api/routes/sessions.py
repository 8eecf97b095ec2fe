from fastapi import APIRouter, Depends, status

from crm_service.api.error import ServerError
from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.app.use_cases.users import ListSessionsUseCase, SessionListResponse
from crm_service.depends import get_unit_of_work, require_permission
from crm_service.domain.value_objects import AuthorizationContext

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get("", status_code=status.HTTP_200_OK, response_model=SessionListResponse)
async def list_sessions(
    authz: AuthorizationContext = Depends(require_permission("sessions", "read")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    List active sessions

    Holders of a sessions wildcard see every session in the organization,
    everyone else only their own.

    Raises:
        - 401 Unauthorized: Session gate failures
        - 403 Forbidden: Missing permission sessions:read
    """
    result = await ListSessionsUseCase(uow).execute(authz)
    if result.is_err():
        raise ServerError(result.error)
    return result.value
