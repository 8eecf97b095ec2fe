from fastapi import APIRouter, Depends, status

from crm_service.api.error import ServerError
from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.app.use_cases.users import GetCurrentUserUseCase, MeResponse
from crm_service.depends import get_current_auth, get_unit_of_work
from crm_service.domain.value_objects import AuthContext

router = APIRouter(tags=["User"])


@router.get("/me", status_code=status.HTTP_200_OK, response_model=MeResponse)
async def get_me(
    auth: AuthContext = Depends(get_current_auth),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Current User & Session

    Returns the same user and session shapes as the login response.

    Raises:
        - 401 Unauthorized: Missing, invalid, revoked or expired session
        - 403 Forbidden: Unverified or locked user, inactive organization
    """
    result = await GetCurrentUserUseCase(uow).execute(auth)
    if result.is_err():
        raise ServerError(result.error)
    return result.value
