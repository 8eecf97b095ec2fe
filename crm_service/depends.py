import logging
from uuid import UUID

from fastapi import BackgroundTasks, Depends, Request, status
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from crm_service.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from crm_service.api.error import ClientError, ServerError
from crm_service.api.utils.cookie import read_auth_cookie
from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.app.use_cases.auth import (
    COOKIE_CLEARING_CODES,
    AuthenticateSessionUseCase,
    TouchSessionActivityUseCase,
)
from crm_service.app.use_cases.users import AuthorizeUseCase
from crm_service.domain.value_objects import AuthContext, AuthorizationContext

logger = logging.getLogger(__name__)

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


def get_session_factory():
    return AsyncSessionLocal


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def touch_session_activity(session_factory, session_id: UUID) -> None:
    """Runs after the response; failures are logged, never raised."""
    try:
        async with session_factory() as session:
            await TouchSessionActivityUseCase(SqlAlchemyUnitOfWork(session)).execute(
                session_id
            )
    except Exception:
        logger.exception(f"Failed to update session activity: session_id={session_id}")


async def get_current_auth(
    request: Request,
    background_tasks: BackgroundTasks,
    uow: UnitOfWork = Depends(get_unit_of_work),
    session_factory=Depends(get_session_factory),
) -> AuthContext:
    """
    Dependency resolving the session cookie into an AuthContext.

    Raises:
        ClientError: 401 (cookie cleared) for missing, unknown, revoked or
            expired sessions; 403 (cookie kept) for unverified or locked
            users and inactive organizations
        ServerError: sessions pointing at missing users or organizations
    """
    result = await AuthenticateSessionUseCase(uow).execute(read_auth_cookie(request))

    if result.is_err():
        error = result.error
        if error.code in COOKIE_CLEARING_CODES:
            raise ClientError(
                error, status_code=status.HTTP_401_UNAUTHORIZED, clear_auth_cookie=True
            )
        if error.code in ("EMAIL_NOT_VERIFIED", "ACCOUNT_LOCKED", "ORGANIZATION_INACTIVE"):
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    authenticated = result.value
    if authenticated.needs_activity_update:
        background_tasks.add_task(
            touch_session_activity, session_factory, authenticated.context.session_id
        )
    return authenticated.context


def require_permission(resource: str, action: str):
    """Dependency factory gating a route on one resource:action permission."""

    async def check_permission(
        auth: AuthContext = Depends(get_current_auth),
        uow: UnitOfWork = Depends(get_unit_of_work),
    ) -> AuthorizationContext:
        result = await AuthorizeUseCase(uow).execute(auth, resource, action)
        if result.is_err():
            error = result.error
            if error.code == "FORBIDDEN":
                raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
            raise ServerError(error)
        return result.value

    return check_permission
