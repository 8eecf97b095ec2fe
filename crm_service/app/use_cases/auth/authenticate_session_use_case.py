"""
Authenticate Session Use Case

Per-request gate resolving the session cookie into a minimal auth context.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from uuid import UUID

from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.app.utils.credentials import hash_session_token
from crm_service.domain.clock import utcnow
from crm_service.domain.constants import SESSION_ACTIVITY_UPDATE_THRESHOLD_MINUTES
from crm_service.domain.entities import SessionState
from crm_service.domain.value_objects import AuthContext
from crm_service.libs.result import Error, Result, Return

# Failures after which the stale cookie must be dropped by the client
COOKIE_CLEARING_CODES = frozenset(
    {"AUTH_REQUIRED", "SESSION_INVALID", "SESSION_REVOKED", "SESSION_EXPIRED"}
)


@dataclass(frozen=True)
class AuthenticatedSession:
    context: AuthContext
    needs_activity_update: bool


class AuthenticateSessionUseCase:
    """
    Validate a session token.

    Business Rules (in order):
    - No token -> AUTH_REQUIRED
    - Unknown token -> SESSION_INVALID
    - Revoked -> SESSION_REVOKED, expired -> SESSION_EXPIRED
    - Session without user or organization -> DATA_INTEGRITY_ERROR (fatal)
    - Unverified user -> EMAIL_NOT_VERIFIED, locked user -> ACCOUNT_LOCKED
    - Soft-deleted organization -> ORGANIZATION_INACTIVE
    - last_activity is refreshed only once the update threshold has passed
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, session_token: Optional[str]) -> Result[AuthenticatedSession]:
        if not session_token:
            return Return.err(Error("AUTH_REQUIRED", "Authentication required"))

        async with self.uow:
            now = utcnow()
            view = await self.uow.sessions.find_for_auth(hash_session_token(session_token))

            if view is None:
                return Return.err(Error("SESSION_INVALID", "Invalid session"))

            session = view.session
            state = session.state(now)
            if state == SessionState.revoked:
                return Return.err(Error("SESSION_REVOKED", "Session has been revoked"))
            if state == SessionState.expired:
                return Return.err(Error("SESSION_EXPIRED", "Session has expired"))

            if view.user_id is None:
                return Return.err(
                    Error("DATA_INTEGRITY_ERROR", "Session references a missing user")
                )
            if not view.user_verified:
                return Return.err(Error("EMAIL_NOT_VERIFIED", "Email address is not verified"))
            if view.user_is_locked:
                return Return.err(Error("ACCOUNT_LOCKED", "Account is locked"))

            if view.organization_id is None:
                return Return.err(
                    Error("DATA_INTEGRITY_ERROR", "Session references a missing organization")
                )
            if view.organization_deleted_at is not None:
                return Return.err(
                    Error("ORGANIZATION_INACTIVE", "Organization is no longer active")
                )

            threshold = timedelta(minutes=SESSION_ACTIVITY_UPDATE_THRESHOLD_MINUTES)
            return Return.ok(
                AuthenticatedSession(
                    context=AuthContext(
                        user_id=session.user_id,
                        session_id=session.id,
                        organization_id=session.organization_id,
                    ),
                    needs_activity_update=now - session.last_activity > threshold,
                )
            )


class TouchSessionActivityUseCase:
    """Record that a session was used just now."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, session_id: UUID) -> None:
        async with self.uow:
            await self.uow.sessions.touch(session_id, utcnow())
            await self.uow.commit()
