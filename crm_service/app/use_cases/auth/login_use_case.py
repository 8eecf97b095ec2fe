"""
Login Use Case

Verifies credentials, enforces the failed-attempt lockout and opens a
cookie-backed session.
"""

import logging
from datetime import timedelta

from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.app.utils.credentials import (
    burn_password_check,
    generate_session_token,
    get_token_last_four,
    hash_session_token,
    verify_password,
)
from crm_service.domain.clock import utcnow
from crm_service.domain.constants import MAX_LOGIN_ATTEMPTS, SESSION_EXPIRY_DAYS
from crm_service.domain.entities import AuditAction, AuditLog, Session
from crm_service.domain.value_objects import RequestContext
from crm_service.libs.result import Error, Result, Return
from .dtos import LoginResponse, LoginResult, SessionInfo, UserInfo

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."


class LoginUseCase:
    """
    Use case for user login and session issuance.

    Business Rules:
    - Unknown email and wrong password return the same INVALID_CREDENTIALS
    - Unknown email still pays for a bcrypt check (timing)
    - Unverified user -> ACCOUNT_NOT_VERIFIED
    - Locked user -> ACCOUNT_LOCKED; only a password reset unlocks
    - Soft-deleted organization -> ORGANIZATION_INACTIVE
    - Wrong password counts an attempt and locks at MAX_LOGIN_ATTEMPTS
    - Success resets the counter and creates a 30-day session whose token
      is stored only as a SHA-256 hash
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, email: str, password: str, context: RequestContext
    ) -> Result[LoginResult]:
        async with self.uow:
            user_context = await self.uow.users.find_for_login(email)

            if user_context is None:
                burn_password_check(password)
                return Return.err(Error("INVALID_CREDENTIALS", INVALID_CREDENTIALS_MESSAGE))

            user = user_context.user
            organization = user_context.organization

            if not user.verified:
                return Return.err(
                    Error(
                        "ACCOUNT_NOT_VERIFIED",
                        "Please verify your email before logging in.",
                    )
                )

            if user.is_locked:
                return Return.err(
                    Error(
                        "ACCOUNT_LOCKED",
                        "Account locked after too many failed attempts. "
                        "Reset your password to unlock it.",
                    )
                )

            if organization is None or not organization.is_active:
                return Return.err(
                    Error("ORGANIZATION_INACTIVE", "Organization is no longer active")
                )

            if not verify_password(password, user.password_hash):
                updated = await self.uow.users.increment_login_attempts(
                    user.id, MAX_LOGIN_ATTEMPTS
                )
                await self.uow.audit_logs.create(
                    AuditLog(
                        organization_id=user.organization_id,
                        user_id=user.id,
                        action=AuditAction.login_failed,
                        resource="user",
                        resource_id=str(user.id),
                        event_metadata={
                            "login_attempts": updated.login_attempts,
                            "locked": updated.is_locked,
                        },
                        ip_address=context.ip_address,
                        user_agent=context.user_agent,
                    )
                )
                await self.uow.commit()

                if updated.is_locked:
                    logger.warning(f"Account locked after failed logins: user_id={user.id}")
                return Return.err(Error("INVALID_CREDENTIALS", INVALID_CREDENTIALS_MESSAGE))

            now = utcnow()
            session_token = generate_session_token()
            session = await self.uow.sessions.create(
                Session(
                    user_id=user.id,
                    organization_id=user.organization_id,
                    token_hash=hash_session_token(session_token),
                    token_last_four=get_token_last_four(session_token),
                    ip_address=context.ip_address,
                    user_agent=context.user_agent,
                    last_activity=now,
                    expires_at=now + timedelta(days=SESSION_EXPIRY_DAYS),
                )
            )

            user.login_attempts = 0
            user.last_login_at = now
            await self.uow.users.update(user)

            await self.uow.audit_logs.create(
                AuditLog(
                    organization_id=user.organization_id,
                    user_id=user.id,
                    action=AuditAction.login,
                    resource="session",
                    resource_id=str(session.id),
                    event_metadata={"token_last_four": session.token_last_four},
                    ip_address=context.ip_address,
                    user_agent=context.user_agent,
                )
            )

            await self.uow.commit()
            logger.info(f"User logged in: user_id={user.id} session_id={session.id}")

            response = LoginResponse(
                message="Login successful",
                user=UserInfo.from_context(user_context),
                session=SessionInfo.from_session(session),
            )
            return Return.ok(LoginResult(response=response, session_token=session_token))
