"""
Reset Password Use Case

Completes a password reset with the emailed code and logs the user out of
every device.
"""

import logging

from crm_service.app.services.otp_service import OtpService
from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.app.utils.credentials import hash_password
from crm_service.domain.clock import utcnow
from crm_service.domain.entities import AuditAction, AuditLog, OtpPurpose
from crm_service.domain.value_objects import RequestContext
from crm_service.libs.result import Error, Result, Return
from .dtos import ResetPasswordCommand, ResetPasswordResponse

logger = logging.getLogger(__name__)


class ResetPasswordUseCase:
    """
    Use case for resetting a password with a one-time code.

    Business Rules:
    - Same validation sequence as email verification, with RESET_* codes
    - Success, in one transaction: consume the token, close the session,
      set the new password, clear login_attempts and is_locked, verify an
      unverified user, revoke every session of the user, record the attempt
      and an audit row with before/after security fields

    Errors:
    - NO_ACTIVE_RESET_SESSION (also for unknown emails), RESET_SESSION_EXPIRED,
      RESET_SESSION_LOCKED (wait_seconds), NO_VALID_RESET_CODE,
      RESET_CODE_EXPIRED, INVALID_RESET_CODE (attempts_remaining)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, command: ResetPasswordCommand, context: RequestContext
    ) -> Result[ResetPasswordResponse]:
        async with self.uow:
            now = utcnow()

            user = await self.uow.users.get_by_email(command.email)
            if user is None:
                return Return.err(
                    Error(
                        "NO_ACTIVE_RESET_SESSION",
                        "No active verification session found. Please request a new code.",
                    )
                )

            otp = OtpService(self.uow)
            result = await otp.verify_code(
                user.email, OtpPurpose.password_reset, command.code, context, now
            )
            if result.is_err():
                return result

            verified = result.value
            before = {
                "verified": user.verified,
                "is_locked": user.is_locked,
                "login_attempts": user.login_attempts,
            }
            was_unverified = not user.verified

            password_hash = hash_password(command.new_password)

            await otp.complete(verified, context, now)

            user.apply_password_reset(password_hash, now)
            await self.uow.users.update(user)

            sessions_revoked = await self.uow.sessions.revoke_all_for_user(
                user.id, "password_reset"
            )

            await self.uow.audit_logs.create(
                AuditLog(
                    organization_id=user.organization_id,
                    user_id=user.id,
                    action=AuditAction.password_reset,
                    resource="user",
                    resource_id=str(user.id),
                    before=before,
                    after={
                        "verified": user.verified,
                        "is_locked": user.is_locked,
                        "login_attempts": user.login_attempts,
                    },
                    event_metadata={
                        "action": "PASSWORD_RESET",
                        "sessions_revoked": sessions_revoked,
                        "secondary_verification": was_unverified,
                        "otp_session_id": str(verified.otp_session.id),
                    },
                    ip_address=context.ip_address,
                    user_agent=context.user_agent,
                )
            )

            await self.uow.commit()
            logger.info(
                f"Password reset: user_id={user.id} sessions_revoked={sessions_revoked}"
            )

            return Return.ok(
                ResetPasswordResponse(
                    message="Password reset successfully. Please log in with your new password."
                )
            )
