"""
Forgot Password Use Case

Starts the OTP-gated password reset without revealing whether the account
exists.
"""

import logging

from crm_service.app.services.otp_delivery import deliver_otp
from crm_service.app.services.otp_service import OtpService
from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.domain.clock import utcnow
from crm_service.domain.constants import MAX_RESENDS, RESEND_COOLDOWN_SECONDS
from crm_service.domain.entities import (
    AuditAction,
    AuditLog,
    OtpPurpose,
    OtpSessionState,
)
from crm_service.domain.value_objects import RequestContext
from crm_service.libs.result import Result, Return
from .dtos import ForgotPasswordResponse

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "If this email exists, password reset instructions have been sent"


class ForgotPasswordUseCase:
    """
    Use case for requesting a password reset code.

    Business Rules:
    - Always returns the same response, whatever happened internally
    - Unverified users may reset (secondary account recovery)
    - Order: user lookup -> global lock -> active session
      (cooldown, cap, rotate) -> otherwise open a new session
    - Internal errors are logged and still answered with the generic response
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, email: str, context: RequestContext
    ) -> Result[ForgotPasswordResponse]:
        try:
            await self._initiate(email, context)
        except Exception:
            logger.exception("Password reset initiation failed")

        return Return.ok(ForgotPasswordResponse(message=GENERIC_MESSAGE))

    async def _initiate(self, email: str, context: RequestContext) -> None:
        purpose = OtpPurpose.password_reset

        async with self.uow:
            now = utcnow()

            user = await self.uow.users.get_by_email(email)
            if user is None:
                logger.info("Password reset requested for unknown email")
                return

            locked = await self.uow.otp_sessions.find_locked(user.email, purpose, now)
            if locked is not None:
                logger.warning(
                    f"Password reset blocked by lock: user_id={user.id} "
                    f"wait_seconds={locked.lock_wait_seconds(now)}"
                )
                return

            otp = OtpService(self.uow)

            existing = await self.uow.otp_sessions.find_active(user.email, purpose)
            if existing is not None and existing.state(now) == OtpSessionState.active:
                if existing.last_sent_at is not None:
                    elapsed = (now - existing.last_sent_at).total_seconds()
                    if elapsed < RESEND_COOLDOWN_SECONDS:
                        logger.info(f"Password reset rate limited: user_id={user.id}")
                        return

                if existing.resend_count >= MAX_RESENDS:
                    logger.warning(f"Password reset resend cap reached: user_id={user.id}")
                    return

                token, code = await otp.rotate_token(existing, context, now)
                await self.uow.commit()

                deliver_otp(user.email, code, purpose, token.expires_at)
                logger.info(f"Password reset code rotated: user_id={user.id}")
                return

            # No usable session: expired ones are closed by open_session
            otp_session, token, code = await otp.open_session(user, purpose, context, now)
            await self.uow.audit_logs.create(
                AuditLog(
                    organization_id=user.organization_id,
                    user_id=user.id,
                    action=AuditAction.create,
                    resource="otp_session",
                    resource_id=str(otp_session.id),
                    event_metadata={
                        "action": "PASSWORD_RESET_REQUESTED",
                        "purpose": purpose.value,
                        "replaced_session_id": str(existing.id) if existing else None,
                    },
                    ip_address=context.ip_address,
                    user_agent=context.user_agent,
                )
            )
            await self.uow.commit()

            deliver_otp(user.email, code, purpose, token.expires_at)
            logger.info(f"Password reset session opened: user_id={user.id}")
