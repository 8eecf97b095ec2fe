"""
Resend Code Use Case

Issues a fresh verification code, either by rotating the token of the
current session or by replacing an expired session.
"""

import logging
import math

from crm_service.app.services.otp_delivery import deliver_otp
from crm_service.app.services.otp_service import OtpService, session_locked_error
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
from crm_service.libs.result import Error, Result, Return
from .dtos import ResendCodeResponse

logger = logging.getLogger(__name__)

NEW_CODE_MESSAGE = "New verification code sent"


class ResendCodeUseCase:
    """
    Use case for resending the email verification code.

    Business Rules (evaluated strictly in this order):
    1. Any session for the email locked past now blocks the resend, even a
       session that is no longer the current one
    2. Verified user -> success no-op
    3. No session ever existed -> NO_VERIFICATION_SESSION
    4. Latest session expired or inactive -> replace it with a new session
    5. Latest session locked -> SESSION_LOCKED
    6. resend_count at MAX_RESENDS -> TOO_MANY_RESENDS
    7. Cooldown since last_sent_at not elapsed -> RESEND_RATE_LIMITED
    8. Otherwise rotate the token inside the current session
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, email: str, context: RequestContext
    ) -> Result[ResendCodeResponse]:
        purpose = OtpPurpose.email_verification

        async with self.uow:
            now = utcnow()

            # 1. Global lock dominates every per-session decision
            locked = await self.uow.otp_sessions.find_locked(email, purpose, now)
            if locked is not None:
                if locked.lock_until is None:
                    return Return.err(
                        Error("LOCK_STATE_INVALID", "Locked OTP session has no lock expiry")
                    )
                return Return.err(
                    session_locked_error("SESSION_LOCKED", locked.lock_wait_seconds(now))
                )

            # 2. Already verified
            user = await self.uow.users.get_by_email(email)
            if user is not None and user.verified:
                return Return.ok(ResendCodeResponse(message="Email already verified"))

            # 3. Nothing to resend
            latest = await self.uow.otp_sessions.find_latest(email, purpose)
            if latest is None or user is None:
                return Return.err(
                    Error(
                        "NO_VERIFICATION_SESSION",
                        "No verification session found. Please register first.",
                    )
                )

            otp = OtpService(self.uow)
            state = latest.state(now)

            # 4. Replace expired session
            if state in (OtpSessionState.expired, OtpSessionState.inactive):
                new_session, token, code = await otp.open_session(
                    user, purpose, context, now
                )
                await self.uow.audit_logs.create(
                    AuditLog(
                        organization_id=user.organization_id,
                        user_id=user.id,
                        action=AuditAction.create,
                        resource="otp_session",
                        resource_id=str(new_session.id),
                        before={"session_id": str(latest.id), "active": latest.active},
                        after={"session_id": str(new_session.id), "active": True},
                        event_metadata={
                            "reason": "SESSION_EXPIRED"
                            if state == OtpSessionState.expired
                            else "SESSION_INACTIVE",
                            "purpose": purpose.value,
                        },
                        ip_address=context.ip_address,
                        user_agent=context.user_agent,
                    )
                )
                await self.uow.commit()

                deliver_otp(user.email, code, purpose, token.expires_at)
                logger.info(
                    f"OTP session replaced: old={latest.id} new={new_session.id}"
                )
                return Return.ok(
                    ResendCodeResponse(message=NEW_CODE_MESSAGE, otp_expires_at=token.expires_at)
                )

            # 5. Session-local lock
            if state == OtpSessionState.locked:
                return Return.err(
                    session_locked_error("SESSION_LOCKED", latest.lock_wait_seconds(now))
                )

            # 6. Resend cap
            if latest.resend_count >= MAX_RESENDS:
                return Return.err(
                    Error(
                        "TOO_MANY_RESENDS",
                        "Maximum number of resends reached for this session.",
                    )
                )

            # 7. Cooldown
            if latest.last_sent_at is not None:
                elapsed = (now - latest.last_sent_at).total_seconds()
                if elapsed < RESEND_COOLDOWN_SECONDS:
                    wait_seconds = max(0, math.ceil(RESEND_COOLDOWN_SECONDS - elapsed))
                    return Return.err(
                        Error(
                            "RESEND_RATE_LIMITED",
                            f"Please wait {wait_seconds} seconds before requesting a new code.",
                            details={"wait_seconds": wait_seconds},
                        )
                    )

            # 8. Rotate
            token, code = await otp.rotate_token(latest, context, now)
            await self.uow.commit()

            deliver_otp(user.email, code, purpose, token.expires_at)
            logger.info(f"OTP token rotated: otp_session_id={latest.id}")
            return Return.ok(
                ResendCodeResponse(message=NEW_CODE_MESSAGE, otp_expires_at=token.expires_at)
            )
