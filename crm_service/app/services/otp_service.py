"""
OTP Service

Issuance, rotation and verification of one-time codes, shared by the
email-verification and password-reset flows.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.app.utils.credentials import generate_otp, hash_otp, verify_otp
from crm_service.domain.constants import (
    OTP_EXPIRY_MINUTES,
    OTP_LENGTH,
    OTP_LOCK_DURATION_MINUTES,
    OTP_SESSION_EXPIRY_HOURS,
)
from crm_service.domain.entities import (
    OtpAttempt,
    OtpAttemptStatus,
    OtpPurpose,
    OtpSession,
    OtpSessionState,
    OtpToken,
    OtpTokenState,
    User,
)
from crm_service.domain.value_objects import RequestContext
from crm_service.libs.result import Error, Result, Return


@dataclass(frozen=True)
class OtpErrorCodes:
    no_session: str
    session_expired: str
    session_locked: str
    no_code: str
    code_expired: str
    invalid_code: str


OTP_ERROR_CODES: Dict[OtpPurpose, OtpErrorCodes] = {
    OtpPurpose.email_verification: OtpErrorCodes(
        no_session="NO_ACTIVE_SESSION",
        session_expired="SESSION_EXPIRED",
        session_locked="SESSION_LOCKED",
        no_code="NO_VALID_CODE",
        code_expired="CODE_EXPIRED",
        invalid_code="INVALID_CODE",
    ),
    OtpPurpose.password_reset: OtpErrorCodes(
        no_session="NO_ACTIVE_RESET_SESSION",
        session_expired="RESET_SESSION_EXPIRED",
        session_locked="RESET_SESSION_LOCKED",
        no_code="NO_VALID_RESET_CODE",
        code_expired="RESET_CODE_EXPIRED",
        invalid_code="INVALID_RESET_CODE",
    ),
}


def session_locked_error(code: str, wait_seconds: int) -> Error:
    return Error(
        code,
        f"Too many failed attempts. Please try again in {wait_seconds} seconds.",
        details={"wait_seconds": wait_seconds},
    )


@dataclass
class VerifiedCode:
    otp_session: OtpSession
    token: OtpToken


class OtpService:
    """
    OTP operations executed inside the caller's unit of work.

    The service never commits on success paths: the caller decides where
    the transaction ends. The single exception is a wrong code, whose
    counter increment must persist even though the request fails.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def open_session(
        self,
        user: User,
        purpose: OtpPurpose,
        context: RequestContext,
        now: datetime,
    ) -> Tuple[OtpSession, OtpToken, str]:
        """Deactivate whatever is active for (email, purpose) and start a fresh cycle."""
        await self.uow.otp_sessions.deactivate_active(user.email, purpose)

        otp_session = OtpSession(
            user_id=user.id,
            organization_id=user.organization_id,
            email=user.email,
            purpose=purpose,
            active=True,
            expires_at=now + timedelta(hours=OTP_SESSION_EXPIRY_HOURS),
            last_sent_at=now,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
        )
        otp_session = await self.uow.otp_sessions.create(otp_session)

        token, code = await self._issue_token(otp_session, now)
        return otp_session, token, code

    async def rotate_token(
        self,
        otp_session: OtpSession,
        context: RequestContext,
        now: datetime,
    ) -> Tuple[OtpToken, str]:
        """Consume every outstanding code of the session and issue a new one."""
        await self.uow.otp_tokens.consume_all(otp_session.id, now)
        token, code = await self._issue_token(otp_session, now)
        await self.uow.otp_sessions.record_resend(otp_session.id, now)
        await self.record_attempt(
            otp_session, token, OtpAttemptStatus.success, "TOKEN_ROTATION", context
        )
        return token, code

    async def verify_code(
        self,
        email: str,
        purpose: OtpPurpose,
        code: str,
        context: RequestContext,
        now: datetime,
    ) -> Result[VerifiedCode]:
        """
        Validate a submitted code against the active session for (email, purpose).

        Checks run in order: session exists, not expired, not locked, an
        unconsumed token exists, the newest token is not expired, digest
        matches. A mismatch counts the attempt, locks at the limit and
        commits before returning the error.
        """
        errors = OTP_ERROR_CODES[purpose]

        otp_session = await self.uow.otp_sessions.find_active(email, purpose)
        if otp_session is None:
            return Return.err(
                Error(
                    errors.no_session,
                    "No active verification session found. Please request a new code.",
                )
            )

        state = otp_session.state(now)
        if state == OtpSessionState.expired:
            return Return.err(
                Error(
                    errors.session_expired,
                    "Verification session has expired. Please request a new code.",
                )
            )
        if state == OtpSessionState.locked:
            return Return.err(
                session_locked_error(
                    errors.session_locked, otp_session.lock_wait_seconds(now)
                )
            )

        tokens = await self.uow.otp_tokens.find_unconsumed(otp_session.id)
        if not tokens:
            return Return.err(
                Error(
                    errors.no_code,
                    "No valid code found. Please request a new code.",
                )
            )

        # Only the newest unconsumed token counts
        token = tokens[0]
        if token.state(now) == OtpTokenState.expired:
            return Return.err(
                Error(errors.code_expired, "Code has expired. Please request a new code.")
            )

        if not verify_otp(code, token.code_hash):
            updated = await self.uow.otp_sessions.register_failed_attempt(
                otp_session.id, now, timedelta(minutes=OTP_LOCK_DURATION_MINUTES)
            )
            await self.record_attempt(
                updated, token, OtpAttemptStatus.failure, "INVALID_CODE", context
            )
            await self.uow.commit()

            remaining = max(0, updated.max_attempts - updated.attempt_count)
            return Return.err(
                Error(
                    errors.invalid_code,
                    f"Invalid code. {remaining} attempts remaining.",
                    details={"attempts_remaining": remaining},
                )
            )

        return Return.ok(VerifiedCode(otp_session=otp_session, token=token))

    async def complete(
        self,
        verified: VerifiedCode,
        context: RequestContext,
        now: datetime,
    ) -> None:
        """Consume the token, close the session and record the success."""
        await self.uow.otp_tokens.consume(verified.token.id, now)
        await self.uow.otp_sessions.deactivate(verified.otp_session.id)
        await self.record_attempt(
            verified.otp_session,
            verified.token,
            OtpAttemptStatus.success,
            None,
            context,
        )

    async def record_attempt(
        self,
        otp_session: OtpSession,
        token: Optional[OtpToken],
        status: OtpAttemptStatus,
        reason: Optional[str],
        context: RequestContext,
    ) -> OtpAttempt:
        attempt = OtpAttempt(
            session_id=otp_session.id,
            token_id=token.id if token else None,
            user_id=otp_session.user_id,
            email=otp_session.email,
            purpose=otp_session.purpose,
            status=status,
            reason=reason,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
        )
        return await self.uow.otp_attempts.create(attempt)

    async def _issue_token(
        self, otp_session: OtpSession, now: datetime
    ) -> Tuple[OtpToken, str]:
        code = generate_otp()
        token = OtpToken(
            session_id=otp_session.id,
            code_hash=hash_otp(code),
            code_length=OTP_LENGTH,
            expires_at=now + timedelta(minutes=OTP_EXPIRY_MINUTES),
        )
        token = await self.uow.otp_tokens.create(token)
        return token, code
