"""
Verify Email Use Case

Completes registration by checking the emailed one-time code.
"""

import logging

from crm_service.app.services.otp_service import OtpService
from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.domain.clock import utcnow
from crm_service.domain.entities import AuditAction, AuditLog, OtpPurpose
from crm_service.domain.value_objects import RequestContext
from crm_service.libs.result import Error, Result, Return
from .dtos import VerifyEmailResponse

logger = logging.getLogger(__name__)


class VerifyEmailUseCase:
    """
    Use case for email verification with a one-time code.

    Business Rules:
    - Already verified user -> success, nothing is written (idempotent)
    - Code is checked against the newest unconsumed token of the single
      active EMAIL_VERIFICATION session
    - Wrong code counts an attempt; the session locks at max attempts
    - Success consumes the token, closes the session and verifies the user
      in one transaction

    Errors:
    - NO_ACTIVE_SESSION, SESSION_EXPIRED, SESSION_LOCKED (wait_seconds),
      NO_VALID_CODE, CODE_EXPIRED, INVALID_CODE (attempts_remaining)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, email: str, code: str, context: RequestContext
    ) -> Result[VerifyEmailResponse]:
        async with self.uow:
            now = utcnow()

            user = await self.uow.users.get_by_email(email)
            if user is not None and user.verified:
                return Return.ok(
                    VerifyEmailResponse(message="Email already verified")
                )

            otp = OtpService(self.uow)
            result = await otp.verify_code(
                email, OtpPurpose.email_verification, code, context, now
            )
            if result.is_err():
                return result

            verified = result.value
            if user is None:
                return Return.err(
                    Error(
                        "DATA_INTEGRITY_ERROR",
                        "Verification session references a missing user",
                    )
                )

            await otp.complete(verified, context, now)

            user.mark_verified(now)
            await self.uow.users.update(user)

            await self.uow.audit_logs.create(
                AuditLog(
                    organization_id=user.organization_id,
                    user_id=user.id,
                    action=AuditAction.update,
                    resource="user",
                    resource_id=str(user.id),
                    before={"verified": False},
                    after={"verified": True},
                    event_metadata={
                        "action": "EMAIL_VERIFICATION",
                        "otp_session_id": str(verified.otp_session.id),
                    },
                    ip_address=context.ip_address,
                    user_agent=context.user_agent,
                )
            )

            await self.uow.commit()
            logger.info(f"Email verified: user_id={user.id}")

            return Return.ok(VerifyEmailResponse(message="Email verified successfully"))
