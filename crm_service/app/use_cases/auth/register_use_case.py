import logging

from crm_service.app.services.otp_delivery import deliver_otp
from crm_service.app.services.otp_service import OtpService
from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.app.utils.credentials import hash_password
from crm_service.app.utils.slug import generate_unique_slug
from crm_service.domain.clock import utcnow
from crm_service.domain.constants import OWNER_ROLE_NAME
from crm_service.domain.entities import (
    AuditAction,
    AuditLog,
    Organization,
    OtpPurpose,
    Profile,
    User,
)
from crm_service.domain.value_objects import RequestContext
from crm_service.libs.result import Error, Result, Return
from .dtos import RegisterCommand, RegisterResponse

logger = logging.getLogger(__name__)


class RegisterUseCase:
    """
    Register Use Case

    Command/Response Pattern:
    - Input: RegisterCommand (validated business intent)
    - Output: Result[RegisterResponse] (OTP expiry)

    Business Logic:
    1. Reject an email that already belongs to a user: verified -> conflict,
       unverified -> EMAIL_NOT_VERIFIED so the client resumes verification
    2. Hash password with bcrypt outside any transaction, then re-check the
       email once the write transaction is open
    3. Generate a unique organization slug
    4. Create Organization, User (unverified) and Profile
    5. Assign the system-wide OWNER role (missing seed role is fatal)
    6. Open an EMAIL_VERIFICATION OTP session with its first token
    7. Write an audit log row and commit atomically
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, command: RegisterCommand, context: RequestContext
    ) -> Result[RegisterResponse]:
        async with self.uow:
            existing_user = await self.uow.users.get_by_email(command.email)
            if existing_user is not None:
                return Return.err(self._existing_email_error(existing_user))

        password_hash = hash_password(command.password)

        async with self.uow:
            existing_user = await self.uow.users.get_by_email(command.email)
            if existing_user is not None:
                return Return.err(self._existing_email_error(existing_user))

            now = utcnow()

            slug = await generate_unique_slug(
                command.organization_name, self.uow.organizations.slug_exists
            )
            if slug is None:
                return Return.err(
                    Error(
                        "SLUG_GENERATION_FAILED",
                        "Could not generate a unique organization slug",
                    )
                )

            owner_role = await self.uow.roles.get_system_role(OWNER_ROLE_NAME)
            if owner_role is None:
                return Return.err(
                    Error("OWNER_ROLE_NOT_FOUND", "System OWNER role is not seeded")
                )

            organization = await self.uow.organizations.create(
                Organization(name=command.organization_name, slug=slug)
            )

            user = await self.uow.users.create(
                User(
                    email=command.email,
                    password_hash=password_hash,
                    verified=False,
                    organization_id=organization.id,
                ),
                Profile(first_name=command.first_name, last_name=command.last_name),
            )
            await self.uow.roles.assign_to_user(user.id, owner_role.id)

            otp_session, token, code = await OtpService(self.uow).open_session(
                user, OtpPurpose.email_verification, context, now
            )

            await self.uow.audit_logs.create(
                AuditLog(
                    organization_id=organization.id,
                    user_id=user.id,
                    action=AuditAction.create,
                    resource="user",
                    resource_id=str(user.id),
                    after={
                        "email": user.email,
                        "organization_id": str(organization.id),
                        "verified": False,
                    },
                    event_metadata={
                        "action": "REGISTRATION",
                        "organization_slug": slug,
                        "otp_session_id": str(otp_session.id),
                    },
                    ip_address=context.ip_address,
                    user_agent=context.user_agent,
                )
            )

            await self.uow.commit()

            deliver_otp(user.email, code, OtpPurpose.email_verification, token.expires_at)
            logger.info(f"User registered: user_id={user.id} organization={slug}")

            return Return.ok(
                RegisterResponse(
                    message="Registration successful. Check your email for the verification code.",
                    otp_expires_at=token.expires_at,
                )
            )

    @staticmethod
    def _existing_email_error(user: User) -> Error:
        if user.verified:
            return Error("EMAIL_ALREADY_EXISTS", "Email already registered")
        return Error(
            "EMAIL_NOT_VERIFIED",
            "This email is registered but not verified. "
            "Please verify it or request a new code.",
        )
