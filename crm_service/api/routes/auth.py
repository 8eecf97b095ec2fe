import re
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import AfterValidator, BaseModel, EmailStr, Field, field_validator

from crm_service.api.error import ClientError, ServerError
from crm_service.api.utils.cookie import clear_auth_cookie, read_auth_cookie, set_auth_cookie
from crm_service.api.utils.request_context import get_request_context
from crm_service.app.services.unit_of_work import UnitOfWork
from crm_service.app.use_cases.auth import (
    ChangePasswordCommand,
    ChangePasswordResponse,
    ChangePasswordUseCase,
    ForgotPasswordResponse,
    ForgotPasswordUseCase,
    LoginResponse,
    LoginUseCase,
    LogoutResponse,
    LogoutUseCase,
    RegisterCommand,
    RegisterResponse,
    RegisterUseCase,
    ResendCodeResponse,
    ResendCodeUseCase,
    ResetPasswordCommand,
    ResetPasswordResponse,
    ResetPasswordUseCase,
    VerifyEmailResponse,
    VerifyEmailUseCase,
)
from crm_service.depends import get_current_auth, get_unit_of_work
from crm_service.domain.value_objects import AuthContext, RequestContext
from crm_service.libs.result import Error

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Flow error code -> HTTP status. Anything unlisted is a server error.
ERROR_STATUS = {
    # Registration
    "EMAIL_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    "EMAIL_NOT_VERIFIED": status.HTTP_403_FORBIDDEN,
    # Email verification
    "NO_ACTIVE_SESSION": status.HTTP_400_BAD_REQUEST,
    "SESSION_EXPIRED": status.HTTP_400_BAD_REQUEST,
    "SESSION_LOCKED": status.HTTP_429_TOO_MANY_REQUESTS,
    "NO_VALID_CODE": status.HTTP_400_BAD_REQUEST,
    "CODE_EXPIRED": status.HTTP_400_BAD_REQUEST,
    "INVALID_CODE": status.HTTP_400_BAD_REQUEST,
    # Resend
    "NO_VERIFICATION_SESSION": status.HTTP_400_BAD_REQUEST,
    "TOO_MANY_RESENDS": status.HTTP_400_BAD_REQUEST,
    "RESEND_RATE_LIMITED": status.HTTP_429_TOO_MANY_REQUESTS,
    # Login
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "ACCOUNT_LOCKED": status.HTTP_401_UNAUTHORIZED,
    "ACCOUNT_NOT_VERIFIED": status.HTTP_403_FORBIDDEN,
    "ORGANIZATION_INACTIVE": status.HTTP_403_FORBIDDEN,
    # Password reset
    "NO_ACTIVE_RESET_SESSION": status.HTTP_400_BAD_REQUEST,
    "RESET_SESSION_EXPIRED": status.HTTP_400_BAD_REQUEST,
    "RESET_SESSION_LOCKED": status.HTTP_429_TOO_MANY_REQUESTS,
    "NO_VALID_RESET_CODE": status.HTTP_400_BAD_REQUEST,
    "RESET_CODE_EXPIRED": status.HTTP_400_BAD_REQUEST,
    "INVALID_RESET_CODE": status.HTTP_400_BAD_REQUEST,
    # Change password
    "INVALID_CURRENT_PASSWORD": status.HTTP_400_BAD_REQUEST,
}


def raise_for_error(error: Error):
    status_code = ERROR_STATUS.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def _check_password_strength(value: str) -> str:
    if not (
        re.search(r"[a-z]", value)
        and re.search(r"[A-Z]", value)
        and re.search(r"\d", value)
    ):
        raise ValueError(
            "Password must contain at least one uppercase letter, "
            "one lowercase letter and one number"
        )
    return value


NormalizedEmail = Annotated[EmailStr, AfterValidator(_normalize_email)]
StrongPassword = Annotated[
    str, Field(min_length=8, max_length=128), AfterValidator(_check_password_strength)
]
OtpCode = Annotated[str, Field(pattern=r"^\d{6}$", description="6-digit code")]


class RegisterRequest(BaseModel):
    """
    Registration HTTP request payload

    Validates incoming HTTP request before converting to RegisterCommand.
    """

    first_name: str = Field(..., min_length=1, max_length=50, description="First name")
    last_name: str = Field(..., min_length=1, max_length=50, description="Last name")
    email: NormalizedEmail = Field(..., description="User email address")
    password: StrongPassword = Field(..., description="Password (8-128 chars, mixed case, digit)")
    organization_name: str = Field(
        ..., min_length=2, max_length=100, description="Organization name"
    )

    @field_validator("first_name", "last_name", "organization_name")
    @classmethod
    def strip_names(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Must not be blank")
        return value


@router.post(
    "/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse
)
async def register(
    request: RegisterRequest,
    context: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    User Registration

    Creates the organization, the unverified owner account and the first
    verification code.

    Raises:
        - 403 Forbidden: Email registered but not verified (EMAIL_NOT_VERIFIED)
        - 409 Conflict: Email already registered
        - 422 Unprocessable Entity: Invalid input
        - 500 Internal Server Error: Missing OWNER role, slug exhaustion
    """
    command = RegisterCommand(
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        password=request.password,
        organization_name=request.organization_name,
    )

    result = await RegisterUseCase(uow).execute(command, context)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


class VerifyEmailRequest(BaseModel):
    email: NormalizedEmail = Field(..., description="User email address")
    code: OtpCode


@router.post("/verify-email", status_code=status.HTTP_200_OK, response_model=VerifyEmailResponse)
async def verify_email(
    request: VerifyEmailRequest,
    context: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Email Verification

    Raises:
        - 400 Bad Request: No session, expired session/code, invalid code
          (attempts_remaining in the error payload)
        - 429 Too Many Requests: Session locked (wait_seconds)
    """
    result = await VerifyEmailUseCase(uow).execute(request.email, request.code, context)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


class EmailRequest(BaseModel):
    email: NormalizedEmail = Field(..., description="User email address")


@router.post("/resend-code", status_code=status.HTTP_200_OK, response_model=ResendCodeResponse)
async def resend_code(
    request: EmailRequest,
    context: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Resend Verification Code

    Raises:
        - 400 Bad Request: No session, resend cap reached
        - 429 Too Many Requests: Locked or cooldown (wait_seconds)
    """
    result = await ResendCodeUseCase(uow).execute(request.email, context)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


class LoginRequest(BaseModel):
    email: NormalizedEmail = Field(..., description="User email address")
    password: str = Field(..., min_length=1, max_length=128, description="User password")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    context: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    User Login

    Sets the HTTP-only session cookie on success.

    Raises:
        - 401 Unauthorized: INVALID_CREDENTIALS, ACCOUNT_LOCKED
        - 403 Forbidden: ACCOUNT_NOT_VERIFIED, ORGANIZATION_INACTIVE
    """
    result = await LoginUseCase(uow).execute(request.email, request.password, context)
    if result.is_err():
        raise_for_error(result.error)

    set_auth_cookie(response, result.value.session_token)
    return result.value.response


class LogoutRequest(BaseModel):
    everywhere: bool = Field(False, description="Revoke every session of the user")


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    http_request: Request,
    response: Response,
    request: Optional[LogoutRequest] = None,
    context: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Logout. Always succeeds and always clears the session cookie."""
    everywhere = request.everywhere if request is not None else False
    result = await LogoutUseCase(uow).execute(
        read_auth_cookie(http_request), everywhere, context
    )
    clear_auth_cookie(response)
    return result.value


@router.post(
    "/forgot-password", status_code=status.HTTP_200_OK, response_model=ForgotPasswordResponse
)
async def forgot_password(
    request: EmailRequest,
    context: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Request a password reset code. The response never reveals whether the email exists."""
    result = await ForgotPasswordUseCase(uow).execute(request.email, context)
    return result.value


class ResetPasswordRequest(BaseModel):
    email: NormalizedEmail = Field(..., description="User email address")
    code: OtpCode
    new_password: StrongPassword = Field(..., description="New password")


@router.post(
    "/reset-password", status_code=status.HTTP_200_OK, response_model=ResetPasswordResponse
)
async def reset_password(
    request: ResetPasswordRequest,
    context: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Reset Password with a one-time code

    Revokes every session of the user.

    Raises:
        - 400 Bad Request: No session, expired session/code, invalid code
        - 429 Too Many Requests: Session locked (wait_seconds)
    """
    command = ResetPasswordCommand(
        email=request.email, code=request.code, new_password=request.new_password
    )
    result = await ResetPasswordUseCase(uow).execute(command, context)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: StrongPassword = Field(..., description="New password")


@router.post(
    "/change-password", status_code=status.HTTP_200_OK, response_model=ChangePasswordResponse
)
async def change_password(
    request: ChangePasswordRequest,
    auth: AuthContext = Depends(get_current_auth),
    context: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Change Password (authenticated)

    Keeps the calling session and revokes every other session.

    Raises:
        - 400 Bad Request: INVALID_CURRENT_PASSWORD
        - 401/403: Session gate failures
    """
    command = ChangePasswordCommand(
        current_password=request.current_password, new_password=request.new_password
    )
    result = await ChangePasswordUseCase(uow).execute(auth, command, context)
    if result.is_err():
        raise_for_error(result.error)
    return result.value
