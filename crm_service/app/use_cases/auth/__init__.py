"""
Authentication Use Cases

All authentication-related business logic.
"""

from .register_use_case import RegisterUseCase
from .verify_email_use_case import VerifyEmailUseCase
from .resend_code_use_case import ResendCodeUseCase
from .login_use_case import LoginUseCase
from .logout_use_case import LogoutUseCase
from .forgot_password_use_case import ForgotPasswordUseCase
from .reset_password_use_case import ResetPasswordUseCase
from .change_password_use_case import ChangePasswordUseCase
from .authenticate_session_use_case import (
    COOKIE_CLEARING_CODES,
    AuthenticatedSession,
    AuthenticateSessionUseCase,
    TouchSessionActivityUseCase,
)
from .dtos import (
    RegisterCommand,
    ResetPasswordCommand,
    ChangePasswordCommand,
    RegisterResponse,
    VerifyEmailResponse,
    ResendCodeResponse,
    LoginResponse,
    LoginResult,
    LogoutResponse,
    ForgotPasswordResponse,
    ResetPasswordResponse,
    ChangePasswordResponse,
    UserInfo,
    SessionInfo,
    ProfileInfo,
    OrganizationInfo,
)

__all__ = [
    # Use Cases
    "RegisterUseCase",
    "VerifyEmailUseCase",
    "ResendCodeUseCase",
    "LoginUseCase",
    "LogoutUseCase",
    "ForgotPasswordUseCase",
    "ResetPasswordUseCase",
    "ChangePasswordUseCase",
    "AuthenticateSessionUseCase",
    "TouchSessionActivityUseCase",
    "AuthenticatedSession",
    "COOKIE_CLEARING_CODES",
    # DTOs - Commands
    "RegisterCommand",
    "ResetPasswordCommand",
    "ChangePasswordCommand",
    # DTOs - Responses
    "RegisterResponse",
    "VerifyEmailResponse",
    "ResendCodeResponse",
    "LoginResponse",
    "LoginResult",
    "LogoutResponse",
    "ForgotPasswordResponse",
    "ResetPasswordResponse",
    "ChangePasswordResponse",
    # DTOs - Nested Models
    "UserInfo",
    "SessionInfo",
    "ProfileInfo",
    "OrganizationInfo",
]
