"""
CRM Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AuditAction,
    OtpAttemptStatus,
    OtpPurpose,
    OtpSessionState,
    OtpTokenState,
    SessionState,
)

# Export all entities
from .organization import Organization
from .user import User
from .profile import Profile
from .role import Permission, Role, RolePermission, UserRole
from .session import Session
from .otp_session import OtpSession
from .otp_token import OtpToken
from .otp_attempt import OtpAttempt
from .audit_log import AuditLog

__all__ = [
    # Enums
    "AuditAction",
    "OtpAttemptStatus",
    "OtpPurpose",
    "OtpSessionState",
    "OtpTokenState",
    "SessionState",
    # Entities
    "Organization",
    "User",
    "Profile",
    "Role",
    "Permission",
    "UserRole",
    "RolePermission",
    "Session",
    "OtpSession",
    "OtpToken",
    "OtpAttempt",
    "AuditLog",
]
