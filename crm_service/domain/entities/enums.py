"""
CRM Domain Enums

Stored enumerations and the explicit lifecycle states derived from
timestamp columns.
"""

from enum import Enum


class OtpPurpose(str, Enum):
    """What an OTP session proves"""

    email_verification = "email_verification"
    password_reset = "password_reset"


class OtpAttemptStatus(str, Enum):
    """Outcome recorded for one OTP attempt"""

    success = "success"
    failure = "failure"
    expired = "expired"
    locked = "locked"


class AuditAction(str, Enum):
    """Audit log actions"""

    create = "CREATE"
    update = "UPDATE"
    login = "LOGIN"
    login_failed = "LOGIN_FAILED"
    logout = "LOGOUT"
    password_change = "PASSWORD_CHANGE"
    password_reset = "PASSWORD_RESET"
    permission_denied = "PERMISSION_DENIED"


class SessionState(str, Enum):
    """Lifecycle of an authentication session"""

    active = "active"
    revoked = "revoked"
    expired = "expired"


class OtpSessionState(str, Enum):
    """Lifecycle of an OTP session"""

    active = "active"
    locked = "locked"
    expired = "expired"
    inactive = "inactive"


class OtpTokenState(str, Enum):
    """Lifecycle of a single issued code"""

    usable = "usable"
    consumed = "consumed"
    expired = "expired"
