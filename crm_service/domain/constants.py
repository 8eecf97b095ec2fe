"""
Authentication constants.

Security-sensitive limits shared by the registration, verification, login
and password flows.
"""

# Credentials
PASSWORD_HASH_ROUNDS = 10
# bcrypt only reads this many bytes of input; newer releases reject longer input
BCRYPT_MAX_PASSWORD_BYTES = 72

# One-time codes
OTP_LENGTH = 6
OTP_EXPIRY_MINUTES = 15
OTP_SESSION_EXPIRY_HOURS = 24
OTP_MAX_ATTEMPTS = 5
OTP_LOCK_DURATION_MINUTES = 15

# Resend limits
MAX_RESENDS = 5
RESEND_COOLDOWN_SECONDS = 60

# Login and sessions
MAX_LOGIN_ATTEMPTS = 5
SESSION_EXPIRY_DAYS = 30
SESSION_TOKEN_BYTES = 32
AUTH_COOKIE_NAME = "session_token"
SESSION_ACTIVITY_UPDATE_THRESHOLD_MINUTES = 5

# Organization slugs
SLUG_MAX_ATTEMPTS = 5
SLUG_RANDOM_SUFFIX_LENGTH = 4

# RBAC
OWNER_ROLE_NAME = "OWNER"
SUPER_WILDCARD_PERMISSION = "*:*"
