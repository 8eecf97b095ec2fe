"""
Credential and token primitives.

Pure functions: passwords use bcrypt, one-time codes and session tokens are
stored as SHA-256 hex digests so the plaintext never reaches the database.
Passwords are cut to bcrypt's 72-byte input window before hashing or checking.
"""

import hashlib
import secrets

import bcrypt

from crm_service.domain.constants import (
    BCRYPT_MAX_PASSWORD_BYTES,
    OTP_LENGTH,
    PASSWORD_HASH_ROUNDS,
    SESSION_TOKEN_BYTES,
)

_DUMMY_PASSWORD_HASH = bcrypt.hashpw(b"dummy-password", bcrypt.gensalt(PASSWORD_HASH_ROUNDS))


def _password_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(
        _password_bytes(plain), bcrypt.gensalt(PASSWORD_HASH_ROUNDS)
    ).decode("utf-8")


def verify_password(plain: str, password_hash: str) -> bool:
    return bcrypt.checkpw(_password_bytes(plain), password_hash.encode("utf-8"))


def burn_password_check(plain: str) -> None:
    """Spend the same bcrypt time as a real check when no user was found."""
    bcrypt.checkpw(_password_bytes(plain), _DUMMY_PASSWORD_HASH)


def generate_otp(length: int = OTP_LENGTH) -> str:
    """Uniform random code; the range bounds guarantee exactly `length` digits."""
    lower = 10 ** (length - 1)
    return str(lower + secrets.randbelow(9 * lower))


def hash_otp(code: str) -> str:
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def verify_otp(code: str, code_hash: str) -> bool:
    return hash_otp(code) == code_hash


def generate_session_token() -> str:
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


def hash_session_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def get_token_last_four(token: str) -> str:
    return token[-4:]
