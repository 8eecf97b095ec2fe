import string

from crm_service.app.utils.credentials import (
    burn_password_check,
    generate_otp,
    generate_session_token,
    get_token_last_four,
    hash_otp,
    hash_password,
    hash_session_token,
    verify_otp,
    verify_password,
)


def test_password_hash_roundtrip():
    """Test bcrypt hash verifies only the original password"""
    password_hash = hash_password("Passw0rd")

    assert password_hash != "Passw0rd"
    assert verify_password("Passw0rd", password_hash)
    assert not verify_password("passw0rd", password_hash)


def test_long_password_uses_first_72_bytes():
    """Test passwords past bcrypt's 72-byte window hash and verify without error"""
    password = "Aa1" + "x" * 97
    password_hash = hash_password(password)

    assert verify_password(password, password_hash)
    assert verify_password(password[:72], password_hash)
    assert not verify_password("Aa1" + "y" * 97, password_hash)


def test_long_multibyte_password_is_accepted():
    """Test a password of 100 multibyte characters can be hashed and checked"""
    password = "Pä1" + "é" * 97
    password_hash = hash_password(password)

    assert len(password.encode("utf-8")) > 72
    assert verify_password(password, password_hash)


def test_burn_password_check_accepts_long_password():
    """Test the no-such-user path tolerates input longer than 72 bytes"""
    assert burn_password_check("A" * 100) is None


def test_generate_otp_is_six_digits():
    """Test every generated code has exactly six digits without zero padding"""
    for _ in range(200):
        code = generate_otp()
        assert len(code) == 6
        assert set(code) <= set(string.digits)
        assert 100000 <= int(code) <= 999999


def test_otp_digest():
    """Test OTP hash is a SHA-256 hex digest and verification compares digests"""
    digest = hash_otp("123456")

    assert len(digest) == 64
    assert verify_otp("123456", digest)
    assert not verify_otp("654321", digest)


def test_session_token_properties():
    """Test session tokens are url-safe, unique and hashed deterministically"""
    token = generate_session_token()
    other = generate_session_token()

    assert token != other
    assert len(token) >= 43  # 32 bytes base64url
    assert set(token) <= set(string.ascii_letters + string.digits + "-_")
    assert hash_session_token(token) == hash_session_token(token)
    assert hash_session_token(token) != token
    assert get_token_last_four(token) == token[-4:]
