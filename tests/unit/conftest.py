from datetime import timedelta
from uuid import uuid4

import pytest
from unittest.mock import AsyncMock, MagicMock

from crm_service.app.utils.credentials import hash_otp, hash_password
from crm_service.domain.clock import utcnow
from crm_service.domain.entities import OtpPurpose, OtpSession, OtpToken, User
from crm_service.domain.value_objects import RequestContext

PASSWORD = "Passw0rd"
OTP_CODE = "123456"


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.create = AsyncMock(side_effect=lambda user, profile: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)
    uow.users.find_for_login = AsyncMock(return_value=None)
    uow.users.find_context_by_id = AsyncMock(return_value=None)
    uow.users.increment_login_attempts = AsyncMock()

    uow.organizations = MagicMock()
    uow.organizations.slug_exists = AsyncMock(return_value=False)
    uow.organizations.create = AsyncMock(side_effect=lambda organization: organization)

    uow.roles = MagicMock()
    uow.roles.get_system_role = AsyncMock()
    uow.roles.assign_to_user = AsyncMock()

    uow.sessions = MagicMock()
    uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    uow.sessions.get_by_id = AsyncMock(return_value=None)
    uow.sessions.find_by_token_hash = AsyncMock(return_value=None)
    uow.sessions.find_for_auth = AsyncMock(return_value=None)
    uow.sessions.touch = AsyncMock()
    uow.sessions.revoke = AsyncMock(return_value=True)
    uow.sessions.revoke_all_for_user = AsyncMock(return_value=0)
    uow.sessions.revoke_all_except = AsyncMock(return_value=0)
    uow.sessions.list_active = AsyncMock(return_value=[])

    uow.otp_sessions = MagicMock()
    uow.otp_sessions.create = AsyncMock(side_effect=lambda otp_session: otp_session)
    uow.otp_sessions.find_active = AsyncMock(return_value=None)
    uow.otp_sessions.find_latest = AsyncMock(return_value=None)
    uow.otp_sessions.find_locked = AsyncMock(return_value=None)
    uow.otp_sessions.register_failed_attempt = AsyncMock()
    uow.otp_sessions.deactivate = AsyncMock()
    uow.otp_sessions.deactivate_active = AsyncMock(return_value=0)
    uow.otp_sessions.record_resend = AsyncMock()

    uow.otp_tokens = MagicMock()
    uow.otp_tokens.create = AsyncMock(side_effect=lambda token: token)
    uow.otp_tokens.find_unconsumed = AsyncMock(return_value=[])
    uow.otp_tokens.consume = AsyncMock()
    uow.otp_tokens.consume_all = AsyncMock(return_value=0)

    uow.otp_attempts = MagicMock()
    uow.otp_attempts.create = AsyncMock(side_effect=lambda attempt: attempt)

    uow.audit_logs = MagicMock()
    uow.audit_logs.create = AsyncMock(side_effect=lambda audit_log: audit_log)

    return uow


@pytest.fixture
def request_context():
    return RequestContext(ip_address="127.0.0.1", user_agent="pytest", request_id="req-1")


@pytest.fixture
def password_hash():
    return hash_password(PASSWORD)


@pytest.fixture
def make_user(password_hash):
    def _make(**overrides):
        fields = dict(
            id=uuid4(),
            email="ada@acme.com",
            password_hash=password_hash,
            verified=True,
            organization_id=uuid4(),
        )
        fields.update(overrides)
        return User(**fields)

    return _make


@pytest.fixture
def make_otp_session():
    def _make(**overrides):
        now = utcnow()
        fields = dict(
            id=uuid4(),
            user_id=uuid4(),
            organization_id=uuid4(),
            email="ada@acme.com",
            purpose=OtpPurpose.email_verification,
            active=True,
            expires_at=now + timedelta(hours=24),
            attempt_count=0,
            max_attempts=5,
            resend_count=0,
            last_sent_at=now - timedelta(minutes=5),
        )
        fields.update(overrides)
        return OtpSession(**fields)

    return _make


@pytest.fixture
def make_otp_token():
    def _make(otp_session, code=OTP_CODE, **overrides):
        fields = dict(
            id=uuid4(),
            session_id=otp_session.id,
            code_hash=hash_otp(code),
            expires_at=utcnow() + timedelta(minutes=15),
        )
        fields.update(overrides)
        return OtpToken(**fields)

    return _make
