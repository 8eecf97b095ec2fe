from uuid import uuid4

import pytest

from crm_service.app.use_cases.auth.logout_use_case import LogoutUseCase
from crm_service.app.utils.credentials import hash_session_token
from crm_service.domain.clock import utcnow
from crm_service.domain.entities import AuditAction, Session


@pytest.fixture
def session():
    return Session(
        id=uuid4(),
        user_id=uuid4(),
        organization_id=uuid4(),
        token_hash=hash_session_token("token-abcd"),
        token_last_four="abcd",
        expires_at=utcnow(),
    )


@pytest.mark.asyncio
async def test_logout_without_token(mock_uow, request_context):
    result = await LogoutUseCase(mock_uow).execute(None, False, request_context)

    assert result.is_ok()
    assert result.value.sessions_revoked == 0
    mock_uow.sessions.find_by_token_hash.assert_not_awaited()


@pytest.mark.asyncio
async def test_logout_current_session(mock_uow, request_context, session):
    mock_uow.sessions.find_by_token_hash.return_value = session

    result = await LogoutUseCase(mock_uow).execute("token-abcd", False, request_context)

    assert result.value.sessions_revoked == 1
    mock_uow.sessions.find_by_token_hash.assert_awaited_once_with(
        hash_session_token("token-abcd")
    )
    mock_uow.sessions.revoke.assert_awaited_once_with(session.id, "logout")
    audit_log = mock_uow.audit_logs.create.call_args[0][0]
    assert audit_log.action == AuditAction.logout
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_logout_everywhere(mock_uow, request_context, session):
    mock_uow.sessions.find_by_token_hash.return_value = session
    mock_uow.sessions.revoke_all_for_user.return_value = 3

    result = await LogoutUseCase(mock_uow).execute("token-abcd", True, request_context)

    assert result.value.sessions_revoked == 3
    mock_uow.sessions.revoke_all_for_user.assert_awaited_once_with(
        session.user_id, "logout_everywhere"
    )
    mock_uow.sessions.revoke.assert_not_awaited()


@pytest.mark.asyncio
async def test_logout_already_revoked(mock_uow, request_context, session):
    """Test revoked session logs out successfully without writing anything"""
    session.revoked_at = utcnow()
    mock_uow.sessions.find_by_token_hash.return_value = session

    result = await LogoutUseCase(mock_uow).execute("token-abcd", False, request_context)

    assert result.is_ok()
    assert result.value.sessions_revoked == 0
    mock_uow.sessions.revoke.assert_not_awaited()
    mock_uow.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_logout_never_fails(mock_uow, request_context):
    """Test storage errors are swallowed and reported as a successful logout"""
    mock_uow.sessions.find_by_token_hash.side_effect = RuntimeError("database down")

    result = await LogoutUseCase(mock_uow).execute("token-abcd", False, request_context)

    assert result.is_ok()
    assert result.value.sessions_revoked == 0
