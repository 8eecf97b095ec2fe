from uuid import uuid4

import pytest

from crm_service.app.use_cases.users import AuthorizeUseCase, ListSessionsUseCase
from crm_service.domain.entities import AuditAction
from crm_service.domain.value_objects import (
    AuthContext,
    AuthorizationContext,
    PermissionScope,
    UserContext,
)


@pytest.fixture
def auth():
    return AuthContext(user_id=uuid4(), session_id=uuid4(), organization_id=uuid4())


@pytest.fixture
def with_permissions(mock_uow, make_user):
    def _set(permissions):
        mock_uow.users.find_context_by_id.return_value = UserContext(
            user=make_user(), organization=None, permissions=permissions
        )

    return _set


@pytest.mark.asyncio
async def test_permission_denied_is_audited(mock_uow, auth, with_permissions):
    """Test denial returns FORBIDDEN with the required permission and writes an audit row"""
    with_permissions(["clients:read"])

    result = await AuthorizeUseCase(mock_uow).execute(auth, "clients", "delete")

    assert result.is_err()
    assert result.error.code == "FORBIDDEN"
    assert result.error.message == "Missing permission: clients:delete"
    assert result.error.details == {"required_permission": "clients:delete"}

    audit_log = mock_uow.audit_logs.create.call_args[0][0]
    assert audit_log.action == AuditAction.permission_denied
    assert audit_log.event_metadata["permissions"] == ["clients:read"]
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_exact_permission_scopes_to_own(mock_uow, auth, with_permissions):
    with_permissions(["clients:read"])

    result = await AuthorizeUseCase(mock_uow).execute(auth, "clients", "read")

    assert result.is_ok()
    assert result.value.scope == PermissionScope(can_access_all=False, filter_type="own")
    mock_uow.audit_logs.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_super_wildcard_scopes_to_organization(mock_uow, auth, with_permissions):
    with_permissions(["*:*"])

    result = await AuthorizeUseCase(mock_uow).execute(auth, "clients", "delete")

    assert result.is_ok()
    assert result.value.scope.can_access_all is True
    assert result.value.scope.filter_type == "organization"


@pytest.mark.asyncio
async def test_list_sessions_applies_scope(mock_uow, auth):
    """Test own scope filters sessions by user, organization scope does not"""
    own = AuthorizationContext(
        auth=auth,
        permissions=["sessions:read"],
        scope=PermissionScope(can_access_all=False, filter_type="own"),
    )
    await ListSessionsUseCase(mock_uow).execute(own)
    mock_uow.sessions.list_active.assert_awaited_with(auth.organization_id, user_id=auth.user_id)

    everyone = AuthorizationContext(
        auth=auth,
        permissions=["*:*"],
        scope=PermissionScope(can_access_all=True, filter_type="organization"),
    )
    result = await ListSessionsUseCase(mock_uow).execute(everyone)
    mock_uow.sessions.list_active.assert_awaited_with(auth.organization_id, user_id=None)
    assert result.value.scope == "organization"
