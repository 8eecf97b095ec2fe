import pytest
from httpx import AsyncClient
from sqlmodel import select

from crm_service.app.utils.credentials import hash_password
from crm_service.domain.entities import (
    AuditAction,
    AuditLog,
    Permission,
    Role,
    RolePermission,
    User,
    UserRole,
)
from tests.utils.auth_flow import (
    PASSWORD,
    fetch_all,
    get_user,
    login,
    register_verified,
    session_cookie,
)
from tests.utils.json_compare import error_of

OWNER_EMAIL = "ada@acme.com"
MEMBER_EMAIL = "alan@acme.com"


async def _add_member(db_session, organization_id, permissions):
    """Verified user in the owner's organization holding one custom role."""
    member = User(
        email=MEMBER_EMAIL,
        password_hash=hash_password(PASSWORD),
        verified=True,
        organization_id=organization_id,
    )
    role = Role(name="MEMBER", organization_id=organization_id)
    db_session.add(member)
    db_session.add(role)
    await db_session.flush()
    db_session.add(UserRole(user_id=member.id, role_id=role.id))

    for key in permissions:
        resource, action = key.split(":")
        permission = Permission(resource=resource, action=action)
        db_session.add(permission)
        await db_session.flush()
        db_session.add(RolePermission(role_id=role.id, permission_id=permission.id))

    await db_session.commit()


@pytest.fixture
def setup_organization(client: AsyncClient, db_session, test_data):
    async def _setup(member_permissions):
        await register_verified(client, test_data.payload("register_payload"))
        owner = await get_user(db_session, OWNER_EMAIL)
        await _add_member(db_session, owner.organization_id, member_permissions)

    return _setup


@pytest.mark.asyncio
async def test_owner_sees_every_session_of_the_organization(
    client: AsyncClient, test_data, setup_organization
):
    await setup_organization(["sessions:read"])
    await register_verified(client, test_data.payload("colleague_payload"))
    _, owner_token = await login(client, OWNER_EMAIL)
    await login(client, OWNER_EMAIL)
    await login(client, MEMBER_EMAIL)
    await login(client, "grace@acme.com")

    response = await client.get("/sessions", headers=session_cookie(owner_token))

    assert response.status_code == 200
    data = response.json()
    assert data["scope"] == "organization"
    assert len(data["sessions"]) == 3
    assert sum(1 for s in data["sessions"] if s["current"]) == 1


@pytest.mark.asyncio
async def test_member_sees_only_own_sessions(client: AsyncClient, setup_organization):
    await setup_organization(["sessions:read"])
    await login(client, OWNER_EMAIL)
    _, member_token = await login(client, MEMBER_EMAIL)

    response = await client.get("/sessions", headers=session_cookie(member_token))

    assert response.status_code == 200
    data = response.json()
    assert data["scope"] == "own"
    assert len(data["sessions"]) == 1
    assert data["sessions"][0]["current"] is True


@pytest.mark.asyncio
async def test_member_without_permission_is_forbidden(
    client: AsyncClient, db_session, setup_organization
):
    await setup_organization(["clients:read"])
    _, member_token = await login(client, MEMBER_EMAIL)

    response = await client.get("/sessions", headers=session_cookie(member_token))

    assert response.status_code == 403
    error = error_of(response)
    assert error["code"] == "FORBIDDEN"
    assert error["required_permission"] == "sessions:read"

    denials = await fetch_all(
        db_session, select(AuditLog).where(AuditLog.action == AuditAction.permission_denied)
    )
    assert len(denials) == 1
    assert denials[0].event_metadata["permissions"] == ["clients:read"]


@pytest.mark.asyncio
async def test_sessions_require_authentication(client: AsyncClient):
    response = await client.get("/sessions")

    assert response.status_code == 401
    assert error_of(response)["code"] == "AUTH_REQUIRED"
