import pytest
from httpx import AsyncClient
from sqlalchemy import update
from sqlmodel import select

from crm_service.app.utils.credentials import hash_session_token
from crm_service.domain.clock import utcnow
from crm_service.domain.entities import AuditAction, AuditLog, Organization, Session
from tests.utils.auth_flow import fetch_all, fetch_one, get_user, login, register_verified
from tests.utils.json_compare import error_of, exclude_keys

EMAIL = "ada@acme.com"


@pytest.mark.asyncio
async def test_successful_login(client: AsyncClient, db_session, test_data):
    """Login returns user and session details and sets an HTTP-only session cookie"""
    await register_verified(client, test_data.payload("register_payload"))

    response, token = await login(client, EMAIL)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert exclude_keys(data["user"], {"id", "organization"}) == test_data.payload(
        "expected_login_user"
    )
    assert data["user"]["organization"]["slug"] == "acme"
    assert data["session"]["token_last_four"] == token[-4:]

    set_cookie = response.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie
    assert token not in response.text

    session = await fetch_one(db_session, select(Session))
    assert session.token_hash == hash_session_token(token)
    assert str(session.id) == data["session"]["id"]

    user = await get_user(db_session, EMAIL)
    assert user.last_login_at is not None
    assert user.login_attempts == 0


@pytest.mark.asyncio
async def test_unknown_email_and_wrong_password_look_identical(client: AsyncClient, test_data):
    await register_verified(client, test_data.payload("register_payload"))

    unknown, _ = await login(client, "nobody@acme.com")
    wrong, _ = await login(client, EMAIL, "Wr0ngpass")

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json()
    assert error_of(wrong)["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_unknown_email_with_long_password(client: AsyncClient, test_data):
    """A password past bcrypt's 72-byte window is still INVALID_CREDENTIALS for unknown emails"""
    await register_verified(client, test_data.payload("register_payload"))

    unknown, _ = await login(client, "nobody@acme.com", "A" * 100)
    wrong, _ = await login(client, EMAIL, "A" * 100)

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json()
    assert error_of(unknown)["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_lockout_after_five_failures(client: AsyncClient, db_session, test_data):
    """Fifth failure is still INVALID_CREDENTIALS; afterwards even the right password is refused"""
    await register_verified(client, test_data.payload("register_payload"))

    for _ in range(5):
        response, _ = await login(client, EMAIL, "Wr0ngpass")
        assert response.status_code == 401
        assert error_of(response)["code"] == "INVALID_CREDENTIALS"

    response, token = await login(client, EMAIL)

    assert response.status_code == 401
    assert error_of(response)["code"] == "ACCOUNT_LOCKED"
    assert token is None

    user = await get_user(db_session, EMAIL)
    assert user.is_locked is True
    assert user.login_attempts == 5

    failures = await fetch_all(
        db_session, select(AuditLog).where(AuditLog.action == AuditAction.login_failed)
    )
    assert len(failures) == 5


@pytest.mark.asyncio
async def test_login_unverified(client: AsyncClient, test_data):
    await client.post("/auth/register", json=test_data.payload("register_payload"))

    response, token = await login(client, EMAIL)

    assert response.status_code == 403
    assert error_of(response)["code"] == "ACCOUNT_NOT_VERIFIED"
    assert token is None


@pytest.mark.asyncio
async def test_login_inactive_organization(client: AsyncClient, db_session, test_data):
    await register_verified(client, test_data.payload("register_payload"))
    await db_session.execute(update(Organization).values(deleted_at=utcnow()))
    await db_session.commit()

    response, _ = await login(client, EMAIL)

    assert response.status_code == 403
    assert error_of(response)["code"] == "ORGANIZATION_INACTIVE"
