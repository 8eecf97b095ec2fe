from datetime import datetime

import pytest
from httpx import AsyncClient
from sqlmodel import select

from crm_service.domain.clock import utcnow
from crm_service.domain.entities import (
    AuditAction,
    AuditLog,
    Organization,
    OtpPurpose,
    OtpSession,
    Role,
    UserRole,
)
from tests.utils.auth_flow import fetch_all, fetch_one, get_user, register_verified
from tests.utils.json_compare import error_of


@pytest.mark.asyncio
async def test_register_creates_unverified_owner(client: AsyncClient, db_session, test_data):
    """Registration creates organization, unverified user with OWNER role and one OTP session"""
    payload = test_data.payload("register_payload")

    response = await client.post("/auth/register", json=payload)

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert datetime.fromisoformat(data["otp_expires_at"]) > utcnow()

    user = await get_user(db_session, "ada@acme.com")
    assert user.verified is False
    assert user.is_locked is False
    assert user.password_hash != payload["password"]

    organization = await fetch_one(
        db_session, select(Organization).where(Organization.id == user.organization_id)
    )
    assert organization.name == "Acme"
    assert organization.slug == "acme"

    roles = await fetch_all(
        db_session,
        select(Role).join(UserRole, UserRole.role_id == Role.id).where(UserRole.user_id == user.id),
    )
    assert [role.name for role in roles] == ["OWNER"]

    otp_sessions = await fetch_all(
        db_session, select(OtpSession).where(OtpSession.email == "ada@acme.com")
    )
    assert len(otp_sessions) == 1
    assert otp_sessions[0].active is True
    assert otp_sessions[0].purpose == OtpPurpose.email_verification

    audit_logs = await fetch_all(db_session, select(AuditLog).where(AuditLog.user_id == user.id))
    assert [log.action for log in audit_logs] == [AuditAction.create]


@pytest.mark.asyncio
async def test_register_normalizes_email(client: AsyncClient, db_session, test_data):
    response = await client.post(
        "/auth/register", json=test_data.payload("register_payload", email="Ada@ACME.com")
    )

    assert response.status_code == 201
    assert await get_user(db_session, "ada@acme.com") is not None


@pytest.mark.asyncio
async def test_register_unverified_duplicate(client: AsyncClient, test_data):
    payload = test_data.payload("register_payload")
    await client.post("/auth/register", json=payload)

    response = await client.post("/auth/register", json=payload)

    assert response.status_code == 403
    assert error_of(response)["code"] == "EMAIL_NOT_VERIFIED"


@pytest.mark.asyncio
async def test_register_verified_duplicate(client: AsyncClient, test_data):
    payload = test_data.payload("register_payload")
    await register_verified(client, payload)

    response = await client.post("/auth/register", json=payload)

    assert response.status_code == 409
    assert error_of(response)["code"] == "EMAIL_ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_register_slug_collision(client: AsyncClient, db_session, test_data):
    """Second organization with the same name gets a suffixed slug"""
    await client.post("/auth/register", json=test_data.payload("register_payload"))

    response = await client.post("/auth/register", json=test_data.payload("colleague_payload"))

    assert response.status_code == 201
    slugs = sorted(org.slug for org in await fetch_all(db_session, select(Organization)))
    assert slugs[0] == "acme"
    assert slugs[1].startswith("acme-")
    assert len(slugs[1]) == len("acme-") + 4


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["short1A", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"])
async def test_register_weak_password(client: AsyncClient, test_data, password):
    response = await client.post(
        "/auth/register", json=test_data.payload("register_payload", password=password)
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_invalid_email(client: AsyncClient, test_data):
    response = await client.post(
        "/auth/register", json=test_data.payload("register_payload", email="not-an-email")
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_long_password_then_login(client: AsyncClient, test_data):
    """A password longer than 72 bytes registers and logs in like any other"""
    password = "Aa1" + "x" * 97
    await register_verified(client, test_data.payload("register_payload", password=password))

    response = await client.post(
        "/auth/login", json={"email": "ada@acme.com", "password": password}
    )

    assert response.status_code == 200
    assert response.json()["success"] is True
