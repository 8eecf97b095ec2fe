from typing import Optional

from httpx import AsyncClient, Response
from sqlmodel import select

from crm_service.domain.constants import AUTH_COOKIE_NAME

OTP_CODE = "123456"
PASSWORD = "Passw0rd"


def session_cookie(token: str) -> dict:
    """Explicit Cookie header so each request picks its own session."""
    return {"Cookie": f"{AUTH_COOKIE_NAME}={token}"}


def extract_session_token(response: Response) -> Optional[str]:
    for header in response.headers.get_list("set-cookie"):
        name, _, rest = header.partition("=")
        if name.strip() == AUTH_COOKIE_NAME:
            return rest.split(";", 1)[0]
    return None


def is_cookie_cleared(response: Response) -> bool:
    return any(
        header.startswith(f"{AUTH_COOKIE_NAME}=") and "max-age=0" in header.lower()
        for header in response.headers.get_list("set-cookie")
    )


async def register_verified(client: AsyncClient, payload: dict) -> None:
    response = await client.post("/auth/register", json=payload)
    assert response.status_code == 201, response.text

    response = await client.post(
        "/auth/verify-email", json={"email": payload["email"], "code": OTP_CODE}
    )
    assert response.status_code == 200, response.text


async def login(client: AsyncClient, email: str, password: str = PASSWORD):
    """Log in and return (response, session token) without keeping the cookie in the jar."""
    response = await client.post("/auth/login", json={"email": email, "password": password})
    token = extract_session_token(response)
    client.cookies.clear()
    return response, token


async def fetch_all(db_session, statement):
    """Run a select bypassing stale identity-map state."""
    result = await db_session.exec(statement.execution_options(populate_existing=True))
    return result.all()


async def fetch_one(db_session, statement):
    rows = await fetch_all(db_session, statement)
    return rows[0] if rows else None


async def get_user(db_session, email: str):
    from crm_service.domain.entities import User

    return await fetch_one(db_session, select(User).where(User.email == email))
