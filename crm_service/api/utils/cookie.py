from typing import Optional

from fastapi import Request, Response

from config import ApplicationConfig
from crm_service.domain.constants import AUTH_COOKIE_NAME, SESSION_EXPIRY_DAYS

SESSION_COOKIE_MAX_AGE = SESSION_EXPIRY_DAYS * 24 * 60 * 60


def read_auth_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(AUTH_COOKIE_NAME)


def set_auth_cookie(response: Response, session_token: str) -> None:
    """HTTP-only, strict same-site; secure only in production."""
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=session_token,
        max_age=SESSION_COOKIE_MAX_AGE,
        path="/",
        domain=ApplicationConfig.COOKIE_DOMAIN,
        secure=ApplicationConfig.is_production(),
        httponly=True,
        samesite="strict",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key=AUTH_COOKIE_NAME,
        path="/",
        domain=ApplicationConfig.COOKIE_DOMAIN,
        secure=ApplicationConfig.is_production(),
        httponly=True,
        samesite="strict",
    )
