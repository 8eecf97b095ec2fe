"""
User Use Cases

Current-user context, authorization and session listing.
"""

from .get_current_user_use_case import GetCurrentUserUseCase
from .authorize_use_case import AuthorizeUseCase
from .list_sessions_use_case import ListSessionsUseCase
from .dtos import MeResponse, SessionListResponse, SessionSummary

__all__ = [
    "GetCurrentUserUseCase",
    "AuthorizeUseCase",
    "ListSessionsUseCase",
    "MeResponse",
    "SessionListResponse",
    "SessionSummary",
]
