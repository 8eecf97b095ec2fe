from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from crm_service.app.use_cases.auth.dtos import SessionInfo, UserInfo


class MeResponse(BaseModel):
    """GET /me response payload"""

    user: UserInfo
    session: SessionInfo


class SessionSummary(BaseModel):
    id: str
    user_id: str
    token_last_four: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    last_activity: datetime
    expires_at: datetime
    current: bool


class SessionListResponse(BaseModel):
    scope: str
    sessions: List[SessionSummary]
