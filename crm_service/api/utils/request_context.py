from uuid import uuid4

from fastapi import Request

from crm_service.domain.value_objects import RequestContext


def get_request_context(request: Request) -> RequestContext:
    """Client metadata for audit rows; X-Request-ID is honoured when present."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip()
    elif request.client is not None:
        ip_address = request.client.host
    else:
        ip_address = None

    return RequestContext(
        ip_address=ip_address,
        user_agent=request.headers.get("user-agent"),
        request_id=request.headers.get("x-request-id") or str(uuid4()),
    )
