from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from fastapi.security.utils import get_authorization_scheme_param
from starlette.requests import Request

SESSION_COOKIE_NAME = "sandbox_console_session"
AUTHORIZATION_HEADER = "Authorization"
REQUEST_CONTEXT_STATE_KEY = "_request_context"


@dataclass
class RequestContext:
    session_token: str | None = None
    memo: dict[str, Any] = field(default_factory=dict)


def extract_session_token(request: Request) -> str | None:
    scheme, token = get_authorization_scheme_param(request.headers.get(AUTHORIZATION_HEADER))
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()

    cookie_token = request.cookies.get(SESSION_COOKIE_NAME)
    if cookie_token:
        return cookie_token
    return None


def get_request_context(request: Request) -> RequestContext:
    """Return the context bound to this request, creating it on first use."""
    context = getattr(request.state, REQUEST_CONTEXT_STATE_KEY, None)
    if isinstance(context, RequestContext):
        return context
    context = RequestContext(session_token=extract_session_token(request))
    setattr(request.state, REQUEST_CONTEXT_STATE_KEY, context)
    return context
