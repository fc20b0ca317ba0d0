from __future__ import annotations

import logging
from collections.abc import Callable

import jwt

from app.domain.access import ANONYMOUS, Anonymous, Authenticated, Identity
from app.infra.auth import decode_access_token
from app.infra.request_context import RequestContext

logger = logging.getLogger(__name__)

SessionVerifier = Callable[[str], str | None]


def verify_session_token(token: str) -> str | None:
    """Return the user id carried by a session token, or None if it is not usable."""
    try:
        claims = decode_access_token(token)
    except (jwt.PyJWTError, ValueError):
        return None
    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        return None
    return subject


class IdentityResolver:
    MEMO_KEY = "identity"

    def __init__(self, verifier: SessionVerifier | None = None) -> None:
        self._verify = verifier or verify_session_token

    def resolve(self, context: RequestContext) -> Identity:
        cached = context.memo.get(self.MEMO_KEY)
        if isinstance(cached, (Authenticated, Anonymous)):
            return cached
        identity = self._lookup(context.session_token)
        context.memo[self.MEMO_KEY] = identity
        return identity

    def _lookup(self, token: str | None) -> Identity:
        if not token:
            return ANONYMOUS
        user_id = self._verify(token)
        if user_id is None:
            logger.debug("session credential rejected")
            return ANONYMOUS
        return Authenticated(user_id=user_id)
