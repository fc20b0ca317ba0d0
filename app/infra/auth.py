from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

SESSION_JWT_SECRET = os.getenv("SESSION_JWT_SECRET", "dev-session-secret-change-me-before-deploy")
SESSION_JWT_ALGORITHM = os.getenv("SESSION_JWT_ALGORITHM", "HS256")
SESSION_JWT_EXPIRES_MIN = int(os.getenv("SESSION_JWT_EXPIRES_MIN", "60"))


def create_access_token(
    *,
    user_id: str,
    expires_minutes: int | None = None,
    secret: str | None = None,
) -> str:
    """Mint a session token in the identity provider's format.

    Sessions are issued by the external provider; this is used by tests and
    smoke scripts to produce credentials the verifier accepts.
    """
    now = datetime.now(UTC)
    if expires_minutes is None:
        expires_minutes = SESSION_JWT_EXPIRES_MIN
    expire_delta = timedelta(minutes=expires_minutes)
    payload: dict[str, Any] = {
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int((now + expire_delta).timestamp()),
    }
    return jwt.encode(payload, secret or SESSION_JWT_SECRET, algorithm=SESSION_JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    decoded = jwt.decode(
        token,
        SESSION_JWT_SECRET,
        algorithms=[SESSION_JWT_ALGORITHM],
        options={"require": ["exp", "sub"]},
    )
    if not isinstance(decoded, dict):
        raise ValueError("Invalid token payload")
    return decoded
