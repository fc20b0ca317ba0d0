from __future__ import annotations

DEFAULT_AUTH_ERROR_MESSAGE = "An error occurred during authentication. Please try again."

AUTH_ERROR_MESSAGES: dict[str, str] = {
    "Configuration": "There was a problem with the authentication configuration. Please try again.",
    "AccessDenied": "You do not have permission to sign in.",
    "Verification": "The verification token has expired or has already been used.",
}


def present_auth_error(code: str | None) -> str:
    if code is None:
        return DEFAULT_AUTH_ERROR_MESSAGE
    return AUTH_ERROR_MESSAGES.get(code, DEFAULT_AUTH_ERROR_MESSAGE)
