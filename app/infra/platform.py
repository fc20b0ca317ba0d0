from __future__ import annotations

import os
import re

PLATFORM_DOMAIN_SUFFIX = os.getenv("PLATFORM_DOMAIN_SUFFIX", "apps.devbox.local")
IDENTITY_PROVIDER_LOGIN_URL = os.getenv("IDENTITY_PROVIDER_LOGIN_URL", "/api/auth/signin")

_DNS_LABEL = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$", re.IGNORECASE)
_MAX_DNS_NAME_LENGTH = 253


class PlatformConfigError(Exception):
    pass


def validate_domain_suffix(raw: str | None) -> str:
    suffix = (raw or "").strip()
    if not suffix:
        raise PlatformConfigError("PLATFORM_DOMAIN_SUFFIX is required")
    if len(suffix) > _MAX_DNS_NAME_LENGTH:
        raise PlatformConfigError("PLATFORM_DOMAIN_SUFFIX is too long")
    for label in suffix.split("."):
        if not _DNS_LABEL.match(label):
            raise PlatformConfigError(f"PLATFORM_DOMAIN_SUFFIX has an invalid label: {label!r}")
    return suffix.lower()


def load_platform_domain_suffix() -> str:
    return validate_domain_suffix(PLATFORM_DOMAIN_SUFFIX)
