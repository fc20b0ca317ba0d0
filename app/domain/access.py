from __future__ import annotations

from dataclasses import dataclass

from app.domain.models import ProjectRead

LOGIN_PATH = "/login"


@dataclass(frozen=True)
class Authenticated:
    user_id: str


@dataclass(frozen=True)
class Anonymous:
    pass


ANONYMOUS = Anonymous()

Identity = Authenticated | Anonymous


@dataclass(frozen=True)
class Authorized:
    project: ProjectRead


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class Unauthenticated:
    pass


AuthorizationOutcome = Authorized | NotFound | Unauthenticated


@dataclass(frozen=True)
class RedirectRequired:
    target: str = LOGIN_PATH


ListingOutcome = list[ProjectRead] | RedirectRequired
