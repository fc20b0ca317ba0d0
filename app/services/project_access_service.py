from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlmodel import Session, col, select

from app.domain.access import (
    AuthorizationOutcome,
    Authenticated,
    Authorized,
    Identity,
    ListingOutcome,
    NotFound,
    RedirectRequired,
    Unauthenticated,
)
from app.domain.models import (
    Environment,
    EnvironmentRead,
    Project,
    ProjectRead,
    ProjectSummaryRead,
    Sandbox,
    SandboxRead,
)
from app.infra.db import read_session

logger = logging.getLogger(__name__)


def _to_project_read(
    project: Project,
    sandboxes: Sequence[Sandbox] = (),
    environments: Sequence[Environment] = (),
) -> ProjectRead:
    summary = ProjectSummaryRead.model_validate(project)
    return ProjectRead(
        **summary.model_dump(),
        database_url=project.database_url,
        sandboxes=[SandboxRead.model_validate(item) for item in sandboxes],
        environments=[EnvironmentRead.model_validate(item) for item in environments],
    )


class ResourceAuthorizer:
    """Decides whether an identity may see a project.

    A project owned by someone else is reported exactly like a missing one so
    callers cannot probe for other users' project ids.
    """

    def _session(self) -> Session:
        return read_session()

    def authorize(self, identity: Identity, project_id: str) -> AuthorizationOutcome:
        if not isinstance(identity, Authenticated):
            return Unauthenticated()

        with self._session() as session:
            project = session.exec(
                select(Project)
                .where(Project.id == project_id)
                .where(Project.owner_id == identity.user_id)
            ).first()
            if project is None:
                logger.debug("project %s not visible to user %s", project_id, identity.user_id)
                return NotFound()
            sandboxes = session.exec(
                select(Sandbox)
                .where(Sandbox.project_id == project.id)
                .order_by(col(Sandbox.created_at), col(Sandbox.id))
            ).all()
            environments = session.exec(
                select(Environment)
                .where(Environment.project_id == project.id)
                .order_by(col(Environment.created_at), col(Environment.id))
            ).all()
            return Authorized(project=_to_project_read(project, sandboxes, environments))


class ProjectListingGate:
    def _session(self) -> Session:
        return read_session()

    def list_projects(self, identity: Identity) -> ListingOutcome:
        if not isinstance(identity, Authenticated):
            return RedirectRequired()

        with self._session() as session:
            rows = session.exec(
                select(Project)
                .where(Project.owner_id == identity.user_id)
                .order_by(col(Project.created_at).desc(), col(Project.id))
            ).all()
            return [_to_project_read(item) for item in rows]
