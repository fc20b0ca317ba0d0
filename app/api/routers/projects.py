from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from app.api.deps import Authorizer, CurrentIdentity, EndpointResolver, ListingGate
from app.domain.access import AuthorizationOutcome, Authorized, RedirectRequired, Unauthenticated
from app.domain.models import (
    EnvironmentGroupsRead,
    ProjectDetailRead,
    ProjectRead,
    ProjectSummaryRead,
)
from app.services.environment_service import group_environments

router = APIRouter()


def _require_authorized(outcome: AuthorizationOutcome) -> ProjectRead:
    if isinstance(outcome, Authorized):
        return outcome.project
    if isinstance(outcome, Unauthenticated):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="project not found")


@router.get("/projects", response_model=list[ProjectSummaryRead])
def list_projects(identity: CurrentIdentity, gate: ListingGate) -> list[ProjectSummaryRead]:
    outcome = gate.list_projects(identity)
    if isinstance(outcome, RedirectRequired):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return [ProjectSummaryRead.model_validate(item.model_dump()) for item in outcome]


@router.get("/projects/{project_id}", response_model=ProjectDetailRead)
def get_project(
    project_id: str,
    identity: CurrentIdentity,
    authorizer: Authorizer,
    endpoints: EndpointResolver,
) -> ProjectDetailRead:
    project = _require_authorized(authorizer.authorize(identity, project_id))
    return ProjectDetailRead(**project.model_dump(), endpoint=endpoints.resolve(project))


@router.get("/projects/{project_id}/environment", response_model=EnvironmentGroupsRead)
def get_project_environment(
    project_id: str,
    identity: CurrentIdentity,
    authorizer: Authorizer,
) -> EnvironmentGroupsRead:
    project = _require_authorized(authorizer.authorize(identity, project_id))
    return group_environments(project.environments)
