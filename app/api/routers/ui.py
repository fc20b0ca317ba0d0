from __future__ import annotations

import secrets
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlencode, urlparse

from fastapi import APIRouter, Form, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse, Response

from app.api.deps import Authorizer, CurrentIdentity, EndpointResolver, ListingGate
from app.api.templating import templates
from app.domain.access import (
    Authenticated,
    AuthorizationOutcome,
    Authorized,
    Identity,
    NotFound,
    RedirectRequired,
)
from app.domain.auth_errors import present_auth_error
from app.domain.models import EnvironmentCategory, EnvironmentRead, ProjectRead
from app.infra import platform
from app.infra.request_context import SESSION_COOKIE_NAME, get_request_context
from app.services.database_service import database_connection
from app.services.environment_service import group_environments, mask_value, secret_environments
from app.services.project_access_service import ProjectListingGate
from app.services.sandbox_endpoint_service import oauth_callback_urls

router = APIRouter()

CSRF_COOKIE_NAME = "sandbox_console_csrf"
CSRF_MAX_AGE_SECONDS = 60 * 60 * 8
DEFAULT_NEXT_PATH = "/projects"
NOT_FOUND_TITLE = "Project not found"
HOME_RECENT_PROJECTS = 3


@dataclass(frozen=True)
class ProjectNavItem:
    key: str
    label: str
    suffix: str
    group: str


PROJECT_NAV_ITEMS: tuple[ProjectNavItem, ...] = (
    ProjectNavItem(key="overview", label="Overview", suffix="", group="project"),
    ProjectNavItem(key="database", label="Database", suffix="/database", group="project"),
    ProjectNavItem(key="environment", label="Environment Variables", suffix="/environment", group="config"),
    ProjectNavItem(key="secrets", label="Secret Configuration", suffix="/secrets", group="config"),
    ProjectNavItem(key="auth", label="Auth Configuration", suffix="/auth", group="config"),
    ProjectNavItem(key="payment", label="Payment Configuration", suffix="/payment", group="config"),
)


def _sanitize_next_path(next_path: str | None) -> str:
    if not next_path or "\\" in next_path:
        return DEFAULT_NEXT_PATH
    parsed = urlparse(next_path)
    if parsed.scheme or parsed.netloc:
        return DEFAULT_NEXT_PATH
    if not parsed.path.startswith("/") or parsed.path.startswith("//"):
        return DEFAULT_NEXT_PATH
    sanitized = parsed.path
    if parsed.query:
        sanitized = f"{sanitized}?{parsed.query}"
    return sanitized


def _new_csrf_token() -> str:
    return secrets.token_urlsafe(24)


def _set_csrf_cookie(response: Response, csrf_token: str) -> None:
    response.set_cookie(
        key=CSRF_COOKIE_NAME,
        value=csrf_token,
        httponly=False,
        samesite="strict",
        max_age=CSRF_MAX_AGE_SECONDS,
        path="/",
    )


def _verify_csrf(request: Request, csrf_token: str) -> None:
    csrf_cookie = request.cookies.get(CSRF_COOKIE_NAME)
    if not csrf_cookie or not csrf_token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid csrf token")
    if not secrets.compare_digest(csrf_cookie, csrf_token):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid csrf token")


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=SESSION_COOKIE_NAME, path="/")


def _login_redirect(request: Request) -> RedirectResponse:
    requested_path = request.url.path
    if request.url.query:
        requested_path = f"{requested_path}?{request.url.query}"
    encoded_next = quote(requested_path, safe="")
    response = RedirectResponse(
        url=f"/login?next={encoded_next}",
        status_code=status.HTTP_303_SEE_OTHER,
    )
    # A credential was sent but did not resolve to a user.
    if get_request_context(request).session_token:
        _clear_session_cookie(response)
    return response


def render_page(
    request: Request,
    template_name: str,
    *,
    status_code: int = status.HTTP_200_OK,
    **context: Any,
) -> Response:
    csrf_token = request.cookies.get(CSRF_COOKIE_NAME) or _new_csrf_token()
    response = templates.TemplateResponse(
        request=request,
        name=template_name,
        context={"csrf_token": csrf_token, **context},
        status_code=status_code,
    )
    if not request.cookies.get(CSRF_COOKIE_NAME):
        _set_csrf_cookie(response, csrf_token)
    return response


def render_not_found(request: Request) -> Response:
    return render_page(
        request,
        "not_found.html",
        status_code=status.HTTP_404_NOT_FOUND,
        page_title=NOT_FOUND_TITLE,
    )


def render_server_error(request: Request) -> Response:
    return render_page(
        request,
        "server_error.html",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        page_title="Something went wrong",
    )


def _project_nav(project: ProjectRead, active_key: str) -> list[dict[str, Any]]:
    return [
        {
            "key": item.key,
            "label": item.label,
            "href": f"/projects/{quote(project.id, safe='')}{item.suffix}",
            "group": item.group,
            "active": item.key == active_key,
        }
        for item in PROJECT_NAV_ITEMS
    ]


def _variable_rows(variables: Iterable[EnvironmentRead]) -> list[dict[str, str]]:
    return [
        {"key": item.key, "value": mask_value(item.value) if item.is_secret else item.value}
        for item in variables
    ]


def _sidebar_projects(gate: ProjectListingGate, identity: Identity) -> list[ProjectRead]:
    outcome = gate.list_projects(identity)
    if isinstance(outcome, RedirectRequired):
        return []
    return outcome


def _render_project_page(
    request: Request,
    outcome: AuthorizationOutcome,
    *,
    identity: Identity,
    gate: ProjectListingGate,
    template_name: str,
    active_nav: str,
    title: str,
    subtitle: str,
    build_context: Callable[[ProjectRead], dict[str, Any]] | None = None,
) -> Response:
    if isinstance(outcome, NotFound):
        return render_not_found(request)
    if not isinstance(outcome, Authorized) or not isinstance(identity, Authenticated):
        return _login_redirect(request)

    project = outcome.project
    extra = build_context(project) if build_context is not None else {}
    return render_page(
        request,
        template_name,
        page_title=title,
        page_subtitle=subtitle,
        user_id=identity.user_id,
        project=project,
        projects=_sidebar_projects(gate, identity),
        nav_items=_project_nav(project, active_nav),
        **extra,
    )


@router.get("/")
def ui_home(request: Request, identity: CurrentIdentity, gate: ListingGate) -> Response:
    recent: list[ProjectRead] = []
    if isinstance(identity, Authenticated):
        recent = _sidebar_projects(gate, identity)[:HOME_RECENT_PROJECTS]
    return render_page(
        request,
        "home.html",
        page_title="Build full-stack apps in a cloud sandbox",
        authenticated=isinstance(identity, Authenticated),
        recent_projects=recent,
    )


@router.get("/login")
def ui_login(
    request: Request,
    identity: CurrentIdentity,
    next_path: str | None = Query(default=None, alias="next"),
) -> Response:
    safe_next = _sanitize_next_path(next_path)
    if isinstance(identity, Authenticated):
        return RedirectResponse(url=safe_next, status_code=status.HTTP_303_SEE_OTHER)
    sign_in_url = f"{platform.IDENTITY_PROVIDER_LOGIN_URL}?{urlencode({'callbackUrl': safe_next})}"
    return render_page(
        request,
        "login.html",
        page_title="Sign in",
        next_path=safe_next,
        sign_in_url=sign_in_url,
    )


@router.post("/logout")
def ui_logout(request: Request, csrf_token: str = Form(...)) -> RedirectResponse:
    _verify_csrf(request, csrf_token)
    response = RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)
    _clear_session_cookie(response)
    _set_csrf_cookie(response, _new_csrf_token())
    return response


@router.get("/auth/error")
def ui_auth_error(request: Request, error: str | None = Query(default=None)) -> Response:
    return render_page(
        request,
        "auth_error.html",
        page_title="Authentication Error",
        error_message=present_auth_error(error),
    )


@router.get("/settings")
def ui_settings(request: Request, identity: CurrentIdentity, gate: ListingGate) -> Response:
    outcome = gate.list_projects(identity)
    if isinstance(outcome, RedirectRequired) or not isinstance(identity, Authenticated):
        return _login_redirect(request)
    return render_page(
        request,
        "settings.html",
        page_title="Settings",
        user_id=identity.user_id,
        projects=outcome,
    )


@router.get("/projects")
def ui_projects(request: Request, identity: CurrentIdentity, gate: ListingGate) -> Response:
    outcome = gate.list_projects(identity)
    if isinstance(outcome, RedirectRequired) or not isinstance(identity, Authenticated):
        return _login_redirect(request)
    return render_page(
        request,
        "projects.html",
        page_title="Projects",
        user_id=identity.user_id,
        projects=outcome,
    )


@router.get("/projects/{project_id}")
def ui_project_overview(
    request: Request,
    project_id: str,
    identity: CurrentIdentity,
    authorizer: Authorizer,
    gate: ListingGate,
    endpoints: EndpointResolver,
) -> Response:
    return _render_project_page(
        request,
        authorizer.authorize(identity, project_id),
        identity=identity,
        gate=gate,
        template_name="project_overview.html",
        active_nav="overview",
        title="Overview",
        subtitle="Project status and application address.",
        build_context=lambda project: {"endpoint": endpoints.resolve(project)},
    )


@router.get("/projects/{project_id}/environment")
def ui_project_environment(
    request: Request,
    project_id: str,
    identity: CurrentIdentity,
    authorizer: Authorizer,
    gate: ListingGate,
) -> Response:
    return _render_project_page(
        request,
        authorizer.authorize(identity, project_id),
        identity=identity,
        gate=gate,
        template_name="project_environment.html",
        active_nav="environment",
        title="Environment Variables",
        subtitle="Variables injected into the project sandbox.",
        build_context=lambda project: {
            "variables": _variable_rows(group_environments(project.environments).general),
        },
    )


@router.get("/projects/{project_id}/secrets")
def ui_project_secrets(
    request: Request,
    project_id: str,
    identity: CurrentIdentity,
    authorizer: Authorizer,
    gate: ListingGate,
) -> Response:
    return _render_project_page(
        request,
        authorizer.authorize(identity, project_id),
        identity=identity,
        gate=gate,
        template_name="project_secrets.html",
        active_nav="secrets",
        title="Secret Configuration",
        subtitle="Sensitive environment variables and API keys for your project.",
        build_context=lambda project: {
            "secrets": [
                {
                    "key": item.key,
                    "category": item.category or EnvironmentCategory.GENERAL.value,
                    "value": mask_value(item.value),
                }
                for item in secret_environments(project.environments)
            ],
        },
    )


@router.get("/projects/{project_id}/auth")
def ui_project_auth(
    request: Request,
    project_id: str,
    identity: CurrentIdentity,
    authorizer: Authorizer,
    gate: ListingGate,
    endpoints: EndpointResolver,
) -> Response:
    def _context(project: ProjectRead) -> dict[str, Any]:
        endpoint = endpoints.resolve(project)
        return {
            "endpoint": endpoint,
            "callback_urls": oauth_callback_urls(endpoint),
            "variables": _variable_rows(group_environments(project.environments).auth),
        }

    return _render_project_page(
        request,
        authorizer.authorize(identity, project_id),
        identity=identity,
        gate=gate,
        template_name="project_auth.html",
        active_nav="auth",
        title="Auth Configuration",
        subtitle="OAuth providers and callback addresses for your application.",
        build_context=_context,
    )


@router.get("/projects/{project_id}/payment")
def ui_project_payment(
    request: Request,
    project_id: str,
    identity: CurrentIdentity,
    authorizer: Authorizer,
    gate: ListingGate,
) -> Response:
    return _render_project_page(
        request,
        authorizer.authorize(identity, project_id),
        identity=identity,
        gate=gate,
        template_name="project_payment.html",
        active_nav="payment",
        title="Payment Configuration",
        subtitle="Payment provider keys for your application.",
        build_context=lambda project: {
            "variables": _variable_rows(group_environments(project.environments).payment),
        },
    )


@router.get("/projects/{project_id}/database")
def ui_project_database(
    request: Request,
    project_id: str,
    identity: CurrentIdentity,
    authorizer: Authorizer,
    gate: ListingGate,
) -> Response:
    def _context(project: ProjectRead) -> dict[str, Any]:
        connection = database_connection(project)
        if connection is None:
            return {"connection": None}
        return {
            "connection": connection,
            "masked_password": mask_value(connection.password),
            "masked_url": mask_value(connection.url),
        }

    return _render_project_page(
        request,
        authorizer.authorize(identity, project_id),
        identity=identity,
        gate=gate,
        template_name="project_database.html",
        active_nav="database",
        title="Database",
        subtitle="Connection details of the project's PostgreSQL database.",
        build_context=_context,
    )
