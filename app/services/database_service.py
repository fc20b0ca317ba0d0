from __future__ import annotations

from urllib.parse import unquote, urlsplit

from app.domain.models import DatabaseConnectionRead, ProjectRead
from app.services.sandbox_endpoint_service import primary_sandbox

DATABASE_URL_KEY = "DATABASE_URL"
DEFAULT_DATABASE_PORT = 5432
DEFAULT_DATABASE_NAME = "postgres"
POSTGRES_SCHEMES = ("postgres", "postgresql")


def database_url_of(project: ProjectRead) -> str | None:
    """Find the connection string shown on the database screen.

    The project's DATABASE_URL variable wins, then the URL stored on the
    project, then one assembled from the primary sandbox's database fields.
    """
    for variable in project.environments:
        if variable.key == DATABASE_URL_KEY:
            return variable.value
    if project.database_url:
        return project.database_url

    sandbox = primary_sandbox(project)
    if sandbox is None or not (sandbox.db_host and sandbox.db_user and sandbox.db_password):
        return None
    port = sandbox.db_port or DEFAULT_DATABASE_PORT
    name = sandbox.db_name or DEFAULT_DATABASE_NAME
    return (
        f"postgresql://{sandbox.db_user}:{sandbox.db_password}"
        f"@{sandbox.db_host}:{port}/{name}?schema=public"
    )


def parse_database_url(url: str) -> DatabaseConnectionRead | None:
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError:
        return None
    if parts.scheme not in POSTGRES_SCHEMES or not parts.hostname:
        return None
    return DatabaseConnectionRead(
        url=url,
        host=parts.hostname,
        port=port or DEFAULT_DATABASE_PORT,
        name=parts.path.lstrip("/") or DEFAULT_DATABASE_NAME,
        user=unquote(parts.username or ""),
        password=unquote(parts.password or ""),
    )


def database_connection(project: ProjectRead) -> DatabaseConnectionRead | None:
    url = database_url_of(project)
    if not url:
        return None
    return parse_database_url(url)
