from __future__ import annotations

from app.domain.models import ProjectRead, ResolvedEndpoint, SandboxRead

OAUTH_PROVIDERS: tuple[str, ...] = ("github", "google")


def primary_sandbox(project: ProjectRead) -> SandboxRead | None:
    if not project.sandboxes:
        return None
    return project.sandboxes[0]


class SandboxEndpointResolver:
    """Computes the public URL of a project's sandbox.

    Provisioning finishes after the project is created, so until the sandbox
    reports its address the URL is synthesized with the same naming scheme the
    orchestrator assigns.
    """

    def __init__(self, domain_suffix: str) -> None:
        self._domain_suffix = domain_suffix

    def synthesize_url(self, project_id: str) -> str:
        return f"https://sandbox-{project_id}.{self._domain_suffix}"

    def resolve(self, project: ProjectRead) -> ResolvedEndpoint:
        primary = primary_sandbox(project)
        persisted_url = (primary.public_url or "").strip() if primary is not None else ""
        if persisted_url:
            return ResolvedEndpoint(url=persisted_url, is_synthesized=False)
        return ResolvedEndpoint(url=self.synthesize_url(project.id), is_synthesized=True)


def oauth_callback_url(endpoint: ResolvedEndpoint, provider: str) -> str:
    return f"{endpoint.url.rstrip('/')}/api/auth/callback/{provider}"


def oauth_callback_urls(endpoint: ResolvedEndpoint) -> dict[str, str]:
    return {provider: oauth_callback_url(endpoint, provider) for provider in OAUTH_PROVIDERS}
