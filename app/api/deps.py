from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.domain.access import Identity
from app.infra.request_context import get_request_context
from app.services.identity_service import IdentityResolver
from app.services.project_access_service import ProjectListingGate, ResourceAuthorizer
from app.services.sandbox_endpoint_service import SandboxEndpointResolver


def get_identity_resolver() -> IdentityResolver:
    return IdentityResolver()


def get_resource_authorizer() -> ResourceAuthorizer:
    return ResourceAuthorizer()


def get_project_listing_gate() -> ProjectListingGate:
    return ProjectListingGate()


def get_endpoint_resolver(request: Request) -> SandboxEndpointResolver:
    return SandboxEndpointResolver(request.app.state.platform_domain_suffix)


def get_identity(
    request: Request,
    resolver: Annotated[IdentityResolver, Depends(get_identity_resolver)],
) -> Identity:
    return resolver.resolve(get_request_context(request))


CurrentIdentity = Annotated[Identity, Depends(get_identity)]
Authorizer = Annotated[ResourceAuthorizer, Depends(get_resource_authorizer)]
ListingGate = Annotated[ProjectListingGate, Depends(get_project_listing_gate)]
EndpointResolver = Annotated[SandboxEndpointResolver, Depends(get_endpoint_resolver)]
