"""Shared FastAPI dependencies."""

from fastapi import Request

from edudata_gateway.core.endpoints import EndpointRegistry
from edudata_gateway.services.upstream import EducationDataClient


def get_upstream_client(request: Request) -> EducationDataClient:
    """Dependency: the app-wide upstream client, created at startup."""
    return request.app.state.upstream_client


def get_endpoint_registry(request: Request) -> EndpointRegistry:
    """Dependency: the endpoint allowlist this app was configured with."""
    return request.app.state.endpoint_registry
