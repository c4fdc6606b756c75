from fastapi import APIRouter, Depends

from edudata_gateway.core.endpoints import EndpointRegistry
from edudata_gateway.core.exceptions import NotFoundError
from edudata_gateway.deps import get_endpoint_registry
from edudata_gateway.services import education_data as education_data_service

router = APIRouter()


@router.get("")
async def list_endpoints(registry: EndpointRegistry = Depends(get_endpoint_registry)):
    """List the upstream endpoints this gateway forwards."""
    return {"endpoints": education_data_service.describe_endpoints(registry)}


@router.get("/{level}/{source}/{topic}")
async def get_endpoint(
    level: str,
    source: str,
    topic: str,
    registry: EndpointRegistry = Depends(get_endpoint_registry),
):
    endpoint = registry.find(level, source, topic)
    if not endpoint:
        raise NotFoundError(f"Endpoint not found: {level}/{source}/{topic}")
    return {
        "path": endpoint.path,
        "subtopics": list(endpoint.subtopics),
        "main_filters": list(endpoint.main_filters),
        "years_available": endpoint.years_available,
        "description": endpoint.description,
    }
