from fastapi import APIRouter, Depends, Response

from edudata_gateway.core.config import Settings, get_settings
from edudata_gateway.core.endpoints import EndpointRegistry
from edudata_gateway.core.logging import bind_endpoint
from edudata_gateway.deps import get_endpoint_registry, get_upstream_client
from edudata_gateway.models.requests import EducationDataRequest, SummaryDataRequest
from edudata_gateway.services import education_data as education_data_service
from edudata_gateway.services.upstream import EducationDataClient

router = APIRouter()


@router.post("")
async def get_education_data(
    body: EducationDataRequest,
    client: EducationDataClient = Depends(get_upstream_client),
    registry: EndpointRegistry = Depends(get_endpoint_registry),
    settings: Settings = Depends(get_settings),
):
    """Detailed records for one endpoint, paginated and optionally projected to `fields`."""
    bind_endpoint(body.endpoint_path, "get_education_data")
    payload = await education_data_service.get_education_data(
        body, client=client, registry=registry, settings=settings
    )
    # payload is the exact body the token budget was checked against
    return Response(content=payload, media_type="application/json")


@router.post("/summary")
async def get_education_data_summary(
    body: SummaryDataRequest,
    client: EducationDataClient = Depends(get_upstream_client),
    registry: EndpointRegistry = Depends(get_endpoint_registry),
    settings: Settings = Depends(get_settings),
):
    """Aggregated statistics (stat of var grouped by `by`), paginated like detailed records."""
    bind_endpoint(body.endpoint_path, "get_education_data_summary")
    payload = await education_data_service.get_education_data_summary(
        body, client=client, registry=registry, settings=settings
    )
    return Response(content=payload, media_type="application/json")
