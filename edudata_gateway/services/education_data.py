"""Paginated education data: normalize, fetch chunk(s), slice, project, govern."""

from typing import Any

import orjson

from edudata_gateway.core.config import Settings
from edudata_gateway.core.endpoints import EndpointRegistry
from edudata_gateway.core.logging import get_logger
from edudata_gateway.core.pagination import CanonicalWindow, format_paginated_response, normalize_request
from edudata_gateway.models.requests import EducationDataRequest, SummaryDataRequest
from edudata_gateway.services import validator
from edudata_gateway.services.fields import select_fields, validate_field_names
from edudata_gateway.services.governor import enforce_token_budget
from edudata_gateway.services.upstream import (
    EducationDataClient,
    build_data_params,
    build_data_path,
    build_summary_params,
    build_summary_path,
)
from edudata_gateway.services.upstream_paging import UpstreamChunk, map_upstream_window, slice_window

log = get_logger(__name__)


async def fetch_window(
    client: EducationDataClient,
    path: str,
    params: dict[str, str],
    window: CanonicalWindow,
    chunk_size: int,
) -> list[UpstreamChunk]:
    """
    Fetch every chunk the window overlaps, sequentially.

    The first chunk is always fetched since it carries the total count; later
    chunks are skipped when they start at or past that total.
    """
    chunks: list[UpstreamChunk] = []
    for ref in map_upstream_window(window.offset, window.limit, chunk_size):
        if chunks and ref.api_offset >= chunks[0].total_count:
            break
        chunks.append(await client.fetch_chunk(path, ref, chunk_size, params))
    return chunks


def build_page(
    chunks: list[UpstreamChunk],
    window: CanonicalWindow,
    fields: list[str] | None,
    settings: Settings,
) -> bytes:
    """Slice, project and serialize one caller page; raises TokenLimitError over budget."""
    records = slice_window(chunks, window.offset, window.limit)

    if fields and records:
        validate_field_names(fields, records[0])
        records = select_fields(records, fields)
        log.debug("fields_selected", fields=fields, records=len(records))

    total_count = chunks[0].total_count if chunks else 0
    response = format_paginated_response(records, total_count, window.page, window.limit)
    payload = orjson.dumps(response.model_dump())
    enforce_token_budget(
        payload,
        max_tokens=settings.max_response_tokens,
        warning_tokens=settings.warning_response_tokens,
        limit=window.limit,
    )
    return payload


async def _paginate(
    client: EducationDataClient,
    path: str,
    params: dict[str, str],
    request: EducationDataRequest | SummaryDataRequest,
    settings: Settings,
) -> bytes:
    window = normalize_request(
        request.pagination(),
        default_limit=settings.default_page_limit,
        max_limit=settings.max_page_limit,
    )
    log.info("pagination_normalized", page=window.page, offset=window.offset, limit=window.limit)
    chunks = await fetch_window(client, path, params, window, settings.upstream_chunk_size)
    return build_page(chunks, window, request.fields, settings)


async def get_education_data(
    request: EducationDataRequest,
    *,
    client: EducationDataClient,
    registry: EndpointRegistry,
    settings: Settings,
) -> bytes:
    """Return the serialized {results, pagination} payload for a detailed-records request."""
    validator.validate_endpoint(request.level, request.source, request.topic, registry)
    return await _paginate(client, build_data_path(request), build_data_params(request), request, settings)


async def get_education_data_summary(
    request: SummaryDataRequest,
    *,
    client: EducationDataClient,
    registry: EndpointRegistry,
    settings: Settings,
) -> bytes:
    """Return the serialized {results, pagination} payload for an aggregated request."""
    validator.validate_endpoint(request.level, request.source, request.topic, registry)
    return await _paginate(client, build_summary_path(request), build_summary_params(request), request, settings)


def describe_endpoints(registry: EndpointRegistry) -> list[dict[str, Any]]:
    return [
        {
            "path": e.path,
            "level": e.level,
            "source": e.source,
            "topic": e.topic,
            "subtopics": list(e.subtopics),
            "main_filters": list(e.main_filters),
            "years_available": e.years_available,
            "description": e.description,
        }
        for e in registry.all()
    ]
