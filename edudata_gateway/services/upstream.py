"""
Async client for the Urban Institute Education Data API.

Builds endpoint paths and query parameters, fetches one fixed-size chunk per
call and maps HTTP failures to UpstreamError. No caching, no retries.
"""

from typing import Any

import httpx

from edudata_gateway.core.exceptions import UpstreamError
from edudata_gateway.core.logging import get_logger
from edudata_gateway.models.requests import EducationDataRequest, SummaryDataRequest
from edudata_gateway.services.upstream_paging import UpstreamChunk, UpstreamPageRef

log = get_logger(__name__)


def _filter_params(filters: dict[str, Any] | None) -> dict[str, str]:
    params: dict[str, str] = {}
    for key, value in (filters or {}).items():
        if isinstance(value, list):
            params[key] = ",".join(str(v) for v in value)
        else:
            params[key] = str(value)
    return params


def build_data_path(request: EducationDataRequest) -> str:
    path = request.endpoint_path
    if request.subtopic:
        path += "/" + "/".join(request.subtopic)
    return path


def build_data_params(request: EducationDataRequest) -> dict[str, str]:
    params = _filter_params(request.filters)
    if request.add_labels:
        params["add_labels"] = "true"
    # mode=R matches the upstream's R client output format
    params["mode"] = "R"
    return params


def build_summary_path(request: SummaryDataRequest) -> str:
    path = request.endpoint_path
    if request.subtopic:
        path += f"/{request.subtopic}"
    return path + "/summaries"


def build_summary_params(request: SummaryDataRequest) -> dict[str, str]:
    params = {
        "stat": request.stat,
        "var": request.var,
        "by": ",".join(request.by),
    }
    params.update(_filter_params(request.filters))
    params["mode"] = "R"
    return params


class EducationDataClient:
    """Fetches whole upstream chunks; the caller's small limit is never forwarded."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "EducationDataClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_chunk(
        self,
        path: str,
        ref: UpstreamPageRef,
        chunk_size: int,
        params: dict[str, str] | None = None,
    ) -> UpstreamChunk:
        """GET one upstream chunk. Raises UpstreamError on HTTP, transport or malformed-body failures."""
        client = await self._ensure_client()
        query = dict(params or {})
        query["page"] = str(ref.api_page)
        query["limit"] = str(chunk_size)
        log.info("upstream_fetch", path=path, api_page=ref.api_page, chunk_size=chunk_size)
        try:
            response = await client.get(f"/{path.strip('/')}/", params=query)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise _map_status_error(e, path) from e
        except httpx.HTTPError as e:
            log.warning("upstream_error", path=path, error=str(e))
            raise UpstreamError(f"Upstream error (unknown): {e}") from e

        try:
            return _parse_chunk(response.json(), ref)
        except ValueError as e:
            # non-JSON body or rows that are not objects; a 200 here still maps to 502
            log.warning("upstream_error", path=path, status_code=response.status_code, error=str(e))
            raise UpstreamError(
                f"Upstream error (invalid response): {e}",
                upstream_status=response.status_code,
            ) from e


def _parse_chunk(data: Any, ref: UpstreamPageRef) -> UpstreamChunk:
    if isinstance(data, list):
        results, total = data, len(data)
    elif isinstance(data, dict):
        results = data.get("results") or []
        total = data.get("count")
        if total is None:
            total = len(results)
    else:
        raise ValueError(f"expected a JSON object or array, got {type(data).__name__}")
    return UpstreamChunk(
        results=results,
        total_count=total,
        api_page=ref.api_page,
        api_offset=ref.api_offset,
    )


def _map_status_error(error: httpx.HTTPStatusError, path: str) -> UpstreamError:
    status_code = error.response.status_code
    message = str(error)
    try:
        body = error.response.json()
        if isinstance(body, dict) and body.get("message"):
            message = body["message"]
    except ValueError:
        pass
    log.warning("upstream_error", path=path, status_code=status_code, error=message)

    if status_code == 404:
        return UpstreamError(f"Endpoint not found: {path}", upstream_status=status_code)
    if status_code == 400:
        return UpstreamError(f"Upstream error: {message}", upstream_status=status_code)
    if status_code == 413:
        return UpstreamError(
            "Your requested query returned too many records. Consider limiting the scope of your query.",
            upstream_status=status_code,
        )
    return UpstreamError(f"Upstream error ({status_code}): {message}", upstream_status=status_code)
