import os
from typing import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("UPSTREAM_BASE_URL", "http://upstream.test/api/v1")

from edudata_gateway.core.config import Settings  # noqa: E402

CHUNK_SIZE = 10000


def make_records(start: int, count: int) -> list[dict]:
    return [
        {"id": i, "name": f"School {i}", "enrollment": 1000 + i, "city": "Springfield"}
        for i in range(start, start + count)
    ]


class FakeUpstream:
    """httpx handler serving `total` synthetic rows in fixed-size chunks."""

    def __init__(self, total: int, chunk_size: int = CHUNK_SIZE, status_code: int = 200, body: dict | None = None):
        self.total = total
        self.chunk_size = chunk_size
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json=self.body or {"message": "upstream failure"})
        page = int(request.url.params.get("page", "1"))
        start = (page - 1) * self.chunk_size
        count = max(0, min(self.chunk_size, self.total - start))
        return httpx.Response(
            200,
            json={"count": self.total, "next": None, "previous": None, "results": make_records(start, count)},
        )

    @property
    def pages_requested(self) -> list[int]:
        return [int(r.url.params["page"]) for r in self.requests]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        upstream_base_url="http://upstream.test/api/v1",
        default_page_limit=20,
        max_page_limit=1000,
        max_response_tokens=25000,
        warning_response_tokens=20000,
    )


@pytest.fixture
def make_client(settings: Settings) -> Callable[..., AsyncClient]:
    from edudata_gateway.main import create_app

    def _make(upstream: Callable[[httpx.Request], httpx.Response], app_settings: Settings | None = None) -> AsyncClient:
        app = create_app(app_settings or settings, upstream_transport=httpx.MockTransport(upstream))
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _make


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    from edudata_gateway.main import app
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def fake_upstream() -> type[FakeUpstream]:
    return FakeUpstream
