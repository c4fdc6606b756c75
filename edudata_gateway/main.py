import time
import uuid

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from edudata_gateway.core.config import Settings, get_settings
from edudata_gateway.core.endpoints import EndpointRegistry
from edudata_gateway.core.exceptions import (
    AppError,
    app_exception_handler,
    generic_exception_handler,
    validation_exception_handler,
)
from edudata_gateway.core.logging import bind_request_id, clear_request_context, configure_logging, get_logger
from edudata_gateway.routers import education_data, endpoints
from edudata_gateway.services.upstream import EducationDataClient

log = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    upstream_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(debug=settings.debug)

    app = FastAPI(
        title="Education Data Gateway",
        version="0.1.0",
    )
    app.dependency_overrides[get_settings] = lambda: settings

    app.state.endpoint_registry = EndpointRegistry.from_allowlist(settings.allowed_endpoints)
    app.state.upstream_client = EducationDataClient(
        settings.upstream_base_url,
        timeout=settings.upstream_timeout_seconds,
        transport=upstream_transport,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request, call_next):
        clear_request_context()
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        bind_request_id(request_id)
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        log.info(
            "request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )
        response.headers["X-Request-ID"] = request_id
        return response

    app.add_exception_handler(AppError, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Routers
    app.include_router(education_data.router, prefix="/v1/education-data", tags=["education-data"])
    app.include_router(endpoints.router, prefix="/v1/endpoints", tags=["endpoints"])

    @app.on_event("startup")
    async def startup():
        log.info(
            "startup",
            upstream=settings.upstream_base_url,
            endpoints=len(app.state.endpoint_registry),
            max_response_tokens=settings.max_response_tokens,
        )

    @app.on_event("shutdown")
    async def shutdown():
        await app.state.upstream_client.close()

    @app.get("/health")
    async def health():
        """Health check for load balancers and monitoring."""
        return {"status": "ok"}

    return app


app = create_app()
