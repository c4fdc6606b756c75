from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse

MAX_RECEIVED_LENGTH = 100
MAX_LISTED_FIELDS = 20


class AppError(Exception):
    """Base application error with consistent schema."""

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND", status_code=status.HTTP_404_NOT_FOUND)


class ValidationError(AppError):
    """Structurally invalid request (bad identity, filter shape, unknown endpoint)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        expected: str | None = None,
        received: Any = None,
    ):
        self.field = field
        self.expected = expected
        self.received = received
        details: dict[str, Any] = {"field": field, "expected": expected}
        if received is not None:
            text = str(received)
            if len(text) > MAX_RECEIVED_LENGTH:
                text = text[:MAX_RECEIVED_LENGTH] + "..."
            details["received"] = text
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class PaginationError(AppError):
    """Malformed page/offset/limit combination."""

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        suggestions: list[str] | None = None,
    ):
        self.parameter = parameter
        self.suggestions = suggestions or []
        super().__init__(
            message,
            code="PAGINATION_ERROR",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"parameter": parameter, "suggestions": self.suggestions},
        )


class FieldSelectionError(AppError):
    """Requested projection fields do not exist on the records."""

    def __init__(
        self,
        invalid_fields: list[str],
        available_fields: list[str],
        message: str = "Unknown field(s) in fields parameter",
    ):
        self.invalid_fields = list(invalid_fields)
        self.available_fields = list(available_fields)
        listed = ", ".join(self.available_fields[:MAX_LISTED_FIELDS])
        if len(self.available_fields) > MAX_LISTED_FIELDS:
            listed += ", ..."
        super().__init__(
            f"{message}: {', '.join(self.invalid_fields)}. Available fields: {listed}",
            code="FIELD_SELECTION_ERROR",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={
                "invalid_fields": self.invalid_fields,
                "available_fields": self.available_fields,
            },
        )


class TokenLimitError(AppError):
    """Serialized response is estimated to exceed the token budget."""

    def __init__(
        self,
        estimated_tokens: int,
        limit: int,
        suggestions: list[str] | None = None,
    ):
        self.estimated_tokens = estimated_tokens
        self.limit = limit
        self.suggestions = suggestions or []
        super().__init__(
            f"Response too large: ~{estimated_tokens:,} tokens (limit: {limit:,})",
            code="TOKEN_LIMIT_EXCEEDED",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={
                "estimated_tokens": estimated_tokens,
                "limit": limit,
                "suggestions": self.suggestions,
            },
        )


class UpstreamError(AppError):
    """Upstream fetch failed; passed through to the caller without retry."""

    def __init__(self, message: str, upstream_status: int | None = None):
        self.upstream_status = upstream_status
        if upstream_status == status.HTTP_404_NOT_FOUND:
            status_code = status.HTTP_404_NOT_FOUND
        elif upstream_status in (status.HTTP_400_BAD_REQUEST, 413):
            status_code = status.HTTP_400_BAD_REQUEST
        else:
            status_code = status.HTTP_502_BAD_GATEWAY
        super().__init__(
            message,
            code="UPSTREAM_ERROR",
            status_code=status_code,
            details={"upstream_status": upstream_status},
        )


def error_response(request: Request, exc: AppError) -> ORJSONResponse:
    body = {
        "error": {
            "message": exc.message,
            "code": exc.code,
            "details": exc.details,
        }
    }
    if hasattr(request.state, "request_id"):
        body["request_id"] = request.state.request_id
    return ORJSONResponse(status_code=exc.status_code, content=body)


async def app_exception_handler(request: Request, exc: AppError) -> ORJSONResponse:
    return error_response(request, exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    body = {
        "error": {
            "message": "Validation error",
            "code": "VALIDATION_ERROR",
            "details": {"errors": exc.errors()},
        }
    }
    if hasattr(request.state, "request_id"):
        body["request_id"] = request.state.request_id
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=body,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    from edudata_gateway.core.logging import get_logger
    get_logger(__name__).exception("unhandled_exception", exc_info=exc)
    body = {
        "error": {
            "message": "Internal server error",
            "code": "INTERNAL_ERROR",
            "details": {},
        }
    }
    if hasattr(request.state, "request_id"):
        body["request_id"] = request.state.request_id
    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body,
    )
