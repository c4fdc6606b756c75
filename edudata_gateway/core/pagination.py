"""Pagination helpers: caller window normalization and navigation metadata."""

import math
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from edudata_gateway.core.exceptions import PaginationError

T = TypeVar("T")


class PaginationRequest(BaseModel):
    """Raw caller pagination input, before normalization."""

    model_config = ConfigDict(frozen=True)

    page: Any = None
    offset: Any = None
    limit: Any = None


class CanonicalWindow(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(ge=1)
    offset: int = Field(ge=0)
    limit: int = Field(ge=1)


class PaginationMetadata(BaseModel):
    total_count: int
    current_page: int
    page_size: int
    total_pages: int
    has_more: bool
    next_page: int | None = None


class PaginatedResponse(BaseModel, Generic[T]):
    results: list[T]
    pagination: PaginationMetadata


def _as_int(name: str, value: Any) -> int:
    # bool is an int subclass; True must not pass as page 1
    if isinstance(value, bool):
        raise PaginationError(f"{name.capitalize()} must be an integer", parameter=name)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise PaginationError(f"{name.capitalize()} must be an integer", parameter=name)


def normalize_pagination(
    page: Any = None,
    offset: Any = None,
    limit: Any = None,
    *,
    default_limit: int,
    max_limit: int,
) -> CanonicalWindow:
    """
    Turn caller page/offset/limit into a canonical (page, offset, limit) window.

    page and offset are mutually exclusive. With page, offset = (page - 1) * limit;
    with offset, page = offset // limit + 1 and the offset is kept as given.
    """
    if page is not None and offset is not None:
        raise PaginationError(
            "Cannot specify both page and offset parameters",
            parameter="page,offset",
            suggestions=["Use page for page-number navigation", "Use offset for record-offset navigation"],
        )

    if limit is None:
        limit = default_limit
    else:
        limit = _as_int("limit", limit)
        if limit < 1:
            raise PaginationError("Limit must be >= 1", parameter="limit")
        if limit > max_limit:
            raise PaginationError(
                f"Limit must not exceed {max_limit}",
                parameter="limit",
                suggestions=[f"Use limit <= {max_limit} and request further pages"],
            )

    if page is not None:
        page = _as_int("page", page)
        if page < 1:
            raise PaginationError("Page must be >= 1", parameter="page", suggestions=["Pages are 1-indexed"])
        return CanonicalWindow(page=page, offset=(page - 1) * limit, limit=limit)

    if offset is not None:
        offset = _as_int("offset", offset)
        if offset < 0:
            raise PaginationError("Offset must be >= 0", parameter="offset", suggestions=["Offsets are 0-indexed"])
        return CanonicalWindow(page=offset // limit + 1, offset=offset, limit=limit)

    return CanonicalWindow(page=1, offset=0, limit=limit)


def normalize_request(request: PaginationRequest, *, default_limit: int, max_limit: int) -> CanonicalWindow:
    return normalize_pagination(
        request.page,
        request.offset,
        request.limit,
        default_limit=default_limit,
        max_limit=max_limit,
    )


def calculate_pagination_metadata(
    total_count: int,
    current_page: int,
    limit: int,
    returned_count: int,
) -> PaginationMetadata:
    total_pages = math.ceil(total_count / limit)
    has_more = current_page < total_pages
    return PaginationMetadata(
        total_count=total_count,
        current_page=current_page,
        page_size=returned_count,
        total_pages=total_pages,
        has_more=has_more,
        next_page=current_page + 1 if has_more else None,
    )


def format_paginated_response(
    records: list[T],
    total_count: int,
    current_page: int,
    limit: int,
) -> PaginatedResponse[T]:
    """Wrap a page of records with its navigation metadata."""
    return PaginatedResponse(
        results=records,
        pagination=calculate_pagination_metadata(total_count, current_page, limit, len(records)),
    )
