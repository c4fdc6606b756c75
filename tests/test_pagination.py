"""Unit tests for pagination normalization and navigation metadata."""

import pytest

from edudata_gateway.core.exceptions import PaginationError
from edudata_gateway.core.pagination import (
    PaginationRequest,
    calculate_pagination_metadata,
    format_paginated_response,
    normalize_pagination,
    normalize_request,
)

LIMITS = {"default_limit": 20, "max_limit": 1000}


def test_defaults_to_first_page():
    window = normalize_pagination(**LIMITS)
    assert (window.page, window.offset, window.limit) == (1, 0, 20)


@pytest.mark.parametrize("page,limit", [(1, 20), (2, 20), (5, 20), (3, 7), (100, 1000)])
def test_page_to_offset(page, limit):
    window = normalize_pagination(page=page, limit=limit, **LIMITS)
    assert window.offset == (page - 1) * limit
    # round trip through offset lands on the same page
    back = normalize_pagination(offset=window.offset, limit=limit, **LIMITS)
    assert back.page == page


def test_offset_to_page_keeps_offset():
    window = normalize_pagination(offset=45, limit=20, **LIMITS)
    assert (window.page, window.offset, window.limit) == (3, 45, 20)


def test_integral_float_accepted():
    window = normalize_pagination(page=2.0, limit=10.0, **LIMITS)
    assert (window.page, window.offset, window.limit) == (2, 10, 10)


def test_page_and_offset_together_rejected_even_if_consistent():
    with pytest.raises(PaginationError) as exc:
        normalize_pagination(page=1, offset=0, **LIMITS)
    assert exc.value.parameter == "page,offset"
    assert exc.value.status_code == 400


@pytest.mark.parametrize(
    "kwargs,parameter",
    [
        ({"page": 0}, "page"),
        ({"page": -3}, "page"),
        ({"offset": -1}, "offset"),
        ({"limit": 0}, "limit"),
        ({"limit": 1001}, "limit"),
        ({"page": 1.5}, "page"),
        ({"offset": "10"}, "offset"),
        ({"limit": True}, "limit"),
    ],
)
def test_invalid_values_rejected(kwargs, parameter):
    with pytest.raises(PaginationError) as exc:
        normalize_pagination(**kwargs, **LIMITS)
    assert exc.value.parameter == parameter


def test_limit_at_max_allowed():
    assert normalize_pagination(limit=1000, **LIMITS).limit == 1000


def test_normalize_request():
    window = normalize_request(PaginationRequest(page=3, limit=50), **LIMITS)
    assert (window.page, window.offset, window.limit) == (3, 100, 50)


def test_metadata_final_partial_page():
    meta = calculate_pagination_metadata(total_count=95, current_page=5, limit=20, returned_count=15)
    assert meta.model_dump() == {
        "total_count": 95,
        "current_page": 5,
        "page_size": 15,
        "total_pages": 5,
        "has_more": False,
        "next_page": None,
    }


def test_metadata_middle_page():
    meta = calculate_pagination_metadata(100, 2, 20, 20)
    assert meta.total_pages == 5
    assert meta.has_more is True
    assert meta.next_page == 3


@pytest.mark.parametrize("total,limit", [(0, 20), (1, 20), (20, 20), (21, 20), (10000, 7)])
def test_metadata_last_page_has_no_next(total, limit):
    last = max(1, -(-total // limit))
    meta = calculate_pagination_metadata(total, last, limit, 0)
    assert meta.total_pages == -(-total // limit)
    assert meta.has_more is False
    assert meta.next_page is None


def test_format_paginated_response():
    records = [{"id": 1}, {"id": 2}]
    response = format_paginated_response(records, total_count=2, current_page=1, limit=20)
    assert response.results == records
    assert response.pagination.page_size == 2
    assert response.pagination.total_pages == 1
