"""Unit tests for chunk mapping and window slicing."""

import pytest

from edudata_gateway.services.upstream_paging import (
    UpstreamChunk,
    UpstreamPageRef,
    map_upstream_page,
    map_upstream_window,
    slice_upstream_chunk,
    slice_window,
)

CHUNK = 10000


def _chunk(api_page: int, count: int = CHUNK, total: int = 100000) -> UpstreamChunk:
    start = (api_page - 1) * CHUNK
    return UpstreamChunk(
        results=[{"id": i} for i in range(start, start + count)],
        total_count=total,
        api_page=api_page,
        api_offset=start,
    )


@pytest.mark.parametrize(
    "offset,page,api_offset",
    [(0, 1, 0), (9999, 1, 0), (10000, 2, 10000), (15000, 2, 10000), (25000, 3, 20000), (100000, 11, 100000)],
)
def test_map_upstream_page(offset, page, api_offset):
    assert map_upstream_page(offset, CHUNK) == UpstreamPageRef(api_page=page, api_offset=api_offset)


@pytest.mark.parametrize("offset", [0, 1, 9999, 10000, 10001, 12345, 99999, 10**7])
def test_offset_inside_mapped_chunk(offset):
    ref = map_upstream_page(offset, CHUNK)
    assert ref.api_offset <= offset < ref.api_offset + CHUNK


def test_map_upstream_page_rejects_programming_errors():
    with pytest.raises(ValueError):
        map_upstream_page(-1, CHUNK)
    with pytest.raises(ValueError):
        map_upstream_page(0, 0)


def test_window_inside_one_chunk():
    assert map_upstream_window(15000, 20, CHUNK) == [map_upstream_page(15000, CHUNK)]


def test_window_ending_on_chunk_edge_stays_in_one_chunk():
    assert map_upstream_window(9980, 20, CHUNK) == [UpstreamPageRef(api_page=1, api_offset=0)]


def test_window_straddling_boundary():
    assert map_upstream_window(9990, 20, CHUNK) == [
        UpstreamPageRef(api_page=1, api_offset=0),
        UpstreamPageRef(api_page=2, api_offset=10000),
    ]


def test_slice_second_chunk_starts_at_local_index():
    chunk = _chunk(2)
    sliced = slice_upstream_chunk(chunk.results, 15000, 20, chunk.api_offset)
    assert len(sliced) == 20
    assert sliced[0] == chunk.results[5000]
    assert sliced[0]["id"] == 15000


def test_slice_never_exceeds_limit():
    results = list(range(100))
    assert slice_upstream_chunk(results, 0, 20) == list(range(20))
    assert slice_upstream_chunk(results, 90, 20) == list(range(90, 100))


def test_slice_past_end_is_empty():
    assert slice_upstream_chunk(list(range(10)), 10**6, 20) == []
    assert slice_upstream_chunk([], 0, 20) == []


def test_slice_does_not_mutate_chunk():
    results = [{"id": i} for i in range(30)]
    snapshot = list(results)
    slice_upstream_chunk(results, 5, 10)
    assert results == snapshot


def test_slice_window_merges_chunks_in_order():
    records = slice_window([_chunk(1), _chunk(2)], 9990, 20)
    assert [r["id"] for r in records] == list(range(9990, 10010))


def test_slice_window_single_chunk():
    records = slice_window([_chunk(2)], 15000, 20)
    assert [r["id"] for r in records] == list(range(15000, 15020))


def test_slice_window_short_final_chunk():
    records = slice_window([_chunk(1, count=95, total=95)], 80, 20)
    assert [r["id"] for r in records] == list(range(80, 95))
