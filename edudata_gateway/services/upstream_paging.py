"""Mapping caller windows onto the upstream's fixed-size chunks, and slicing them back out.

The upstream serves rows in chunks of a fixed size (10,000 for the Education
Data API) and does not reliably honor smaller limits, so every fetch asks for a
whole chunk. A caller window [offset, offset + limit) is served from the one or
two chunks it overlaps.
"""

from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class UpstreamPageRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_page: int = Field(ge=1)
    api_offset: int = Field(ge=0)


class UpstreamChunk(BaseModel):
    """One upstream fetch: the chunk's rows plus the upstream-reported total."""

    model_config = ConfigDict(frozen=True)

    results: list[dict[str, Any]]
    total_count: int = Field(ge=0)
    api_page: int = Field(ge=1)
    api_offset: int = Field(ge=0)


def map_upstream_page(offset: int, chunk_size: int) -> UpstreamPageRef:
    """Return the chunk containing `offset` and that chunk's own 0-based start."""
    if offset < 0:
        raise ValueError(f"offset must be >= 0, got {offset}")
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    api_offset = (offset // chunk_size) * chunk_size
    return UpstreamPageRef(api_page=api_offset // chunk_size + 1, api_offset=api_offset)


def map_upstream_window(offset: int, limit: int, chunk_size: int) -> list[UpstreamPageRef]:
    """Return every chunk overlapping [offset, offset + limit), in order."""
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    first = map_upstream_page(offset, chunk_size)
    last = map_upstream_page(offset + limit - 1, chunk_size)
    return [
        UpstreamPageRef(api_page=api_page, api_offset=(api_page - 1) * chunk_size)
        for api_page in range(first.api_page, last.api_page + 1)
    ]


def slice_upstream_chunk(
    chunk_results: Sequence[T],
    caller_offset: int,
    caller_limit: int,
    chunk_api_offset: int = 0,
) -> list[T]:
    """Cut the caller's window out of one chunk; empty when the window starts past its end."""
    start = max(0, caller_offset - chunk_api_offset)
    return list(chunk_results[start:start + caller_limit])


def slice_window(chunks: Sequence[UpstreamChunk], caller_offset: int, caller_limit: int) -> list[dict[str, Any]]:
    """Concatenate the window's slices across consecutive chunks, capped at caller_limit."""
    records: list[dict[str, Any]] = []
    for chunk in chunks:
        remaining = caller_limit - len(records)
        if remaining <= 0:
            break
        start = max(caller_offset, chunk.api_offset)
        records.extend(slice_upstream_chunk(chunk.results, start, remaining, chunk.api_offset))
    return records
