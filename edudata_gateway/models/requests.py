from typing import Annotated, Any, Union

from pydantic import BaseModel, BeforeValidator, Field, StringConstraints, field_validator

from edudata_gateway.core.pagination import PaginationRequest
from edudata_gateway.services.validator import sanitize_string

MAX_STRING_LENGTH = 100


def _sanitize(v: Any) -> Any:
    return sanitize_string(v) if isinstance(v, str) else v


def _safe_str(pattern: str | None = None) -> Any:
    # BeforeValidator last so sanitization runs ahead of the length/pattern checks
    return Annotated[
        str,
        StringConstraints(min_length=1, max_length=MAX_STRING_LENGTH, pattern=pattern),
        BeforeValidator(_sanitize),
    ]


SafeStr = _safe_str()
Level = _safe_str(r"^[a-z-]+$")
Source = _safe_str(r"^[a-z]+$")
Topic = _safe_str(r"^[a-z-]+$")
FilterStr = Annotated[str, StringConstraints(max_length=MAX_STRING_LENGTH)]
FilterValue = Union[int, float, FilterStr, list[int], list[FilterStr]]
FieldName = Annotated[str, StringConstraints(min_length=1)]


class _BaseDataRequest(BaseModel):
    level: Level
    source: Source
    topic: Topic
    filters: dict[str, FilterValue] | None = None

    # Pagination values are passed through untyped; normalize_pagination rejects bad ones
    page: Any = None
    offset: Any = None
    limit: Any = None

    fields: list[FieldName] | None = None

    def pagination(self) -> PaginationRequest:
        return PaginationRequest(page=self.page, offset=self.offset, limit=self.limit)

    @property
    def endpoint_path(self) -> str:
        return f"{self.level}/{self.source}/{self.topic}"


class EducationDataRequest(_BaseDataRequest):
    """get_education_data: detailed records."""

    subtopic: list[SafeStr] | None = None
    add_labels: bool = False


class SummaryDataRequest(_BaseDataRequest):
    """get_education_data_summary: aggregated records grouped by `by`."""

    subtopic: SafeStr | None = None
    stat: SafeStr
    var: SafeStr
    by: list[SafeStr] = Field(min_length=1)

    @field_validator("by", mode="before")
    @classmethod
    def by_as_list(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [x for x in v.split(",") if x.strip()]
        return v
