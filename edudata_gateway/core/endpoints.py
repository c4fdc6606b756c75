"""Catalogue of upstream endpoints the gateway is allowed to forward."""

from pydantic import BaseModel, ConfigDict


class Endpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str
    source: str
    topic: str
    subtopics: tuple[str, ...] = ()
    main_filters: tuple[str, ...] = ()
    years_available: str = ""

    @property
    def path(self) -> str:
        return f"{self.level}/{self.source}/{self.topic}"

    @property
    def description(self) -> str:
        subtopics = f" (subtopics: {', '.join(self.subtopics)})" if self.subtopics else ""
        return (
            f"Education data endpoint{subtopics}. Years: {self.years_available}. "
            f"Main filters: {', '.join(self.main_filters)}"
        )


DEFAULT_ENDPOINTS: tuple[Endpoint, ...] = (
    Endpoint(
        level="schools",
        source="ccd",
        topic="enrollment",
        subtopics=("race", "sex", "race, sex"),
        main_filters=("year", "grade"),
        years_available="1986–2022",
    ),
    Endpoint(
        level="schools",
        source="ccd",
        topic="directory",
        main_filters=("year",),
        years_available="1986–2022",
    ),
    Endpoint(
        level="school-districts",
        source="ccd",
        topic="enrollment",
        subtopics=("race", "sex", "race, sex"),
        main_filters=("year", "grade"),
        years_available="1986–2022",
    ),
    Endpoint(
        level="college-university",
        source="ipeds",
        topic="directory",
        main_filters=("year",),
        years_available="1980, 1984–2022",
    ),
)


class EndpointRegistry:
    """Immutable set of allowed endpoints, built per app (or per test) from settings."""

    def __init__(self, endpoints: tuple[Endpoint, ...] | list[Endpoint]):
        self._endpoints = tuple(endpoints)
        self._by_path = {e.path: e for e in self._endpoints}

    @classmethod
    def from_allowlist(
        cls,
        allowed_paths: list[str],
        catalogue: tuple[Endpoint, ...] = DEFAULT_ENDPOINTS,
    ) -> "EndpointRegistry":
        """Narrow the catalogue to the given level/source/topic paths; empty keeps everything."""
        if not allowed_paths:
            return cls(catalogue)
        wanted = {p.strip("/") for p in allowed_paths}
        return cls([e for e in catalogue if e.path in wanted])

    def find(self, level: str, source: str, topic: str) -> Endpoint | None:
        return self._by_path.get(f"{level}/{source}/{topic}")

    def all(self) -> tuple[Endpoint, ...]:
        return self._endpoints

    def __contains__(self, path: str) -> bool:
        return path in self._by_path

    def __len__(self) -> int:
        return len(self._endpoints)
