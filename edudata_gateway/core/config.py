from functools import lru_cache
from typing import Any, List

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_CORS = ["http://localhost:3000", "http://localhost:5173"]


def _parse_str_list(v: Any, default: List[str]) -> List[str]:
    try:
        if v is None or v == "":
            return default.copy()
        if isinstance(v, list):
            return [x for x in v if isinstance(x, str) and x.strip()]
        s = str(v).strip()
        if not s:
            return default.copy()
        if s.startswith("["):
            import json
            out = json.loads(s)
            return [x.strip() for x in out if isinstance(x, str) and x.strip()] or default.copy()
        return [x.strip() for x in s.split(",") if x.strip()] or default.copy()
    except ValueError:
        return default.copy()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # App
    env: str = Field(default="development", description="ENV")
    debug: bool = Field(default=False, description="DEBUG")

    # Upstream (Education Data API)
    upstream_base_url: str = Field(
        default="https://educationdata.urban.org/api/v1",
        alias="UPSTREAM_BASE_URL",
    )
    upstream_timeout_seconds: float = Field(default=30.0, alias="UPSTREAM_TIMEOUT_SECONDS")
    upstream_chunk_size: int = Field(default=10000, ge=1, alias="UPSTREAM_CHUNK_SIZE")

    # Caller-facing pagination
    default_page_limit: int = Field(default=20, ge=1, alias="DEFAULT_PAGE_LIMIT")
    max_page_limit: int = Field(default=1000, ge=1, alias="MAX_PAGE_LIMIT")

    # Response token budget
    max_response_tokens: int = Field(default=25000, ge=1, alias="MAX_RESPONSE_TOKENS")
    warning_response_tokens: int = Field(default=20000, ge=1, alias="WARNING_RESPONSE_TOKENS")

    # Endpoint allowlist: "level/source/topic" entries, empty means full catalogue
    allowed_endpoints_raw: str = Field(
        default="",
        alias="ALLOWED_ENDPOINTS",
        description="Comma-separated or JSON list",
    )

    # CORS: env as string, exposed as list
    cors_origins_raw: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="CORS_ORIGINS",
        description="Comma-separated or JSON list",
    )

    @model_validator(mode="after")
    def check_limits(self) -> "Settings":
        if self.default_page_limit > self.max_page_limit:
            raise ValueError(
                f"DEFAULT_PAGE_LIMIT ({self.default_page_limit}) must not exceed MAX_PAGE_LIMIT ({self.max_page_limit})"
            )
        if self.warning_response_tokens > self.max_response_tokens:
            raise ValueError(
                f"WARNING_RESPONSE_TOKENS ({self.warning_response_tokens}) must not exceed "
                f"MAX_RESPONSE_TOKENS ({self.max_response_tokens})"
            )
        return self

    @property
    def cors_origins(self) -> List[str]:
        return _parse_str_list(getattr(self, "cors_origins_raw", None), _DEFAULT_CORS)

    @property
    def allowed_endpoints(self) -> List[str]:
        return _parse_str_list(getattr(self, "allowed_endpoints_raw", None), [])


@lru_cache
def get_settings() -> Settings:
    return Settings()
