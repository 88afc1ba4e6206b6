"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
CacheBackend = Literal["diskcache", "redis"]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/115.0.0.0 Safari/537.36"
)


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class SiteDialect(BaseModel):
    """Everything that ties the pipeline to one site's markup.

    Base domain, selectors, hop labels and link-label keywords drift
    between site revisions; switching revisions is a config change.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        default="https://4khdhub.fans",
        description="Site root, without trailing slash.",
    )
    source_name: str = Field(
        default="4KHDHub",
        description="Label used as prefix in stream names and binge groups.",
    )
    search_path: str = Field(
        default="/?s={query}",
        description="Search URL template relative to base_url.",
    )

    # Search results
    search_card: str = ".movie-card"
    card_format: str = ".movie-card-format"
    card_meta: str = ".movie-card-meta"
    card_title: str = ".movie-card-title"
    movie_kind_label: str = "Movies"
    series_kind_label: str = "Series"

    # Content page
    movie_entry: str = ".download-item"
    episode_block: str = ".episode-item"
    episode_block_title: str = ".episode-title"
    episode_entry: str = ".episode-download-item"
    entry_title: str = ".file-title, .episode-file-title"
    season_marker: str = "S{season:02d}"
    episode_markers: tuple[str, ...] = ("Episode-{episode:02d}", "E{episode:02d}")

    # Hops
    cloud_label: str = "HubCloud"
    drive_label: str = "HubDrive"

    # Final links page
    final_size: str = "#size, .file-size"
    final_title: str = "title"
    title_suffix: str = " - HubCloud"
    fsl_labels: tuple[str, ...] = ("FSL", "Download File")
    pixel_labels: tuple[str, ...] = ("PixelServer", "Fast Server")
    direct_labels: tuple[str, ...] = ("Instant",)
    direct_classes: tuple[str, ...] = ("btn-success", "btn-primary")
    pixel_path_from: str = "/u/"
    pixel_path_to: str = "/api/file/"

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = v.rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must be an absolute http(s) URL")
        return v

    def search_url(self, query: str) -> str:
        return f"{self.base_url}{self.search_path.format(query=query)}"


class ResolverConfig(BaseModel):
    """Pipeline tuning knobs."""

    model_config = ConfigDict(frozen=True)

    max_concurrent_entries: int = Field(
        default=5,
        ge=1,
        description="Max entry resolutions in flight at once.",
    )
    match_max_distance: int = Field(
        default=5,
        ge=1,
        description="Card titles at or above this edit distance are rejected.",
    )
    year_tolerance: int = Field(
        default=1,
        ge=0,
        description="Allowed difference between listed and requested year.",
    )


class CacheConfig(BaseModel):
    """Cache configuration (backend-agnostic)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    enabled: bool = Field(default=True, description="Master cache toggle.")
    backend: CacheBackend = Field(
        default="diskcache",
        description="Cache backend: 'diskcache' (SQLite) or 'redis'",
    )
    directory: Path = Field(
        default=Path("./.cache/hubstream"),
        alias="dir",
        description="Diskcache SQLite DB path",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (only when backend=redis)",
    )
    search_ttl_seconds: int = Field(default=86_400, ge=0)
    redirect_ttl_seconds: int = Field(default=259_200, ge=0)
    final_links_ttl_seconds: int = Field(default=3_600, ge=0)
    metadata_ttl_seconds: int = Field(default=86_400, ge=0)
    max_concurrent: int = Field(
        default=10,
        description="Max parallel cache ops (semaphore limit)",
    )

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_directory(cls, v: Any) -> Path:
        return _normalize_path(v)


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final, frozen).

    Note:
    - YAML is expected to be sectioned (http/logging/cache/resolver/site).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < overrides) in load.py.
    """

    model_config = ConfigDict(frozen=True)

    # General
    app_name: str = Field(default="hubstream", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Per-request timeout in seconds.",
    )
    http_max_retries: int = Field(
        default=3,
        validation_alias=AliasChoices(
            "http_max_retries",
            AliasPath("http", "max_retries"),
        ),
        description="Total attempts per request on network failure.",
    )
    http_backoff_base: float = Field(
        default=1.0,
        validation_alias=AliasChoices(
            "http_backoff_base",
            AliasPath("http", "backoff_base"),
        ),
        description="Backoff base in seconds (delays base, 2*base, 4*base).",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether HTTP client follows redirects.",
    )
    http_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="Browser User-Agent for outgoing HTTP requests.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )
    debug: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "debug",
            AliasPath("logging", "debug"),
        ),
        description="Force DEBUG level regardless of log_level.",
    )

    # Metadata API key
    tmdb_api_key: str | None = Field(
        default=None,
        description="TMDB API key for the title/year lookup.",
    )

    site: SiteDialect = Field(default_factory=SiteDialect)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("http_max_retries")
    @classmethod
    def _validate_max_retries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("http_max_retries must be >= 1")
        return v

    @property
    def effective_log_level(self) -> LogLevel:
        return "DEBUG" if self.debug else self.log_level

    @property
    def effective_log_format(self) -> LogFormat:
        # Default log format: console in dev/test, json in prod.
        if self.log_format is not None:
            return self.log_format
        return "json" if self.environment == "prod" else "console"


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read HUBSTREAM_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - HUBSTREAM_BASE_URL
    - HUBSTREAM_CACHE_ENABLED / DISABLE_CACHE
    - HUBSTREAM_DEBUG / DEBUG
    - HUBSTREAM_MAX_CONCURRENT_ENTRIES
    """

    model_config = SettingsConfigDict(
        env_prefix="HUBSTREAM_",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Optional[Environment] = None

    base_url: Optional[str] = None

    http_timeout_seconds: Optional[float] = None
    http_max_retries: Optional[int] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None
    debug: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("HUBSTREAM_DEBUG", "DEBUG"),
    )

    cache_enabled: Optional[bool] = None
    disable_cache: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("HUBSTREAM_DISABLE_CACHE", "DISABLE_CACHE"),
    )
    cache_backend: Optional[CacheBackend] = None
    cache_dir: Optional[Path] = None
    cache_redis_url: Optional[str] = None

    max_concurrent_entries: Optional[int] = None

    tmdb_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("HUBSTREAM_TMDB_API_KEY", "TMDB_API_KEY"),
    )

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        data = self.model_dump(exclude_none=True)
        disable = data.pop("disable_cache", None)
        if disable is not None and "cache_enabled" not in data:
            data["cache_enabled"] = not disable
        return data
