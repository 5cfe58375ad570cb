"""Centralized configuration for portfolio-search using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every value has a working default so the build CLI and the query server
    can run against a local checkout without any environment at all.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Build inputs / outputs
    data_dir: Path = Field(
        default=Path("src"),
        description="Root holding content/, pages/ and data/{sections,collections}/",
    )
    index_path: Path = Field(default=Path("dist/search-index.json"), description="Where the built index is written")
    index_url: str = Field(default="", description="Optional remote URL of a published search-index.json")
    http_timeout: float = Field(default=10.0, gt=0, description="Timeout in seconds for remote index fetches")

    # Normalization
    text_max_length: int = Field(default=8000, ge=1, description="Maximum length of an image's searchable text blob")
    ignore_page_paths: str = Field(default="/search", description="Comma-separated routes never indexed as pages")
    ignore_listings: str = Field(default="", description="Comma-separated listing basenames to skip (e.g. archive.json)")

    # Query engine
    default_per_page: int = Field(default=48, ge=1, le=96, description="Image results per page")
    max_per_page: int = Field(default=96, ge=1, description="Upper clamp for the per-page parameter")
    fuzzy_min_query_length: int = Field(default=4, ge=1, description="Shortest query that runs the fuzzy stage")
    fuzzy_threshold: float = Field(default=0.28, ge=0.0, le=1.0, description="Per-field fuzzy distance threshold")
    fuzzy_max_score: float = Field(default=0.4, ge=0.0, le=1.0, description="Ceiling for an accepted fuzzy hit")
    snippet_margin: int = Field(default=60, ge=0, description="Characters of context kept around a snippet match")

    # Rendering
    primary_route: str = Field(default="/paintings", description="Listing route shown first in appears-on lists")
    archive_marker: str = Field(default="/archive", description="Routes containing this are listed last")
    thumbs_base: str = Field(default="/thumbs", description="URL prefix of generated thumbnails")

    # Server
    host: str = Field(default="127.0.0.1", description="HTTP server host")
    port: int = Field(default=4321, ge=1, le=65535, description="HTTP server port")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    json_logs: bool = Field(default=True, description="Emit structured JSON logs")

    @model_validator(mode="after")
    def _check_per_page(self) -> "Settings":
        if self.default_per_page > self.max_per_page:
            raise ValueError(
                f"DEFAULT_PER_PAGE ({self.default_per_page}) must not exceed MAX_PER_PAGE ({self.max_per_page})"
            )
        return self

    def get_ignore_page_paths(self) -> list[str]:
        """Get the routed-page routes excluded from the index."""
        return [path.strip() for path in self.ignore_page_paths.split(",") if path.strip()]

    def get_ignore_listings(self) -> list[str]:
        """Get listing basenames excluded from the index."""
        return [name.strip() for name in self.ignore_listings.split(",") if name.strip()]
