"""Pydantic models describing the ingestion configuration document."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _FrozenModel(BaseModel):
    """Immutable model accepting both camelCase and snake_case keys."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


def _clean_strings(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError("Expected a list of strings")
    return tuple(str(item).strip() for item in value if item is not None and str(item).strip())


class Defaults(_FrozenModel):
    """Run-wide defaults applied to every query combination."""

    limit_per_provider: int = Field(default=40, ge=1)
    posted_within_days: int | None = Field(default=7, ge=0)
    request_delay_ms: int = Field(default=1500, ge=0)
    max_pages: int = Field(default=3, ge=1)
    save_raw_html: bool = False
    # Deadline for one combination's fetch phase; None waits indefinitely.
    combination_timeout_seconds: float | None = Field(default=300.0, gt=0)
    isolate_storage_errors: bool = False
    fetch_retries: int = Field(default=3, ge=0)
    backoff_ms: int = Field(default=1500, ge=0)


class DatabaseConfig(_FrozenModel):
    path: Path = Field(default=Path("tmp/job-postings.sqlite"))

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        if value in (None, ""):
            return Path("tmp/job-postings.sqlite")
        return Path(value)


class QueryFilters(_FrozenModel):
    posted_within_days: int | None = Field(default=None, ge=0)
    remote: bool | None = None
    max_pages: int | None = Field(default=None, ge=1)


class QuerySpec(_FrozenModel):
    """One declarative search: keywords × locations × providers."""

    label: str | None = None
    keywords: tuple[str, ...] = ()
    # An empty location searches everywhere.
    locations: tuple[str, ...] = ("",)
    providers: tuple[str, ...] | None = None
    filters: QueryFilters = Field(default_factory=QueryFilters)
    tags: tuple[str, ...] = ()
    limit: int | None = Field(default=None, ge=1)

    @field_validator("keywords", "tags", mode="before")
    @classmethod
    def _coerce_terms(cls, value: Any) -> tuple[str, ...]:
        return _clean_strings(value)

    @field_validator("locations", mode="before")
    @classmethod
    def _coerce_locations(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ("",)
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError("locations expects a list of strings")
        locations = tuple("" if item is None else str(item).strip() for item in value)
        return locations or ("",)

    @field_validator("providers", mode="before")
    @classmethod
    def _coerce_providers(cls, value: Any) -> tuple[str, ...] | None:
        if value is None:
            return None
        return tuple(item.lower() for item in _clean_strings(value))


class IngestConfig(_FrozenModel):
    """Complete configuration, assembled once at startup and passed down explicitly."""

    defaults: Defaults = Field(default_factory=Defaults)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    queries: tuple[QuerySpec, ...] = ()

    @field_validator("queries", mode="before")
    @classmethod
    def _coerce_queries(cls, value: Any) -> Any:
        return () if value is None else value

    def resolved_database_path(self, base_dir: Path) -> Path:
        """Return the database path, resolving relative paths against ``base_dir``."""

        path = self.database.path.expanduser()
        if not path.is_absolute():
            return (base_dir / path).resolve()
        return path


__all__ = ["DatabaseConfig", "Defaults", "IngestConfig", "QueryFilters", "QuerySpec"]
