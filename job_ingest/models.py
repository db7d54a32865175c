"""Record shapes flowing from providers to storage."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class RawListing:
    """Provider output before tags, keywords and identity are settled.

    ``id`` is left unset by the bundled feed and search providers, so their
    postings are keyed by the content hash of ``source|external_id|url|title|company``.
    A provider whose upstream exposes a durable posting id may set it, and
    that value then becomes the stored primary key unchanged.
    """

    source: str
    url: str
    external_id: str = ""
    title: str = ""
    company: str = ""
    location: str = ""
    description: str = ""
    listed_at: str | None = None
    tags: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    raw: dict[str, Any] | None = None
    id: str | None = None


@dataclass(slots=True)
class JobPosting:
    """One normalised listing as persisted in ``job_postings``."""

    id: str
    source: str
    url: str
    external_id: str = ""
    title: str = ""
    company: str = ""
    location: str = ""
    description: str = ""
    listed_at: str | None = None
    tags: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    raw: dict[str, Any] | None = None


@dataclass(slots=True)
class UpsertResult:
    inserted: int = 0
    updated: int = 0


__all__ = ["JobPosting", "RawListing", "UpsertResult"]
