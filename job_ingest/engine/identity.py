"""Listing identity and tag/keyword normalisation."""

from __future__ import annotations

import hashlib
from typing import Iterable, Protocol

from ..models import JobPosting, RawListing


class QueryContext(Protocol):
    tags: Iterable[str]


def unique(values: Iterable[str | None]) -> list[str]:
    """Order-preserving de-duplication that drops empty values."""

    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def build_job_id(listing: RawListing) -> str:
    """SHA-256 over ``source|external_id|url|title|company``."""

    parts = (
        listing.source,
        listing.external_id,
        listing.url,
        listing.title,
        listing.company,
    )
    seed = "|".join(part or "" for part in parts)
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()


def enrich_job(
    listing: RawListing, query: QueryContext, keyword: str, location: str
) -> JobPosting:
    query_tags = list(query.tags or ())
    return JobPosting(
        id=listing.id or build_job_id(listing),
        source=listing.source,
        url=listing.url,
        external_id=listing.external_id,
        title=listing.title,
        company=listing.company,
        location=listing.location,
        description=listing.description,
        listed_at=listing.listed_at,
        tags=unique([*listing.tags, *query_tags, keyword, location]),
        keywords=unique([*listing.keywords, *query_tags, keyword, location]),
        raw=listing.raw,
    )


__all__ = ["build_job_id", "enrich_job", "unique"]
