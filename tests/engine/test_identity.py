from __future__ import annotations

import hashlib
from types import SimpleNamespace

from job_ingest.engine import build_job_id, enrich_job, unique
from job_ingest.models import RawListing


def make_listing(**overrides) -> RawListing:
    base = {
        "source": "indeed",
        "external_id": "abc123",
        "url": "https://www.indeed.com/viewjob?jk=abc123",
        "title": "Python Engineer",
        "company": "Acme",
        "location": "Remote",
    }
    base.update(overrides)
    return RawListing(**base)


def test_build_job_id_is_content_hash() -> None:
    listing = make_listing()
    expected = hashlib.sha256(
        b"indeed|abc123|https://www.indeed.com/viewjob?jk=abc123|Python Engineer|Acme"
    ).hexdigest()

    assert build_job_id(listing) == expected
    assert build_job_id(make_listing()) == expected


def test_build_job_id_changes_with_identity_fields() -> None:
    assert build_job_id(make_listing()) != build_job_id(make_listing(title="Go Engineer"))
    # Location is not part of the identity.
    assert build_job_id(make_listing()) == build_job_id(make_listing(location="Berlin"))


def test_unique_preserves_order_and_drops_empty() -> None:
    assert unique(["b", "", "a", None, "b", "c"]) == ["b", "a", "c"]


def test_enrich_job_merges_query_context() -> None:
    listing = make_listing(tags=["feed"], keywords=["engineer", "Acme"])
    query = SimpleNamespace(tags=("python", "feed"))

    job = enrich_job(listing, query, "engineer", "Remote")

    assert job.id == build_job_id(listing)
    assert job.tags == ["feed", "python", "engineer", "Remote"]
    assert job.keywords == ["engineer", "Acme", "python", "feed", "Remote"]


def test_enrich_job_skips_empty_location_and_keeps_provider_id() -> None:
    listing = make_listing(id="provider-42")
    job = enrich_job(listing, SimpleNamespace(tags=()), "engineer", "")

    assert job.id == "provider-42"
    assert job.tags == ["engineer"]
    assert "" not in job.keywords
