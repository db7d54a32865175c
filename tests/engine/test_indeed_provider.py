from __future__ import annotations

import asyncio
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from job_ingest.engine import ProviderOptions
from job_ingest.engine.providers import IndeedFeedProvider, resolve_provider
from job_ingest.engine.providers.indeed import build_feed_url
from job_ingest.errors import ExtractionError

from payloads import feed_item, feed_xml


def test_build_feed_url_encodes_filters() -> None:
    url = build_feed_url("python engineer", "Berlin", remote=True, posted_within_days=7)
    params = parse_qs(urlsplit(url).query)

    assert url.startswith("https://rss.indeed.com/rss?")
    assert params == {
        "q": ["python engineer"],
        "l": ["Berlin"],
        "remotejob": ["1"],
        "fromage": ["7"],
        "sort": ["date"],
    }


def test_build_feed_url_omits_empty_filters() -> None:
    params = parse_qs(urlsplit(build_feed_url("engineer")).query)
    assert params == {"q": ["engineer"], "sort": ["date"]}


def test_feed_provider_maps_items(fetcher_factory) -> None:
    requested: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request)
        return httpx.Response(
            200,
            text=feed_xml(
                [
                    feed_item("a1", "Python Engineer", "Acme", location="Berlin"),
                    feed_item("b2", "Data Engineer", "Globex"),
                    feed_item("c3", "QA Engineer", "Initech"),
                ]
            ),
        )

    provider = IndeedFeedProvider(fetcher_factory(handler))
    options = ProviderOptions(
        keyword="engineer", location="Remote", limit=2, tags=("python",), fetch_retries=0, backoff_ms=0
    )
    listings = asyncio.run(provider.fetch_listings(options))

    assert len(requested) == 1
    assert "rss" in requested[0].headers["accept"]
    assert len(listings) == 2

    first = listings[0]
    assert first.source == "indeed"
    assert first.external_id == "a1"
    assert first.title == "Python Engineer"
    assert first.company == "Acme"
    assert first.location == "Berlin"
    assert first.description == "Build things & ship them."
    assert first.listed_at == "2025-10-13T10:00:00.000Z"
    assert first.tags == ["python"]
    assert first.keywords == ["engineer", "Acme", "Berlin"]
    assert first.raw == {"feed_url": build_feed_url("engineer", "Remote")}


def test_feed_provider_keeps_raw_item_when_requested(fetcher_factory) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=feed_xml([feed_item("a1", "Python Engineer", "Acme")]))

    provider = IndeedFeedProvider(fetcher_factory(handler))
    listings = asyncio.run(
        provider.fetch_listings(ProviderOptions(keyword="engineer", save_raw_html=True, fetch_retries=0))
    )

    assert listings[0].raw["item"]["title"] == "Python Engineer"


def test_feed_provider_skips_items_without_link(fetcher_factory) -> None:
    broken = "<item><title>No link</title><description>Company: X<br/></description></item>"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=feed_xml([broken, feed_item("a1", "Python Engineer", "Acme")]))

    provider = IndeedFeedProvider(fetcher_factory(handler))
    listings = asyncio.run(provider.fetch_listings(ProviderOptions(keyword="engineer", fetch_retries=0)))

    assert [listing.external_id for listing in listings] == ["a1"]


def test_resolve_provider_aliases() -> None:
    assert resolve_provider("feed") is IndeedFeedProvider
    assert resolve_provider(" Indeed ") is IndeedFeedProvider
    assert resolve_provider("monster") is None


def test_feed_body_naming_a_local_file_is_not_read(fetcher_factory, tmp_path) -> None:
    local_feed = tmp_path / "local.xml"
    local_feed.write_text(feed_xml([feed_item("zz9", "Local File Job", "NotUpstream")]), encoding="utf-8")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=str(local_feed))

    provider = IndeedFeedProvider(fetcher_factory(handler))

    with pytest.raises(ExtractionError):
        asyncio.run(provider.fetch_listings(ProviderOptions(keyword="engineer", fetch_retries=0)))
