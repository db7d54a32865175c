"""RSS feed provider."""

from __future__ import annotations

from urllib.parse import urlencode

from ...errors import ExtractionError
from ...models import RawListing
from ..fetcher import FetchRequest
from ..parser import FeedItem
from ..text import parse_relative_date
from .base import BaseProvider, ProviderOptions

FEED_URL = "https://rss.indeed.com/rss"
FEED_ACCEPT = "application/rss+xml, application/xml;q=0.9, */*;q=0.8"


def build_feed_url(
    keyword: str = "",
    location: str = "",
    remote: bool = False,
    posted_within_days: int | None = None,
) -> str:
    params: dict[str, str] = {}
    if keyword:
        params["q"] = keyword
    if location:
        params["l"] = location
    if remote:
        params["remotejob"] = "1"
    if posted_within_days:
        params["fromage"] = str(posted_within_days)
    params["sort"] = "date"
    return f"{FEED_URL}?{urlencode(params)}"


class IndeedFeedProvider(BaseProvider):
    """Single-request RSS search; the feed has no pagination."""

    name = "indeed"
    max_pages_supported = 1

    async def fetch_listings(self, options: ProviderOptions) -> list[RawListing]:
        feed_url = build_feed_url(
            options.keyword, options.location, options.remote, options.posted_within_days
        )
        response = await self.fetcher.fetch(
            FetchRequest(
                url=feed_url,
                headers={"Accept": FEED_ACCEPT},
                retries=options.fetch_retries,
                backoff_ms=options.backoff_ms,
            )
        )
        # The upstream ignores result limits, so truncate locally.
        items = self.parser.parse_feed(response.content)[: options.limit]
        results: list[RawListing] = []
        for item in items:
            try:
                results.append(self._to_listing(item, feed_url, options))
            except Exception as exc:  # noqa: BLE001
                self.logger.warning("listing_skipped", url=item.link, error=str(exc))
        self.logger.info("feed_parsed", url=feed_url, items=len(items), listings=len(results))
        return results

    def _to_listing(self, item: FeedItem, feed_url: str, options: ProviderOptions) -> RawListing:
        if not item.link:
            raise ExtractionError(f"Feed item without link: {item.title or '-'}")
        meta = self.parser.parse_feed_description(item.description)
        raw: dict[str, object] = {"feed_url": feed_url}
        if options.save_raw_html:
            raw["item"] = item.raw
        return RawListing(
            source=self.name,
            external_id=self.parser.feed_external_id(item.link),
            title=item.title,
            company=meta.company,
            location=meta.location or options.location,
            description=meta.snippet,
            url=item.link,
            listed_at=parse_relative_date(item.published),
            tags=list(options.tags),
            keywords=[value for value in (options.keyword, meta.company, meta.location) if value],
            raw=raw,
        )


__all__ = ["FEED_URL", "IndeedFeedProvider", "build_feed_url"]
