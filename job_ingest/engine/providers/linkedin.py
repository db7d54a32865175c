"""Paginated HTML search provider."""

from __future__ import annotations

import asyncio
from urllib.parse import urlencode

from ...models import RawListing
from ..fetcher import FetchRequest
from ..parser import SearchCard
from .base import BaseProvider, ProviderOptions

SEARCH_URL = "https://www.linkedin.com/jobs-guest/jobs/api/seeMoreJobPostings/search"
PAGE_SIZE = 25


def build_search_url(
    keyword: str = "",
    location: str = "",
    start: int = 0,
    posted_within_days: int | None = None,
    remote: bool = False,
) -> str:
    params: dict[str, str] = {}
    if keyword:
        params["keywords"] = keyword
    if location:
        params["location"] = location
    if posted_within_days:
        seconds = max(1, int(posted_within_days * 24 * 60 * 60))
        params["f_TPR"] = f"r{seconds}"
    if remote:
        params["f_WT"] = "2"
    params["start"] = str(start or 0)
    params["position"] = "1"
    params["pageNum"] = "0"
    params["refresh"] = "true"
    return f"{SEARCH_URL}?{urlencode(params)}"


class LinkedInSearchProvider(BaseProvider):
    """Walk result pages until the limit, an empty page or a short page."""

    name = "linkedin"

    async def fetch_listings(self, options: ProviderOptions) -> list[RawListing]:
        results: list[RawListing] = []
        page = 0
        pages_fetched = 0
        stop_reason = "max_pages"
        while page < options.max_pages:
            url = build_search_url(
                options.keyword,
                options.location,
                start=page * PAGE_SIZE,
                posted_within_days=options.posted_within_days,
                remote=options.remote,
            )
            response = await self.fetcher.fetch(
                FetchRequest(
                    url=url,
                    headers={
                        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
                    },
                    retries=options.fetch_retries,
                    backoff_ms=options.backoff_ms,
                )
            )
            pages_fetched += 1
            cards = self.parser.find_cards(response.text)
            self.logger.debug("search_page_parsed", page=page, url=url, cards=len(cards))
            if not cards:
                stop_reason = "empty_page"
                break
            for card in cards:
                try:
                    parsed = self.parser.parse_card(card)
                except Exception as exc:  # noqa: BLE001
                    self.logger.warning("listing_skipped", page=page, error=str(exc))
                    continue
                results.append(self._to_listing(parsed, url, options))
                if len(results) >= options.limit:
                    break
            if len(results) >= options.limit:
                stop_reason = "limit_reached"
                break
            if len(cards) < PAGE_SIZE:
                stop_reason = "short_page"
                break
            page += 1
            if page < options.max_pages:
                await asyncio.sleep(options.request_delay_ms / 1000)

        self.logger.info(
            "search_finished", pages=pages_fetched, listings=len(results), stop_reason=stop_reason
        )
        return results[: options.limit]

    def _to_listing(self, card: SearchCard, page_url: str, options: ProviderOptions) -> RawListing:
        raw: dict[str, object] = {"url": page_url}
        if options.save_raw_html:
            raw.update(html=card.raw_html, insights=card.insights, benefits=card.benefits)
        keywords = [options.keyword, card.company, card.location, *card.insights, *card.benefits]
        return RawListing(
            source=self.name,
            external_id=card.external_id,
            title=card.title,
            company=card.company,
            location=card.location or options.location,
            description=card.snippet,
            url=card.url,
            listed_at=card.listed_at,
            tags=list(options.tags),
            keywords=[value for value in keywords if value],
            raw=raw,
        )


__all__ = ["LinkedInSearchProvider", "PAGE_SIZE", "SEARCH_URL", "build_search_url"]
