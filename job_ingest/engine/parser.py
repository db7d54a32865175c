"""Feed and HTML extraction helpers shared by the providers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs, parse_qsl, urlencode, urlsplit, urlunsplit

import feedparser
from selectolax.parser import HTMLParser, Node

from ..errors import ExtractionError
from .text import decode_html_entities, normalize_whitespace, parse_relative_date, strip_tags

_COMPANY = re.compile(r"Company:\s*([^<]+)<br\s*/?", re.IGNORECASE)
_LOCATION = re.compile(r"Location:\s*([^<]+)<br\s*/?", re.IGNORECASE)
_SNIPPET = re.compile(r"Description:\s*([\s\S]+)", re.IGNORECASE)

CARD_SELECTOR = ".base-card.job-search-card"
TRACKING_PARAMS = ("refId", "trackingId")


@dataclass
class FeedItem:
    title: str
    link: str
    description: str
    published: str
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass
class DescriptionMeta:
    company: str = ""
    location: str = ""
    snippet: str = ""


@dataclass
class SearchCard:
    external_id: str
    url: str
    title: str
    company: str
    location: str
    snippet: str
    listed_at: str | None
    insights: list[str] = field(default_factory=list)
    benefits: list[str] = field(default_factory=list)
    raw_html: str = ""


class Parser:
    """Turn feed and search-page bodies into intermediate items."""

    # ------------------------------------------------------------------
    # RSS feed
    # ------------------------------------------------------------------
    def parse_feed(self, xml: bytes | str) -> list[FeedItem]:
        """Parse a feed body already fetched by the caller.

        feedparser reads a ``str`` argument as a URL or file path, so the body
        is always handed over as bytes.
        """

        payload = xml.encode("utf-8") if isinstance(xml, str) else xml
        parsed = feedparser.parse(payload)
        entries = parsed.get("entries") or []
        if not entries and parsed.get("bozo") and payload.strip():
            raise ExtractionError(f"Malformed feed: {parsed.get('bozo_exception')}")
        items: list[FeedItem] = []
        for entry in entries:
            description = entry.get("description") or entry.get("summary") or ""
            items.append(
                FeedItem(
                    title=normalize_whitespace(strip_tags(entry.get("title") or "")),
                    link=normalize_whitespace(entry.get("link") or ""),
                    description=description,
                    published=normalize_whitespace(entry.get("published") or ""),
                    raw={
                        "title": entry.get("title"),
                        "link": entry.get("link"),
                        "description": description,
                        "published": entry.get("published"),
                    },
                )
            )
        return items

    def parse_feed_description(self, description: str) -> DescriptionMeta:
        """Read the labelled ``Company:``/``Location:``/``Description:`` segments."""

        company = _COMPANY.search(description)
        location = _LOCATION.search(description)
        snippet = _SNIPPET.search(description)
        return DescriptionMeta(
            company=normalize_whitespace(decode_html_entities(company.group(1))) if company else "",
            location=normalize_whitespace(decode_html_entities(location.group(1))) if location else "",
            snippet=strip_tags(snippet.group(1)) if snippet else "",
        )

    @staticmethod
    def feed_external_id(link: str) -> str:
        try:
            query = parse_qs(urlsplit(link).query)
        except ValueError:
            return ""
        for key in ("jk", "vjk"):
            values = query.get(key)
            if values and values[0]:
                return values[0]
        return ""

    # ------------------------------------------------------------------
    # HTML search results
    # ------------------------------------------------------------------
    def find_cards(self, html: str) -> list[Node]:
        return HTMLParser(html).css(CARD_SELECTOR)

    def parse_card(self, card: Node) -> SearchCard:
        urn = card.attributes.get("data-entity-urn") or ""
        external_id = urn.split(":")[-1] if urn else ""
        link = card.css_first("a.base-card__full-link")
        href = (link.attributes.get("href") or "").strip() if link else ""
        if not href:
            raise ExtractionError(f"Search card without detail link (urn={urn or '-'})")

        time_node = card.css_first(
            "time.job-search-card__listdate, time.job-search-card__listdate--new"
        )
        listed_text = self._text(time_node)
        listed_at = parse_relative_date(listed_text)
        if listed_at is None and time_node is not None:
            listed_at = parse_relative_date(time_node.attributes.get("datetime"))

        return SearchCard(
            external_id=external_id,
            url=self.clean_url(decode_html_entities(href)),
            title=self._text(card.css_first("h3.base-search-card__title")),
            company=self._text(card.css_first("h4.base-search-card__subtitle")),
            location=self._text(card.css_first("span.job-search-card__location")),
            snippet=self._text(card.css_first("p.job-search-card__snippet")),
            listed_at=listed_at,
            insights=self._texts(card, "li.job-card-container__metadata-item"),
            benefits=self._texts(card, "span.result-benefits__text"),
            raw_html=card.html or "",
        )

    @staticmethod
    def clean_url(url: str) -> str:
        """Remove tracking query parameters from a detail URL."""

        try:
            parts = urlsplit(url)
        except ValueError:
            return url
        if not parts.query:
            return url
        query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in TRACKING_PARAMS]
        return urlunsplit(parts._replace(query=urlencode(query)))

    @staticmethod
    def _text(node: Node | None) -> str:
        if node is None:
            return ""
        return normalize_whitespace(node.text(deep=True))

    def _texts(self, card: Node, selector: str) -> list[str]:
        values = [self._text(node) for node in card.css(selector)]
        return [value for value in values if value]


__all__ = ["DescriptionMeta", "FeedItem", "Parser", "SearchCard"]
