"""Text clean-up helpers and the relative listing-date parser."""

from __future__ import annotations

import calendar
import re
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from html import unescape

from selectolax.parser import HTMLParser

_WHITESPACE = re.compile(r"\s+")
_RELATIVE = re.compile(r"(\d+)[^\d]+(hour|hr|day|week|month|minute)", re.IGNORECASE)


def normalize_whitespace(value: str | None) -> str:
    if not value:
        return ""
    return _WHITESPACE.sub(" ", value).strip()


def decode_html_entities(value: str | None) -> str:
    if not value:
        return ""
    return unescape(value)


def strip_tags(value: str | None) -> str:
    """Drop markup and collapse whitespace; entities are decoded on the way.

    Text nodes are joined as-is, so inline tags never introduce spaces.
    """

    if not value:
        return ""
    if "<" not in value:
        return normalize_whitespace(decode_html_entities(value))
    return normalize_whitespace(HTMLParser(value).text(deep=True))


def to_iso(value: datetime) -> str:
    """Render a datetime as a UTC ISO-8601 string with millisecond precision."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _subtract_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 - months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def parse_absolute_date(text: str | None) -> datetime | None:
    """Parse RFC 2822 (RSS ``pubDate``) or ISO-8601 text; naive values are taken as UTC."""

    if not text:
        return None
    candidate = text.strip()
    if not candidate:
        return None
    parsed: datetime | None
    try:
        parsed = parsedate_to_datetime(candidate)
    except (TypeError, ValueError, IndexError):
        parsed = None
    if parsed is None:
        normalised = candidate[:-1] + "+00:00" if candidate.endswith(("Z", "z")) else candidate
        try:
            parsed = datetime.fromisoformat(normalised)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_relative_date(text: str | None, now: datetime | None = None) -> str | None:
    """Resolve listing-date text such as ``"3 days ago"`` to an ISO timestamp.

    ``"today"`` and ``"just posted"`` resolve to ``now``. A number followed by a
    minute/hour/day/week/month unit counts back from ``now``. ``"30+"`` is read as
    thirty days. Anything else is tried as an absolute date; unparseable text
    returns ``None``.
    """

    if not text:
        return None
    reference = now or datetime.now(timezone.utc)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)
    lowered = text.lower()
    if "today" in lowered or "just posted" in lowered:
        return to_iso(reference)

    match = _RELATIVE.search(lowered)
    if match:
        amount = int(match.group(1))
        unit = match.group(2)
        if unit == "minute":
            result = reference - timedelta(minutes=amount)
        elif unit in ("hour", "hr"):
            result = reference - timedelta(hours=amount)
        elif unit == "day":
            result = reference - timedelta(days=amount)
        elif unit == "week":
            result = reference - timedelta(weeks=amount)
        else:
            result = _subtract_months(reference, amount)
        return to_iso(result)

    if "30+" in lowered:
        return to_iso(reference - timedelta(days=30))

    absolute = parse_absolute_date(text)
    if absolute is not None:
        return to_iso(absolute)
    return None


__all__ = [
    "decode_html_entities",
    "normalize_whitespace",
    "parse_absolute_date",
    "parse_relative_date",
    "strip_tags",
    "to_iso",
]
