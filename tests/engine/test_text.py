from __future__ import annotations

from datetime import datetime, timezone

import pytest

from job_ingest.engine.text import parse_relative_date, strip_tags, to_iso

NOW = datetime(2025, 10, 15, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("3 days ago", "2025-10-12T12:00:00.000Z"),
        ("Just posted", "2025-10-15T12:00:00.000Z"),
        ("Posted today", "2025-10-15T12:00:00.000Z"),
        ("5 hrs ago", "2025-10-15T07:00:00.000Z"),
        ("45 minutes ago", "2025-10-15T11:15:00.000Z"),
        ("1 week ago", "2025-10-08T12:00:00.000Z"),
        ("2 months ago", "2025-08-15T12:00:00.000Z"),
        ("30+ days ago", "2025-09-15T12:00:00.000Z"),
        ("Mon, 13 Oct 2025 10:00:00 GMT", "2025-10-13T10:00:00.000Z"),
        ("2025-10-01", "2025-10-01T00:00:00.000Z"),
    ],
)
def test_parse_relative_date(text: str, expected: str) -> None:
    assert parse_relative_date(text, now=NOW) == expected


@pytest.mark.parametrize("text", ["", None, "sometime soon", "yesterday-ish"])
def test_parse_relative_date_unparseable(text) -> None:
    assert parse_relative_date(text, now=NOW) is None


def test_month_arithmetic_clamps_to_month_end() -> None:
    now = datetime(2025, 3, 31, tzinfo=timezone.utc)
    assert parse_relative_date("1 month ago", now=now) == "2025-02-28T00:00:00.000Z"


def test_strip_tags_collapses_markup_and_entities() -> None:
    assert strip_tags("<p>Build <b>things</b> &amp;\n ship</p>") == "Build things & ship"
    assert strip_tags("plain &amp; simple") == "plain & simple"


def test_to_iso_treats_naive_as_utc() -> None:
    assert to_iso(datetime(2025, 1, 2, 3, 4, 5)) == "2025-01-02T03:04:05.000Z"


def test_strip_tags_does_not_pad_inline_markup() -> None:
    assert strip_tags("Build <b>things</b>. Senior <strong>Py</strong>-Dev") == "Build things. Senior Py-Dev"
