"""Canned upstream payloads shared across test modules."""

from __future__ import annotations

from typing import Iterable


def feed_item(
    jk: str,
    title: str,
    company: str,
    location: str = "Remote",
    published: str = "Mon, 13 Oct 2025 10:00:00 GMT",
) -> str:
    return f"""
    <item>
      <title>{title}</title>
      <link>https://www.indeed.com/viewjob?jk={jk}&amp;from=rss</link>
      <description><![CDATA[Company: {company}<br/>Location: {location}<br/>Description: Build <b>things</b> &amp; ship them.]]></description>
      <pubDate>{published}</pubDate>
    </item>
    """


def feed_xml(items: Iterable[str]) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>Jobs</title>'
        '<link>https://www.indeed.com</link><description>Feed</description>'
        + "".join(items)
        + "</channel></rss>"
    )


def search_card(n: int, listed: str = "2 days ago") -> str:
    return f"""
    <li>
      <div class="base-card job-search-card" data-entity-urn="urn:li:jobPosting:{n}">
        <a class="base-card__full-link" href="https://www.linkedin.com/jobs/view/{n}?refId=abc&amp;trackingId=xyz&amp;position=1"></a>
        <h3 class="base-search-card__title"> Engineer {n} </h3>
        <h4 class="base-search-card__subtitle"><a href="#">Company {n}</a></h4>
        <span class="job-search-card__location">Berlin, DE</span>
        <time class="job-search-card__listdate" datetime="2025-10-01">{listed}</time>
      </div>
    </li>
    """


def search_page(start: int, count: int) -> str:
    return "<ul>" + "".join(search_card(n) for n in range(start, start + count)) + "</ul>"
