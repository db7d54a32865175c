"""Provider interface.

Every listing source implements :class:`BaseProvider`, turning one
(keyword, location) search into a list of :class:`RawListing` records. Providers
own URL construction and pagination; the shared :class:`Parser` owns extraction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import structlog

from ...models import RawListing
from ..fetcher import Fetcher
from ..parser import Parser


@dataclass(slots=True, frozen=True)
class ProviderOptions:
    """Search parameters handed to a provider for one query combination."""

    keyword: str = ""
    location: str = ""
    limit: int = 40
    posted_within_days: int | None = None
    remote: bool = False
    tags: tuple[str, ...] = field(default_factory=tuple)
    max_pages: int = 3
    request_delay_ms: int = 1500
    save_raw_html: bool = False
    fetch_retries: int = 3
    backoff_ms: int = 1500


class BaseProvider(ABC):
    """Uniform provider contract used by the orchestrator."""

    name: str = ""
    # Upper bound on pages this source can serve per search; ``None`` means unbounded.
    max_pages_supported: int | None = None

    def __init__(
        self,
        fetcher: Fetcher,
        parser: Parser | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.parser = parser or Parser()
        self.logger = (logger or structlog.get_logger("job_ingest.provider")).bind(
            provider=self.name
        )

    @abstractmethod
    async def fetch_listings(self, options: ProviderOptions) -> list[RawListing]:
        """Fetch and extract listings for a single search."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"


__all__ = ["BaseProvider", "ProviderOptions"]
