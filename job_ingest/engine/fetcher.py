"""HTTP fetching with bounded retry and linear backoff."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict

import httpx
import structlog

from ..errors import HttpStatusError, NetworkError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_HEADERS = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}
DEFAULT_TIMEOUT = 20.0


@dataclass(slots=True)
class FetchRequest:
    """Input for the fetcher."""

    url: str
    headers: dict[str, str] | None = None
    retries: int = 3
    backoff_ms: int = 1500
    timeout: float | None = None


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    content: bytes
    headers: Dict[str, str]
    attempts: int = 1
    raw: httpx.Response | None = field(repr=False, default=None)


class Fetcher:
    """Issue GET requests one at a time, retrying 5xx and transport failures."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.timeout = timeout
        self.logger = logger or structlog.get_logger("job_ingest.fetcher")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=True, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "Fetcher":
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()

    async def fetch(self, request: FetchRequest) -> FetchResponse:
        headers = httpx.Headers(DEFAULT_HEADERS)
        if request.headers:
            headers.update(request.headers)
        timeout = request.timeout or self.timeout
        retries = max(0, request.retries)

        attempt = 0
        last_error: Exception | None = None
        last_status: int | None = None
        while True:
            try:
                response = await self._client.get(request.url, headers=headers, timeout=timeout)
            except httpx.TransportError as exc:
                last_error = exc
                last_status = None
                self.logger.warning(
                    "fetch_retry",
                    url=request.url,
                    attempt=attempt + 1,
                    error=str(exc) or type(exc).__name__,
                )
            else:
                status = response.status_code
                if status >= 500:
                    last_error = None
                    last_status = status
                    self.logger.warning(
                        "fetch_retry", url=request.url, attempt=attempt + 1, status=status
                    )
                elif status >= 400:
                    self.logger.warning("fetch_rejected", url=request.url, status=status)
                    raise HttpStatusError(request.url, status)
                else:
                    return FetchResponse(
                        url=str(response.url),
                        status_code=status,
                        text=response.text,
                        content=response.content,
                        headers=dict(response.headers),
                        attempts=attempt + 1,
                        raw=response,
                    )

            if attempt >= retries:
                break
            attempt += 1
            await asyncio.sleep(request.backoff_ms * attempt / 1000)

        self.logger.error(
            "fetch_failed", url=request.url, attempts=attempt + 1, status=last_status
        )
        raise NetworkError(request.url, attempt + 1, last_status) from last_error


__all__ = ["DEFAULT_HEADERS", "FetchRequest", "FetchResponse", "Fetcher"]
