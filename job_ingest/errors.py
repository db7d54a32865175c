"""Exception taxonomy shared by the ingestion pipeline."""

from __future__ import annotations


class IngestError(Exception):
    """Base class for every pipeline failure."""


class NetworkError(IngestError):
    """Transport failure or repeated 5xx once the retry budget is spent."""

    def __init__(self, url: str, attempts: int, status_code: int | None = None) -> None:
        detail = f"status {status_code}" if status_code is not None else "transport error"
        super().__init__(f"Fetch failed after {attempts} attempts ({detail}): {url}")
        self.url = url
        self.attempts = attempts
        self.status_code = status_code


class HttpStatusError(IngestError):
    """Client error (4xx) returned by the upstream; never retried."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"Request failed with status {status_code}: {url}")
        self.url = url
        self.status_code = status_code


class ExtractionError(IngestError):
    """Feed or HTML content could not be turned into listings."""


class StorageError(IngestError):
    """Schema bootstrap or upsert transaction failed."""


__all__ = [
    "ExtractionError",
    "HttpStatusError",
    "IngestError",
    "NetworkError",
    "StorageError",
]
