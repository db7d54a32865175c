"""Ingestion orchestrator wiring together providers, normalisation and storage."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Mapping, TypeVar

import structlog
from rich.console import Console

from .config import Defaults, IngestConfig, QuerySpec
from .engine import BaseProvider, Fetcher, Parser, ProviderOptions, enrich_job
from .engine.providers import PROVIDER_ALIASES, PROVIDERS, resolve_provider
from .errors import StorageError
from .infra import JobStore
from .models import JobPosting, RawListing

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class Combination:
    """One (keyword, location, provider) cell of a query's cartesian sweep."""

    query: QuerySpec
    keyword: str
    location: str
    provider: str


@dataclass(slots=True)
class ProviderStats:
    total: int = 0
    inserted: int = 0
    updated: int = 0

    def add(self, other: "ProviderStats") -> None:
        self.total += other.total
        self.inserted += other.inserted
        self.updated += other.updated


@dataclass(slots=True)
class RunSummary:
    overall: ProviderStats = field(default_factory=ProviderStats)
    per_provider: dict[str, ProviderStats] = field(default_factory=dict)
    failed: int = 0

    def record(self, provider: str, stats: ProviderStats) -> None:
        self.overall.add(stats)
        self.per_provider.setdefault(provider, ProviderStats()).add(stats)


def expand_combinations(
    config: IngestConfig, providers: Mapping[str, type[BaseProvider]] | None = None
) -> list[Combination]:
    """Expand every query into keyword × location × provider, in config order."""

    registry = providers if providers is not None else PROVIDERS
    combinations: list[Combination] = []
    for query in config.queries:
        provider_names = query.providers if query.providers is not None else tuple(registry)
        for keyword in query.keywords:
            for location in query.locations or ("",):
                for provider in provider_names:
                    combinations.append(Combination(query, keyword, location, provider))
    return combinations


def build_provider_options(
    query: QuerySpec,
    keyword: str,
    location: str,
    provider: str | BaseProvider | type[BaseProvider],
    defaults: Defaults,
) -> ProviderOptions:
    """Merge query filters over run defaults, capped by what the provider can page through."""

    provider_cls = resolve_provider(provider) if isinstance(provider, str) else provider
    max_pages_supported = getattr(provider_cls, "max_pages_supported", None)
    filters = query.filters
    max_pages = filters.max_pages if filters.max_pages is not None else defaults.max_pages
    if max_pages_supported is not None:
        max_pages = min(max_pages, max_pages_supported)
    return ProviderOptions(
        keyword=keyword,
        location=location,
        limit=query.limit if query.limit is not None else defaults.limit_per_provider,
        posted_within_days=(
            filters.posted_within_days
            if filters.posted_within_days is not None
            else defaults.posted_within_days
        ),
        remote=bool(filters.remote),
        tags=tuple(query.tags),
        max_pages=max_pages,
        request_delay_ms=defaults.request_delay_ms,
        save_raw_html=defaults.save_raw_html,
        fetch_retries=defaults.fetch_retries,
        backoff_ms=defaults.backoff_ms,
    )


def format_label(query: QuerySpec, keyword: str, location: str, provider: str) -> str:
    parts = [query.label or keyword or "query"]
    if location:
        parts.append(location)
    parts.append(provider)
    return " • ".join(parts)


def render_summary(summary: RunSummary, console: Console) -> None:
    console.print("\nSummary", markup=False, highlight=False)
    console.print("=======", markup=False, highlight=False)
    for provider, stats in summary.per_provider.items():
        console.print(
            f"{provider}: total={stats.total} inserted={stats.inserted} updated={stats.updated}",
            markup=False,
            highlight=False,
        )
    overall = summary.overall
    console.print(
        f"Overall: total={overall.total} inserted={overall.inserted} updated={overall.updated}",
        markup=False,
        highlight=False,
    )


class IngestOrchestrator:
    """Drive provider → normaliser → storage for every query combination, one at a time."""

    def __init__(
        self,
        config: IngestConfig,
        store: JobStore,
        fetcher: Fetcher,
        providers: Mapping[str, type[BaseProvider]] | None = None,
        console: Console | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.fetcher = fetcher
        self.providers = dict(providers) if providers is not None else dict(PROVIDERS)
        self.console = console or Console()
        self.logger = logger or structlog.get_logger("job_ingest").bind(component="orchestrator")
        self.parser = Parser()
        self._instances: dict[str, BaseProvider] = {}

    async def run(self) -> RunSummary:
        """Process every combination; storage failures propagate unless isolation is enabled."""

        defaults = self.config.defaults
        self.store.bootstrap()
        summary = RunSummary()
        combinations = expand_combinations(self.config, self.providers)
        self.logger.info("run_started", combinations=len(combinations))
        for combination in combinations:
            stats = await self.process(combination, summary)
            summary.record(combination.provider, stats)
            # Applies after every combination, whatever the provider.
            await asyncio.sleep(defaults.request_delay_ms / 1000)
        self.logger.info(
            "run_finished",
            total=summary.overall.total,
            inserted=summary.overall.inserted,
            updated=summary.overall.updated,
            failed=summary.failed,
        )
        return summary

    async def process(
        self, combination: Combination, summary: RunSummary | None = None
    ) -> ProviderStats:
        defaults = self.config.defaults
        label = format_label(
            combination.query, combination.keyword, combination.location, combination.provider
        )
        self._print(f"\n→ {label}")
        provider = self._provider(combination.provider)
        if provider is None:
            self._print(f"   Provider {combination.provider} is not supported.", style="yellow")
            self.logger.warning("provider_unsupported", provider=combination.provider)
            return ProviderStats()

        options = build_provider_options(
            combination.query,
            combination.keyword,
            combination.location,
            provider,
            defaults,
        )
        try:
            listings = await self._with_deadline(provider.fetch_listings(options))
        except Exception as exc:  # noqa: BLE001
            self._fail(combination, label, exc, summary)
            return ProviderStats()

        if not listings:
            self._print("   No results returned.")
            return ProviderStats()

        jobs = [self._normalise(listing, combination) for listing in listings]
        try:
            result = self.store.upsert(jobs)
        except StorageError as exc:
            if not defaults.isolate_storage_errors:
                raise
            self._fail(combination, label, exc, summary)
            return ProviderStats()

        self._print(
            f"   Processed {len(jobs)} job(s). inserted={result.inserted} updated={result.updated}"
        )
        return ProviderStats(total=len(jobs), inserted=result.inserted, updated=result.updated)

    # ------------------------------------------------------------------
    def _provider(self, name: str) -> BaseProvider | None:
        key = PROVIDER_ALIASES.get(name, name)
        if key not in self._instances:
            provider_cls = self.providers.get(name) or self.providers.get(key)
            if provider_cls is None:
                return None
            self._instances[key] = provider_cls(self.fetcher, self.parser, self.logger)
        return self._instances[key]

    async def _with_deadline(self, awaitable: Awaitable[T]) -> T:
        timeout = self.config.defaults.combination_timeout_seconds
        return await asyncio.wait_for(awaitable, timeout)

    @staticmethod
    def _normalise(listing: RawListing, combination: Combination) -> JobPosting:
        return enrich_job(listing, combination.query, combination.keyword, combination.location)

    def _fail(
        self,
        combination: Combination,
        label: str,
        exc: Exception,
        summary: RunSummary | None,
    ) -> None:
        if isinstance(exc, asyncio.TimeoutError):
            message = f"timed out after {self.config.defaults.combination_timeout_seconds}s"
        else:
            message = str(exc) or type(exc).__name__
        if summary is not None:
            summary.failed += 1
        self._print(f"   Failed to crawl {combination.provider}: {message}", style="red")
        self.logger.warning(
            "combination_failed",
            label=label,
            provider=combination.provider,
            keyword=combination.keyword,
            location=combination.location,
            error=message,
            error_type=type(exc).__name__,
        )

    def _print(self, message: str, style: str | None = None) -> None:
        self.console.print(message, style=style, markup=False, highlight=False)


__all__ = [
    "Combination",
    "IngestOrchestrator",
    "ProviderStats",
    "RunSummary",
    "build_provider_options",
    "expand_combinations",
    "format_label",
    "render_summary",
]
