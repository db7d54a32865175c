"""Typer CLI entrypoint for job-ingest."""

from __future__ import annotations

import asyncio

import structlog
import typer
import yaml
from pydantic import ValidationError
from rich.console import Console

from .config import ConfigLocator, ConfigRepository, IngestConfig
from .engine import Fetcher
from .errors import StorageError
from .infra import JobStore
from .logging_conf import configure_logging
from .orchestrator import IngestOrchestrator, RunSummary, render_summary

app = typer.Typer(
    help="Ingest job postings from public listing feeds into SQLite.",
    add_completion=False,
    rich_markup_mode=None,
)

console = Console()


async def _ingest(config: IngestConfig, store: JobStore, logger: structlog.BoundLogger) -> RunSummary:
    async with Fetcher(logger=logger.bind(component="fetcher")) as fetcher:
        orchestrator = IngestOrchestrator(
            config,
            store,
            fetcher,
            console=console,
            logger=logger.bind(component="orchestrator"),
        )
        return await orchestrator.run()


@app.command()
def main() -> None:
    """Run every configured query once and print a per-provider summary."""

    locator = ConfigLocator()
    logger = configure_logging(log_dir=locator.logs_dir)
    repository = ConfigRepository(locator)
    try:
        config = repository.load()
    except FileNotFoundError as exc:
        console.print(str(exc), style="red", markup=False, highlight=False)
        logger.error("config_missing", path=str(repository.config_path))
        raise typer.Exit(code=1)
    except (ValueError, ValidationError, yaml.YAMLError) as exc:
        # Unparseable or schema-violating documents both abort the run.
        console.print(
            f"Invalid configuration in {repository.config_path}: {exc}",
            style="red",
            markup=False,
            highlight=False,
        )
        logger.error("config_invalid", path=str(repository.config_path), error=str(exc))
        raise typer.Exit(code=1)

    if not config.queries:
        console.print("No queries configured.", style="yellow", markup=False, highlight=False)

    store = JobStore(repository.database_path(config), logger=logger.bind(component="storage"))
    try:
        summary = asyncio.run(_ingest(config, store, logger))
    except StorageError as exc:
        console.print(f"Storage failure: {exc}", style="red", markup=False, highlight=False)
        logger.error("ingest_aborted", error=str(exc), error_type="StorageError")
        raise typer.Exit(code=1)
    except Exception as exc:  # noqa: BLE001
        console.print(f"Ingestion aborted: {exc}", style="red", markup=False, highlight=False)
        logger.exception("ingest_aborted", error=str(exc), error_type=type(exc).__name__)
        raise typer.Exit(code=1)

    render_summary(summary, console)


__all__ = ["app", "main"]
