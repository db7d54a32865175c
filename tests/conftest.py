"""Pytest configuration providing config builders and shared fixtures."""

from __future__ import annotations

import asyncio
import io
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
from rich.console import Console

from job_ingest.config import ConfigLocator, ConfigRepository, IngestConfig
from job_ingest.engine import Fetcher
from job_ingest.infra import JobStore

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def fetcher_factory() -> Callable[[Handler], Fetcher]:
    def _builder(handler: Handler) -> Fetcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
        return Fetcher(client=client)

    return _builder


@pytest.fixture
def config_builder() -> Callable[..., IngestConfig]:
    def _builder(queries: list[dict[str, Any]] | None = None, **defaults: Any) -> IngestConfig:
        base_defaults: dict[str, Any] = {
            "requestDelayMs": 0,
            "fetchRetries": 0,
            "backoffMs": 0,
        }
        base_defaults.update(defaults)
        return IngestConfig.model_validate(
            {"defaults": base_defaults, "queries": queries or []}
        )

    return _builder


@pytest.fixture
def store(tmp_path: Path) -> JobStore:
    return JobStore(tmp_path / "jobs.sqlite")


@pytest.fixture
def console_buffer() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=200, color_system=None), buffer


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigRepository:
    monkeypatch.setenv("JOB_INGEST_HOME", str(tmp_path))
    (tmp_path / "data").mkdir()
    return ConfigRepository(ConfigLocator())


@pytest.fixture
def recorded_sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Replace ``asyncio.sleep`` with a recorder that returns immediately."""

    delays: list[float] = []

    async def _sleep(delay: float, result: Any = None) -> Any:
        delays.append(delay)
        return result

    monkeypatch.setattr(asyncio, "sleep", _sleep)
    return delays
