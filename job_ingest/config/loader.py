"""Configuration loading helpers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .models import IngestConfig

CONFIG_FILENAMES = ("jobs.yaml", "jobs.yml", "jobs.json")
HOME_ENV = "JOB_INGEST_HOME"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get(HOME_ENV)
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.logs_dir = (root / "logs").resolve()

    def config_path(self) -> Path:
        for name in CONFIG_FILENAMES:
            candidate = self.data_dir / name
            if candidate.exists():
                return candidate
        return self.data_dir / CONFIG_FILENAMES[0]


def load_config(path: Path) -> IngestConfig:
    if not path.exists():
        raise FileNotFoundError(f"Ingestion configuration not found: {path}")
    return IngestConfig.model_validate(_read_file(path))


class ConfigRepository:
    """Load the configuration document once and resolve paths relative to it."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: IngestConfig | None = None

    @property
    def config_path(self) -> Path:
        return self.locator.config_path()

    def load(self) -> IngestConfig:
        if self._cache is None:
            self._cache = load_config(self.config_path)
        return self._cache

    def database_path(self, config: IngestConfig | None = None) -> Path:
        config = config or self.load()
        return config.resolved_database_path(self.config_path.parent)


__all__ = ["CONFIG_FILENAMES", "ConfigLocator", "ConfigRepository", "HOME_ENV", "load_config"]
