"""Structured logging for ingestion runs.

Every event is a structlog event dict rendered as one JSON object per line.
Three sinks share that format:

* the console, which stays at WARNING unless ``verbose`` (progress lines go
  through the rich console instead),
* ``<home>/logs/ingest.log`` with the full INFO trail of a run
  (``fetch_retry``, ``search_finished``, ``upsert_committed``, ...),
* ``<home>/logs/error.log`` holding only ERROR records such as
  ``fetch_failed`` and ``ingest_aborted``.

``<home>`` is ``JOB_INGEST_HOME`` when set, else the project root.
"""

from __future__ import annotations

import logging.config
import os
from pathlib import Path
from typing import Any

import structlog

LOGGER_NAME = "job_ingest"
LOG_FILES = {"ingest.log": "INFO", "error.log": "ERROR"}

_configured = False


def _default_log_dir() -> Path:
    env_root = os.environ.get("JOB_INGEST_HOME")
    root = Path(env_root).expanduser().resolve() if env_root else Path(__file__).resolve().parents[1]
    return root / "logs"


def _file_handler(path: Path, level: str) -> dict[str, Any]:
    return {
        "class": "logging.FileHandler",
        "level": level,
        "filename": str(path),
        "formatter": "json",
        "encoding": "utf-8",
    }


def _dict_config(log_dir: Path, verbose: bool) -> dict[str, Any]:
    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG" if verbose else "WARNING",
            "formatter": "json",
        }
    }
    for filename, level in LOG_FILES.items():
        handlers[filename.removesuffix(".log")] = _file_handler(log_dir / filename, level)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
            }
        },
        "handlers": handlers,
        "loggers": {
            LOGGER_NAME: {
                "handlers": list(handlers),
                "level": "DEBUG" if verbose else "INFO",
                "propagate": False,
            },
        },
    }


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> structlog.BoundLogger:
    """Install the sinks once per process and return the ``job_ingest`` logger."""

    global _configured
    if not _configured:
        log_dir = log_dir or _default_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        logging.config.dictConfig(_dict_config(log_dir, verbose))
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _configured = True
    return structlog.get_logger(LOGGER_NAME)


__all__ = ["LOG_FILES", "LOGGER_NAME", "configure_logging"]
