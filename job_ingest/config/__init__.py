"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository, load_config
from .models import DatabaseConfig, Defaults, IngestConfig, QueryFilters, QuerySpec

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "DatabaseConfig",
    "Defaults",
    "IngestConfig",
    "QueryFilters",
    "QuerySpec",
    "load_config",
]
