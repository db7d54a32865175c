"""Engine components orchestrating fetch → parse → normalise."""

from .fetcher import FetchRequest, FetchResponse, Fetcher
from .identity import build_job_id, enrich_job, unique
from .parser import Parser
from .providers import PROVIDERS, BaseProvider, ProviderOptions, resolve_provider
from .text import parse_relative_date

__all__ = [
    "BaseProvider",
    "FetchRequest",
    "FetchResponse",
    "Fetcher",
    "PROVIDERS",
    "Parser",
    "ProviderOptions",
    "build_job_id",
    "enrich_job",
    "parse_relative_date",
    "resolve_provider",
    "unique",
]
