"""Listing providers and their registry."""

from __future__ import annotations

from .base import BaseProvider, ProviderOptions
from .indeed import IndeedFeedProvider
from .linkedin import LinkedInSearchProvider

PROVIDERS: dict[str, type[BaseProvider]] = {
    IndeedFeedProvider.name: IndeedFeedProvider,
    LinkedInSearchProvider.name: LinkedInSearchProvider,
}
PROVIDER_ALIASES = {
    "feed": IndeedFeedProvider.name,
    "search": LinkedInSearchProvider.name,
}


def resolve_provider(name: str) -> type[BaseProvider] | None:
    key = name.strip().lower()
    return PROVIDERS.get(PROVIDER_ALIASES.get(key, key))


__all__ = [
    "BaseProvider",
    "IndeedFeedProvider",
    "LinkedInSearchProvider",
    "PROVIDERS",
    "PROVIDER_ALIASES",
    "ProviderOptions",
    "resolve_provider",
]
