"""Infra layer utilities (storage)."""

from .storage import JobStore, bootstrap, upsert

__all__ = ["JobStore", "bootstrap", "upsert"]
