"""Saved query registry: definitions, backing stores, and the list view protocol."""

from sheetview.registry.redis_store import RedisQueryStore
from sheetview.registry.registry import Confirm, QueryRegistry
from sheetview.registry.store import InMemoryQueryStore, QueryStore, YamlQueryStore
from sheetview.registry.types import (
    ListViewChange,
    ListViewResolution,
    QueryDefinition,
    new_query_id,
)

__all__ = [
    "Confirm",
    "InMemoryQueryStore",
    "ListViewChange",
    "ListViewResolution",
    "QueryDefinition",
    "QueryRegistry",
    "QueryStore",
    "RedisQueryStore",
    "YamlQueryStore",
    "new_query_id",
]
