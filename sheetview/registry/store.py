"""Backing stores for saved queries.

The production store is replicated across peers with independent writers,
so nothing here offers transactions or locks: every call is a single
read or a single write. ``InMemoryQueryStore`` serves tests and one-off
sessions; ``YamlQueryStore`` persists to a file shared by local writers.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from sheetview.errors import BackingStoreError
from sheetview.registry.types import QueryDefinition

logger = logging.getLogger(__name__)

# A stored entry that is not a mapping, or lacks a required field.
MALFORMED_ENTRY_ERRORS = (ValueError, KeyError, TypeError)


@runtime_checkable
class QueryStore(Protocol):
    """Single-operation access to saved query definitions."""

    async def get(self, query_id: str) -> QueryDefinition | None: ...
    async def put(self, definition: QueryDefinition) -> None: ...
    async def delete(self, query_id: str) -> bool: ...
    async def list(self, schema_id: str) -> list[QueryDefinition]: ...


class InMemoryQueryStore:
    """Process-local QueryStore. Listing follows insertion order."""

    def __init__(self) -> None:
        self._queries: dict[str, QueryDefinition] = {}

    async def get(self, query_id: str) -> QueryDefinition | None:
        return self._queries.get(query_id)

    async def put(self, definition: QueryDefinition) -> None:
        self._queries[definition.query_id] = definition

    async def delete(self, query_id: str) -> bool:
        return self._queries.pop(query_id, None) is not None

    async def list(self, schema_id: str) -> list[QueryDefinition]:
        return [q for q in self._queries.values() if q.schema_id == schema_id]


class YamlQueryStore:
    """QueryStore persisted to a YAML file.

    The file is re-read on every call so writes made by another process
    since the last call are observed. Layout::

        queries:
          <query_id>: {schema_id: ..., name: ..., expression: ..., list_view: ...}
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def get(self, query_id: str) -> QueryDefinition | None:
        entry = self._load().get(query_id)
        if entry is None:
            return None
        try:
            return _from_entry(query_id, entry)
        except MALFORMED_ENTRY_ERRORS as exc:
            raise BackingStoreError(
                f"Malformed query entry {query_id} in {self._path}"
            ) from exc

    async def put(self, definition: QueryDefinition) -> None:
        queries = self._load()
        entry = definition.to_dict()
        del entry["query_id"]
        queries[definition.query_id] = entry
        self._persist(queries)

    async def delete(self, query_id: str) -> bool:
        queries = self._load()
        if queries.pop(query_id, None) is None:
            return False
        self._persist(queries)
        return True

    async def list(self, schema_id: str) -> list[QueryDefinition]:
        definitions = []
        for query_id, entry in self._load().items():
            try:
                definition = _from_entry(query_id, entry)
            except MALFORMED_ENTRY_ERRORS:
                logger.warning("Skipping malformed query entry %s in %s", query_id, self._path)
                continue
            if definition.schema_id == schema_id:
                definitions.append(definition)
        return definitions

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise BackingStoreError(f"Failed to read queries from {self._path}") from exc
        if not isinstance(data, dict) or not isinstance(data.get("queries") or {}, dict):
            raise BackingStoreError(f"Unexpected layout in {self._path}")
        return dict(data.get("queries") or {})

    def _persist(self, queries: dict[str, dict[str, Any]]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w") as f:
                yaml.dump(
                    {"queries": queries}, f, default_flow_style=False, sort_keys=False
                )
        except OSError as exc:
            raise BackingStoreError(f"Failed to write queries to {self._path}") from exc
        logger.debug("Persisted %d queries to %s", len(queries), self._path)


def _from_entry(query_id: str, entry: Any) -> QueryDefinition:
    return QueryDefinition.from_dict({**entry, "query_id": query_id})
