"""Saved query registry with the list view exclusivity protocol.

At most one query per schema should be the list view, but the backing
store is written by independent peers without any mutual exclusion, so
the rule is kept best-effort:

- writers clear the previous holder, then flag the new one (two writes);
- readers never trust a cached flag and always re-derive the winner with
  ``resolve_list_view``, which picks the smallest query id when several
  definitions are flagged and logs the duplicates it passed over.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

from sheetview.errors import QueryNotFoundError
from sheetview.patterns import classify
from sheetview.registry.store import QueryStore
from sheetview.registry.types import (
    ListViewChange,
    ListViewResolution,
    QueryDefinition,
    new_query_id,
)

logger = logging.getLogger(__name__)

Confirm = Callable[[str], Awaitable[bool]]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValueError("Query name is required")
    return name


class QueryRegistry:
    """CRUD over saved queries for any number of schemas.

    Registries are cheap; several may share one store, each acting as an
    independent writer.
    """

    def __init__(self, store: QueryStore) -> None:
        self._store = store

    # -- CRUD --

    async def add(
        self, schema_id: str, name: str, expression: str, list_view: bool = False
    ) -> str:
        """Save a new query and return its id."""
        definition = QueryDefinition(
            query_id=new_query_id(),
            schema_id=schema_id,
            name=_require_name(name),
            expression=expression.strip(),
            list_view=list_view,
            updated_at=_now(),
        )
        await self._store.put(definition)
        logger.info(
            "Added query %s (%r) to schema %s%s",
            definition.query_id, definition.name, schema_id,
            " as list view" if list_view else "",
        )
        return definition.query_id

    async def update(
        self, query_id: str, name: str, expression: str, list_view: bool
    ) -> QueryDefinition:
        """Overwrite every field of an existing query.

        Raises QueryNotFoundError if the query does not exist (for example
        because another writer removed it).
        """
        existing = await self._store.get(query_id)
        if existing is None:
            raise QueryNotFoundError(query_id)
        definition = QueryDefinition(
            query_id=query_id,
            schema_id=existing.schema_id,
            name=_require_name(name),
            expression=expression.strip(),
            list_view=list_view,
            updated_at=_now(),
        )
        await self._store.put(definition)
        logger.info("Updated query %s (%r)", query_id, definition.name)
        return definition

    async def remove(self, query_id: str) -> bool:
        """Delete a query. Returns False if it was already gone."""
        removed = await self._store.delete(query_id)
        if removed:
            logger.info("Removed query %s", query_id)
        else:
            logger.debug("Query %s already removed", query_id)
        return removed

    async def get(self, query_id: str) -> QueryDefinition | None:
        return await self._store.get(query_id)

    async def list(self, schema_id: str) -> list[QueryDefinition]:
        """All saved queries for a schema, in store order."""
        return await self._store.list(schema_id)

    # -- list view --

    async def resolve_list_view(self, schema_id: str) -> ListViewResolution:
        """Find the schema's list view query, tolerating duplicate flags."""
        flagged = sorted(
            (q for q in await self.list(schema_id) if q.list_view),
            key=lambda q: q.query_id,
        )
        if not flagged:
            return ListViewResolution(schema_id=schema_id)

        winner, *discarded = flagged
        if discarded:
            logger.warning(
                "Schema %s has %d list view queries; using %s (%r), ignoring %s",
                schema_id,
                len(flagged),
                winner.query_id,
                winner.name,
                ", ".join(f"{q.query_id} ({q.name!r})" for q in discarded),
            )
        return ListViewResolution(schema_id=schema_id, query=winner, discarded=discarded)

    async def get_list_view_query(self, schema_id: str) -> QueryDefinition | None:
        """The query that drives the schema's default table, if any."""
        return (await self.resolve_list_view(schema_id)).query

    async def set_list_view(self, query_id: str, confirm: Confirm) -> ListViewChange:
        """Make ``query_id`` the list view of its schema.

        ``confirm`` is asked before flagging an expression that cannot name
        table columns, and before replacing other flagged queries. Declining
        either leaves the store untouched. The clear and set steps are
        separate writes, so a crash or a concurrent writer can leave zero or
        several flagged queries behind.
        """
        candidate = await self._store.get(query_id)
        if candidate is None:
            raise QueryNotFoundError(query_id)

        classification = classify(candidate.expression)
        if not classification.is_valid_list_view:
            proceed = await confirm(
                f"Query {candidate.name!r} is not a valid list view "
                f"({classification.reason}). Use it as the list view anyway?"
            )
            if not proceed:
                return ListViewChange(applied=False, classification=classification)

        resolution = await self.resolve_list_view(candidate.schema_id)
        others = [q for q in resolution.flagged if q.query_id != query_id]
        if others:
            names = ", ".join(repr(q.name) for q in others)
            proceed = await confirm(
                f"{names} is currently the list view. Replace it with {candidate.name!r}?"
            )
            if not proceed:
                return ListViewChange(applied=False, classification=classification)

        cleared = []
        for other in others:
            try:
                cleared.append(
                    await self.update(other.query_id, other.name, other.expression, False)
                )
            except QueryNotFoundError:
                logger.info("List view query %s vanished before it was cleared", other.query_id)

        if candidate.list_view:
            updated = candidate
        else:
            updated = await self.update(
                query_id, candidate.name, candidate.expression, True
            )
        return ListViewChange(
            applied=True,
            classification=classification,
            query=updated,
            cleared=cleared,
        )

    async def clear_list_view(self, query_id: str) -> QueryDefinition:
        """Unflag a query. Raises QueryNotFoundError if it does not exist."""
        existing = await self._store.get(query_id)
        if existing is None:
            raise QueryNotFoundError(query_id)
        if not existing.list_view:
            return existing
        return await self.update(query_id, existing.name, existing.expression, False)
