"""Row model and the row store contract.

Rows live in the replicated sheet store, which is an external
collaborator. ``InMemoryRowStore`` stands in for it locally and in tests.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from sheetview.date_filters import RowFilter
from sheetview.errors import EvalError
from sheetview.projection import project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Row:
    """One stored document. ``time`` is epoch milliseconds."""

    id: str
    time: int
    json: Any


@runtime_checkable
class RowStore(Protocol):
    """Read side of the replicated row store."""

    async def list(
        self, schema_id: str, row_filter: RowFilter | None = None
    ) -> list[Row]: ...


class InMemoryRowStore:
    """Process-local RowStore, ordered by row time."""

    def __init__(self) -> None:
        self._rows: dict[str, list[Row]] = {}

    async def add(
        self, schema_id: str, document: Any, timestamp: int | None = None
    ) -> str:
        """Append a document and return its row id."""
        row = Row(
            id=uuid.uuid4().hex,
            time=timestamp if timestamp is not None else int(time.time() * 1000),
            json=document,
        )
        self._rows.setdefault(schema_id, []).append(row)
        return row.id

    async def list(
        self, schema_id: str, row_filter: RowFilter | None = None
    ) -> list[Row]:
        rows = self._rows.get(schema_id, [])
        if row_filter is not None:
            rows = [r for r in rows if row_filter.matches(r.time)]
            if row_filter.query:
                rows = [r for r in rows if _matches_query(r.json, row_filter.query)]
        return sorted(rows, key=lambda r: r.time)


def _matches_query(document: Any, query: str) -> bool:
    """True when ``query`` over a one-document list yields something.

    Filter expressions such as ``[?status == 'open']`` keep exactly the
    documents they select. A query the engine rejects matches nothing.
    """
    try:
        result = project([document], query)
    except EvalError as exc:
        logger.debug("Row query %r rejected a document: %s", query, exc.message)
        return False
    return bool(result)
