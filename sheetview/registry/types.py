"""Saved query definitions and list view protocol outcomes."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from sheetview.patterns import ClassificationResult


@dataclass(frozen=True)
class QueryDefinition:
    """A named expression saved against a schema."""

    query_id: str
    schema_id: str
    name: str
    expression: str
    list_view: bool = False
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "query_id": self.query_id,
            "schema_id": self.schema_id,
            "name": self.name,
            "expression": self.expression,
            "list_view": self.list_view,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> QueryDefinition:
        return cls(
            query_id=d["query_id"],
            schema_id=d["schema_id"],
            name=d["name"],
            expression=d.get("expression", ""),
            list_view=bool(d.get("list_view", False)),
            updated_at=d.get("updated_at", ""),
        )


@dataclass(frozen=True)
class ListViewResolution:
    """Which flagged definition wins for a schema, and which were passed over.

    ``discarded`` is non-empty only while concurrent writers have left
    more than one definition flagged.
    """

    schema_id: str
    query: QueryDefinition | None = None
    discarded: list[QueryDefinition] = field(default_factory=list)

    @property
    def has_conflict(self) -> bool:
        return bool(self.discarded)

    @property
    def flagged(self) -> list[QueryDefinition]:
        if self.query is None:
            return []
        return [self.query, *self.discarded]


@dataclass(frozen=True)
class ListViewChange:
    """Result of asking the registry to make a query the list view."""

    applied: bool
    classification: ClassificationResult
    query: QueryDefinition | None = None
    cleared: list[QueryDefinition] = field(default_factory=list)


def new_query_id() -> str:
    """Generate an opaque query id."""
    return uuid.uuid4().hex
