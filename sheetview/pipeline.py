"""List view pipeline: saved query -> classification -> projection -> scoring.

Produces everything a presentation layer needs to render a schema's rows,
either as a table (consistent structured projections) or as a fallback
list of JSON snippets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from sheetview.consistency import ConsistencyResult, analyze, select_original, select_projected
from sheetview.date_filters import RowFilter
from sheetview.patterns import ClassificationResult, PatternKind, classify
from sheetview.projection import ExpressionEngine, ProjectedRow, project_rows
from sheetview.registry import QueryDefinition, QueryRegistry
from sheetview.rows import Row, RowStore
from sheetview.session import ListViewSession

logger = logging.getLogger(__name__)

PLACEHOLDER = "(error)"


@dataclass
class ListView:
    """Rows of one schema, prepared for display."""

    schema_id: str
    expression: str
    classification: ClassificationResult | None
    rows: list[ProjectedRow]
    consistency: ConsistencyResult
    query: QueryDefinition | None = None
    projected: bool = True

    @property
    def use_table(self) -> bool:
        return self.consistency.can_show_columns

    @property
    def columns(self) -> list[str]:
        return list(self.consistency.columns) if self.use_table else []

    def cells(self, row: ProjectedRow) -> list[Any]:
        """Values for each table column, or placeholders for a failed row."""
        value = row.projected if self.projected else row.original
        if not isinstance(value, dict):
            return [PLACEHOLDER] * len(self.columns)
        return [value.get(column) for column in self.columns]


def _as_record(classification: ClassificationResult, value: Any) -> Any:
    """Key simple-property and property-array results by their column names."""
    if classification.pattern is PatternKind.SIMPLE_PROPERTY:
        return {classification.columns[0]: value}
    if classification.pattern is PatternKind.PROPERTY_ARRAY:
        if isinstance(value, list) and len(value) == len(classification.columns):
            return dict(zip(classification.columns, value))
    return value


class ListViewPipeline:
    """Builds ListViews from a row store and a query registry."""

    def __init__(
        self,
        rows: RowStore,
        registry: QueryRegistry,
        engine: ExpressionEngine | None = None,
    ) -> None:
        self._rows = rows
        self._registry = registry
        self._engine = engine

    async def load(
        self,
        schema_id: str,
        row_filter: RowFilter | None = None,
        expression: str | None = None,
        session: ListViewSession | None = None,
    ) -> ListView:
        """Fetch rows and shape them with ``expression``.

        Without an explicit expression the schema's list view query is
        looked up in the registry on every call.
        """
        query = None
        if expression is None:
            query = await self._registry.get_list_view_query(schema_id)
            expression = query.expression if query else ""
        elif session is not None:
            session.remember(expression)

        rows = await self._rows.list(schema_id, row_filter)
        return self.build(schema_id, rows, expression, query)

    def build(
        self,
        schema_id: str,
        rows: Sequence[Row],
        expression: str,
        query: QueryDefinition | None = None,
    ) -> ListView:
        """Shape already-fetched rows. Pure apart from logging."""
        expression = expression.strip()
        if not expression:
            return self._raw_view(schema_id, rows, expression, None, query)

        classification = classify(expression)
        if not classification.is_valid_list_view:
            logger.info(
                "Expression %r cannot drive a list view: %s",
                expression, classification.reason,
            )
            return self._raw_view(schema_id, rows, expression, classification, query)

        projected = project_rows(rows, classification.row_expression, self._engine)
        for row in projected:
            if not row.failed:
                row.projected = _as_record(classification, row.projected)

        return ListView(
            schema_id=schema_id,
            expression=expression,
            classification=classification,
            rows=projected,
            consistency=analyze(projected, select_projected),
            query=query,
        )

    @staticmethod
    def _raw_view(
        schema_id: str,
        rows: Sequence[Row],
        expression: str,
        classification: ClassificationResult | None,
        query: QueryDefinition | None,
    ) -> ListView:
        raw = [
            ProjectedRow(id=r.id, time=r.time, projected=None, original=r.json)
            for r in rows
        ]
        return ListView(
            schema_id=schema_id,
            expression=expression,
            classification=classification,
            rows=raw,
            consistency=analyze(raw, select_original),
            query=query,
            projected=False,
        )
