"""Structural consistency scoring: can a batch of results be shown as a table?

A batch is table-worthy when at least 80% of its rows are objects with the
same key set as the first structured row. The denominator counts every
row, so failed or scalar projections drag the ratio down.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

CONSISTENCY_THRESHOLD = 0.8

NO_DATA = "No data to analyze"
NOT_STRUCTURED = "Query results are not structured objects"
NO_COLUMNS = "No columns found in structured data"


@dataclass(frozen=True)
class ConsistencyResult:
    """Showability verdict for a batch of rows."""

    can_show_columns: bool
    columns: list[str] = field(default_factory=list)
    reason: str | None = None
    ratio: float = 0.0


def select_projected(row: Any) -> Any:
    """Selector for ProjectedRow batches."""
    return row.projected


def select_original(row: Any) -> Any:
    """Selector for the untouched document of a ProjectedRow."""
    return row.original


def select_json(row: Any) -> Any:
    """Selector for raw Row batches."""
    return row.json


def _is_structured(value: Any) -> bool:
    return isinstance(value, dict) and len(value) > 0


def _percent(ratio: float) -> int:
    # half-up, not banker's rounding
    return math.floor(ratio * 100 + 0.5)


def analyze(
    rows: Sequence[Any], value_selector: Callable[[Any], Any]
) -> ConsistencyResult:
    """Score ``rows`` by the values ``value_selector`` picks out of them."""
    if not rows:
        return ConsistencyResult(can_show_columns=False, reason=NO_DATA)

    values = [value_selector(row) for row in rows]
    sample = next((v for v in values if _is_structured(v)), None)
    if sample is None:
        return ConsistencyResult(can_show_columns=False, reason=NOT_STRUCTURED)

    columns = list(sample.keys())
    if not columns:
        return ConsistencyResult(can_show_columns=False, reason=NO_COLUMNS)

    expected = set(columns)
    consistent = sum(
        1
        for v in values
        if isinstance(v, dict) and len(v) == len(columns) and set(v) == expected
    )
    ratio = consistent / len(rows)

    if ratio < CONSISTENCY_THRESHOLD:
        return ConsistencyResult(
            can_show_columns=False,
            reason=f"Only {_percent(ratio)}% of rows have consistent structure",
            ratio=ratio,
        )
    return ConsistencyResult(can_show_columns=True, columns=columns, ratio=ratio)
