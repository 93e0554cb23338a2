"""List view support for JSON sheets: query classification, consistency scoring, saved queries."""

from sheetview.consistency import (
    CONSISTENCY_THRESHOLD,
    ConsistencyResult,
    analyze,
    select_json,
    select_original,
    select_projected,
)
from sheetview.date_filters import RowFilter, custom_range, format_date_range, get_date_ranges
from sheetview.errors import BackingStoreError, EvalError, QueryNotFoundError
from sheetview.patterns import ClassificationResult, ColumnDetail, PatternKind, classify
from sheetview.pipeline import PLACEHOLDER, ListView, ListViewPipeline
from sheetview.projection import (
    ExpressionEngine,
    JmespathEngine,
    ProjectedRow,
    project,
    project_rows,
)
from sheetview.registry import (
    InMemoryQueryStore,
    ListViewChange,
    ListViewResolution,
    QueryDefinition,
    QueryRegistry,
    QueryStore,
    RedisQueryStore,
    YamlQueryStore,
)
from sheetview.rows import InMemoryRowStore, Row, RowStore
from sheetview.session import ListViewSession

__all__ = [
    "BackingStoreError",
    "CONSISTENCY_THRESHOLD",
    "ClassificationResult",
    "ColumnDetail",
    "ConsistencyResult",
    "EvalError",
    "ExpressionEngine",
    "InMemoryQueryStore",
    "InMemoryRowStore",
    "JmespathEngine",
    "ListView",
    "ListViewChange",
    "ListViewPipeline",
    "ListViewResolution",
    "ListViewSession",
    "PLACEHOLDER",
    "PatternKind",
    "ProjectedRow",
    "QueryDefinition",
    "QueryNotFoundError",
    "QueryRegistry",
    "QueryStore",
    "RedisQueryStore",
    "Row",
    "RowFilter",
    "RowStore",
    "YamlQueryStore",
    "analyze",
    "classify",
    "custom_range",
    "format_date_range",
    "get_date_ranges",
    "project",
    "project_rows",
    "select_json",
    "select_original",
    "select_projected",
]
