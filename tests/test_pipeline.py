"""Tests for the list view pipeline wiring registry, projection and scoring."""
# pylint: disable=missing-function-docstring  # test names are self-documenting
# pylint: disable=missing-class-docstring  # test class names are self-documenting
# pylint: disable=redefined-outer-name  # pytest fixture injection pattern

from unittest.mock import AsyncMock

import pytest

from sheetview.date_filters import RowFilter
from sheetview.patterns import PatternKind
from sheetview.pipeline import PLACEHOLDER, ListViewPipeline
from sheetview.session import ListViewSession

SCHEMA = "issues"

ISSUES = [
    {"title": "Crash on start", "status": "open", "priority": "high", "meta": {"owner": "ana"}},
    {"title": "Typo", "status": "closed", "priority": "low", "meta": {"owner": "bo"}},
    {"title": "Slow list", "status": "open", "priority": "medium", "meta": {"owner": "cy"}},
    {"title": "Dark mode", "status": "open", "priority": "low", "meta": {"owner": "di"}},
    {"title": "Export", "status": "closed", "priority": 5, "meta": {"owner": "ed"}},
]


@pytest.fixture
async def loaded_rows(row_store):
    for i, doc in enumerate(ISSUES):
        await row_store.add(SCHEMA, doc, timestamp=1_000 + i)
    return row_store


@pytest.fixture
def pipeline(loaded_rows, registry):
    return ListViewPipeline(loaded_rows, registry)


class TestSavedListView:

    async def test_without_list_view_uses_raw_documents(self, pipeline):
        view = await pipeline.load(SCHEMA)
        assert view.expression == ""
        assert view.classification is None
        assert view.query is None
        assert view.use_table
        assert view.columns == ["title", "status", "priority", "meta"]
        assert view.cells(view.rows[1])[0] == "Typo"

    async def test_uses_registry_list_view(self, pipeline, registry):
        qid = await registry.add(SCHEMA, "Board", "[].{Title: title, State: status}", True)
        view = await pipeline.load(SCHEMA)
        assert view.query.query_id == qid
        assert view.classification.pattern is PatternKind.OBJECT_PROJECTION
        assert view.use_table
        assert view.columns == ["Title", "State"]
        assert view.cells(view.rows[0]) == ["Crash on start", "open"]
        assert view.rows[0].original == ISSUES[0]

    async def test_registry_is_re_read_on_every_load(self, pipeline, registry):
        first = await pipeline.load(SCHEMA)
        assert first.query is None
        qid = await registry.add(SCHEMA, "Board", "[title, status]")
        await registry.set_list_view(qid, AsyncMock(return_value=True))
        second = await pipeline.load(SCHEMA)
        assert second.query.query_id == qid
        assert second.columns == ["title", "status"]


class TestAdHocExpressions:

    async def test_simple_property_is_keyed_by_path(self, pipeline):
        view = await pipeline.load(SCHEMA, expression="meta.owner")
        assert view.use_table
        assert view.columns == ["meta.owner"]
        assert [view.cells(r)[0] for r in view.rows] == ["ana", "bo", "cy", "di", "ed"]

    async def test_property_array_is_zipped_with_columns(self, pipeline):
        view = await pipeline.load(SCHEMA, expression="[title, priority]")
        assert view.rows[4].projected == {"title": "Export", "priority": 5}

    async def test_one_failing_row_gets_placeholder(self, pipeline):
        view = await pipeline.load(
            SCHEMA, expression="[].{title: title, len: length(priority)}"
        )
        # length() rejects the numeric priority of the last issue
        assert view.rows[4].failed
        assert view.use_table  # 4 of 5 rows is exactly the threshold
        assert view.cells(view.rows[4]) == [PLACEHOLDER, PLACEHOLDER]
        assert view.cells(view.rows[0]) == ["Crash on start", 4]

    async def test_invalid_expression_falls_back_to_originals(self, pipeline):
        view = await pipeline.load(SCHEMA, expression="[?status == 'open']")
        assert not view.classification.is_valid_list_view
        assert not view.projected
        assert all(r.projected is None for r in view.rows)
        assert view.use_table
        assert view.cells(view.rows[0])[0] == "Crash on start"

    async def test_explicit_empty_expression_skips_registry(self, pipeline, registry):
        await registry.add(SCHEMA, "Board", "[].{t: title}", True)
        view = await pipeline.load(SCHEMA, expression="")
        assert view.query is None
        assert view.classification is None

    async def test_session_remembers_expression(self, pipeline):
        session = ListViewSession(SCHEMA)
        await pipeline.load(SCHEMA, expression="  status ", session=session)
        assert session.last_expression == "status"
        session.reset()
        assert session.last_expression == ""


class TestRowFilter:

    async def test_filter_limits_rows(self, pipeline):
        view = await pipeline.load(SCHEMA, row_filter=RowFilter(gte=1_001, lte=1_003))
        assert [r.time for r in view.rows] == [1_001, 1_002, 1_003]

    async def test_no_rows(self, pipeline):
        view = await pipeline.load(SCHEMA, row_filter=RowFilter(gte=5_000))
        assert view.rows == []
        assert not view.use_table
        assert view.consistency.reason == "No data to analyze"
        assert view.columns == []

    async def test_query_keeps_matching_documents(self, pipeline):
        view = await pipeline.load(SCHEMA, row_filter=RowFilter(query="[?status == 'open']"))
        assert [r.original["title"] for r in view.rows] == [
            "Crash on start",
            "Slow list",
            "Dark mode",
        ]

    async def test_query_combines_with_date_bounds(self, loaded_rows):
        rows = await loaded_rows.list(
            SCHEMA, RowFilter(gte=1_002, query="[?status == 'closed']")
        )
        assert [r.json["title"] for r in rows] == ["Export"]

    async def test_rejected_query_matches_nothing(self, loaded_rows):
        assert await loaded_rows.list(SCHEMA, RowFilter(query="[?status ==")) == []
