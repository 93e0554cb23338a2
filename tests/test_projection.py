"""Tests for the projection adapter over the JMESPath engine."""
# pylint: disable=missing-function-docstring  # test names are self-documenting
# pylint: disable=missing-class-docstring  # test class names are self-documenting

from unittest.mock import MagicMock

import pytest

from sheetview.errors import EvalError
from sheetview.projection import (
    ExpressionEngine,
    JmespathEngine,
    ProjectedRow,
    project,
    project_rows,
)
from sheetview.rows import Row


def _rows(*docs) -> list[Row]:
    return [Row(id=f"r{i}", time=1000 + i, json=doc) for i, doc in enumerate(docs)]


class TestProject:
    def test_multiselect_hash(self):
        doc = {"title": "Bug", "status": "open", "extra": 1}
        assert project(doc, "{title: title, status: status}") == {
            "title": "Bug",
            "status": "open",
        }

    def test_missing_field_is_none(self):
        assert project({"a": 1}, "b") is None

    def test_malformed_expression_raises_eval_error(self):
        with pytest.raises(EvalError) as excinfo:
            project({"a": 1}, "[.{a")
        assert excinfo.value.expression == "[.{a"

    def test_type_error_in_function_raises_eval_error(self):
        with pytest.raises(EvalError):
            project({"a": "text"}, "abs(a)")

    def test_custom_engine(self):
        engine = MagicMock()
        engine.evaluate.return_value = 42
        assert project({"x": 1}, "x", engine) == 42
        engine.evaluate.assert_called_once_with({"x": 1}, "x")

    def test_any_engine_exception_becomes_eval_error(self):
        engine = MagicMock()
        engine.evaluate.side_effect = KeyError("boom")
        with pytest.raises(EvalError):
            project({}, "x", engine)

    def test_jmespath_engine_satisfies_protocol(self):
        assert isinstance(JmespathEngine(), ExpressionEngine)


class TestProjectRows:
    def test_preserves_order_and_metadata(self):
        rows = _rows({"n": 1}, {"n": 2}, {"n": 3})
        result = project_rows(rows, "n")
        assert [r.projected for r in result] == [1, 2, 3]
        assert [r.id for r in result] == ["r0", "r1", "r2"]
        assert [r.time for r in result] == [1000, 1001, 1002]
        assert all(isinstance(r, ProjectedRow) for r in result)

    def test_failure_is_isolated_to_one_row(self):
        rows = _rows({"a": -1}, {"a": "text"}, {"a": 3})
        result = project_rows(rows, "abs(a)")
        assert [r.projected for r in result] == [1, None, 3]
        assert not result[0].failed
        assert result[1].failed
        assert result[1].error
        assert result[1].original == {"a": "text"}

    def test_malformed_expression_fails_every_row(self):
        rows = _rows({"a": 1}, {"a": 2})
        result = project_rows(rows, "{a: ")
        assert all(r.failed and r.projected is None for r in result)
        assert [r.original for r in result] == [{"a": 1}, {"a": 2}]

    def test_empty_batch(self):
        assert project_rows([], "a") == []
