"""Apply list view expressions to documents through the JMESPath engine.

A batch never fails as a whole: each document is evaluated on its own and
a failure only turns that row's projection into None.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Iterable, Protocol, runtime_checkable

import jmespath
from jmespath.parser import ParsedResult

from sheetview.errors import EvalError

if TYPE_CHECKING:
    from sheetview.rows import Row

logger = logging.getLogger(__name__)


@runtime_checkable
class ExpressionEngine(Protocol):
    """Evaluates one expression against one JSON document."""

    def evaluate(self, document: Any, expression: str) -> Any: ...


@lru_cache(maxsize=256)
def _compile(expression: str) -> ParsedResult:
    return jmespath.compile(expression)


class JmespathEngine:
    """ExpressionEngine backed by the ``jmespath`` library.

    Compiled expressions are cached, so evaluating the same list view query
    over a batch parses it once.
    """

    def evaluate(self, document: Any, expression: str) -> Any:
        return _compile(expression).search(document)


DEFAULT_ENGINE = JmespathEngine()


@dataclass
class ProjectedRow:
    """A row after projection. ``original`` is kept for fallback display."""

    id: str
    time: int
    projected: Any
    original: Any
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def project(
    document: Any, expression: str, engine: ExpressionEngine | None = None
) -> Any:
    """Evaluate ``expression`` against a single document.

    Raises EvalError when the engine rejects the expression or the document.
    """
    engine = engine or DEFAULT_ENGINE
    try:
        return engine.evaluate(document, expression)
    except EvalError:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught  # any engine failure is scoped to this document
        raise EvalError(expression, str(exc)) from exc


def project_rows(
    rows: Iterable[Row],
    expression: str,
    engine: ExpressionEngine | None = None,
) -> list[ProjectedRow]:
    """Project every row, isolating failures. Output order matches input."""
    results: list[ProjectedRow] = []
    for row in rows:
        try:
            projected = project(row.json, expression, engine)
            error = None
        except EvalError as exc:
            logger.debug("Projection failed for row %s: %s", row.id, exc)
            projected = None
            error = exc.message
        results.append(
            ProjectedRow(
                id=row.id,
                time=row.time,
                projected=projected,
                original=row.json,
                error=error,
            )
        )
    return results
