"""Typed failures raised across the list-view core.

Classification problems are never raised; they come back as a reason
string on the ClassificationResult. Only evaluation and storage failures
are exceptions.
"""

from __future__ import annotations


class EvalError(Exception):
    """The expression engine rejected an expression for one document."""

    def __init__(self, expression: str, message: str) -> None:
        super().__init__(f"Failed to evaluate {expression!r}: {message}")
        self.expression = expression
        self.message = message


class BackingStoreError(RuntimeError):
    """A query store read or write failed."""


class QueryNotFoundError(BackingStoreError):
    """The query id does not exist in the backing store."""

    def __init__(self, query_id: str) -> None:
        super().__init__(f"Query {query_id!r} not found")
        self.query_id = query_id
