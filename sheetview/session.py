"""Per-operator session context for browsing one schema."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ListViewSession:
    """Remembers the last ad hoc expression so it can be offered as a default.

    One session per schema being browsed; drop or reset it when the
    operator leaves the schema.
    """

    schema_id: str
    last_expression: str = ""

    def remember(self, expression: str) -> None:
        self.last_expression = expression.strip()

    def reset(self) -> None:
        self.last_expression = ""
