"""List view pattern grammar: classify a JMESPath expression and extract its columns.

Three expression shapes can drive a tabular list view:

    [].{title: title, status: status}   object projection (one column per pair)
    status.code                         simple property path (one column)
    [title, status]                     property array (one column per entry)

Anything else is still a valid JMESPath expression for filtering, but it
cannot name the columns of a table, so it classifies as INVALID with a
human-readable reason. Classification is pure and never raises.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

EMPTY_QUERY = "Empty query"
RECOMMENDATION = (
    "Use an object projection such as [].{title: title, status: status}"
)

_PATH_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*")
_ARRAY_RE = re.compile(r"\[(.*)\]", re.DOTALL)

_PROJECTION_PREFIXES = ("[].{", "[]{")
_QUOTES = frozenset("'\"`")
_OPENERS = frozenset("{[(")
_CLOSERS = {"}": "{", "]": "[", ")": "("}


class PatternKind(str, Enum):
    """Shapes a list view expression can take."""

    OBJECT_PROJECTION = "object_projection"
    SIMPLE_PROPERTY = "simple_property"
    PROPERTY_ARRAY = "property_array"
    INVALID = "invalid"


@dataclass(frozen=True)
class ColumnDetail:
    """One display column: its label and the expression that fills it."""

    key: str
    expression: str


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one expression.

    ``row_expression`` is what to evaluate against a single document. For
    object projections that is the inner multiselect hash, because the
    outer ``[]`` flatten only makes sense over a list of documents.
    """

    is_valid_list_view: bool
    pattern: PatternKind
    columns: list[str] = field(default_factory=list)
    column_details: list[ColumnDetail] = field(default_factory=list)
    reason: str | None = None
    row_expression: str | None = None

    @classmethod
    def invalid(cls, reason: str) -> ClassificationResult:
        return cls(is_valid_list_view=False, pattern=PatternKind.INVALID, reason=reason)

    @classmethod
    def valid(
        cls,
        pattern: PatternKind,
        details: list[ColumnDetail],
        row_expression: str,
    ) -> ClassificationResult:
        return cls(
            is_valid_list_view=True,
            pattern=pattern,
            columns=[d.key for d in details],
            column_details=list(details),
            row_expression=row_expression,
        )


class ProjectionParseError(ValueError):
    """Brace content of an object projection could not be split into pairs."""


# -- object projection scanner --


class _ScanState(Enum):
    IN_KEY = "in_key"
    IN_VALUE = "in_value"
    IN_QUOTE = "in_quote"


class _PairScanner:
    """Splits ``key: expr, key: expr`` into pairs, one character at a time.

    Commas and colons only separate at nesting depth zero outside quotes.
    The first such colon in a pair ends the key; later ones belong to the
    expression.
    """

    def __init__(self, content: str) -> None:
        self._content = content
        self._state = _ScanState.IN_KEY
        self._field = _ScanState.IN_KEY  # field the quote belongs to
        self._quote = ""
        self._escaped = False
        self._depth = {"{": 0, "[": 0, "(": 0}
        self._key: list[str] = []
        self._value: list[str] = []
        self._pairs: list[ColumnDetail] = []

    def scan(self) -> list[ColumnDetail]:
        for ch in self._content:
            if self._state is _ScanState.IN_QUOTE:
                self._read_quoted(ch)
            else:
                self._read(ch)

        if self._state is _ScanState.IN_QUOTE:
            raise ProjectionParseError(f"unterminated {self._quote} quote")
        for opener, depth in self._depth.items():
            if depth:
                raise ProjectionParseError(f"unbalanced '{opener}'")

        self._emit()
        return self._pairs

    def _buffer(self) -> list[str]:
        return self._key if self._field is _ScanState.IN_KEY else self._value

    def _at_top(self) -> bool:
        return not any(self._depth.values())

    def _read_quoted(self, ch: str) -> None:
        self._buffer().append(ch)
        if self._escaped:
            self._escaped = False
        elif ch == "\\":
            self._escaped = True
        elif ch == self._quote:
            self._state = self._field

    def _read(self, ch: str) -> None:
        if ch in _QUOTES:
            self._quote = ch
            self._state = _ScanState.IN_QUOTE
        elif ch in _OPENERS:
            self._depth[ch] += 1
        elif ch in _CLOSERS:
            opener = _CLOSERS[ch]
            if not self._depth[opener]:
                raise ProjectionParseError(f"unexpected '{ch}'")
            self._depth[opener] -= 1
        elif ch == "," and self._at_top():
            self._emit()
            self._field = self._state = _ScanState.IN_KEY
            return
        elif ch == ":" and self._at_top() and self._field is _ScanState.IN_KEY:
            self._field = self._state = _ScanState.IN_VALUE
            return
        self._buffer().append(ch)

    def _emit(self) -> None:
        key = "".join(self._key).strip()
        value = "".join(self._value).strip()
        if key and value:
            self._pairs.append(ColumnDetail(key=_unquote(key), expression=value))
        self._key = []
        self._value = []


def _unquote(key: str) -> str:
    """Strip the double quotes of a JMESPath quoted identifier."""
    if len(key) >= 2 and key[0] == key[-1] == '"':
        return key[1:-1]
    return key


def extract_projection_pairs(content: str) -> list[ColumnDetail]:
    """Split the brace content of an object projection into column pairs.

    Raises ProjectionParseError on unbalanced quotes, braces, brackets or
    parentheses.
    """
    return _PairScanner(content).scan()


def _projection_body(text: str) -> str | None:
    for prefix in _PROJECTION_PREFIXES:
        if text.startswith(prefix) and text.endswith("}"):
            return text[len(prefix):-1]
    return None


def is_simple_path(text: str) -> bool:
    """True for dotted identifier paths such as ``status`` or ``meta.owner``."""
    return _PATH_RE.fullmatch(text) is not None


# -- classification --


def _classify_projection(body: str) -> ClassificationResult:
    try:
        pairs = extract_projection_pairs(body)
    except ProjectionParseError as exc:
        return ClassificationResult.invalid(
            f"Failed to parse object projection: {exc}. {RECOMMENDATION}"
        )
    if not pairs:
        return ClassificationResult.invalid(
            "Failed to parse object projection: no 'key: expression' pairs found. "
            f"{RECOMMENDATION}"
        )
    return ClassificationResult.valid(
        PatternKind.OBJECT_PROJECTION, pairs, "{" + body + "}"
    )


def _classify_property_array(text: str) -> ClassificationResult | None:
    match = _ARRAY_RE.fullmatch(text)
    if match is None:
        return None
    entries = [entry.strip() for entry in match.group(1).split(",")]
    if not all(is_simple_path(entry) for entry in entries):
        return None
    details = [ColumnDetail(key=entry, expression=entry) for entry in entries]
    return ClassificationResult.valid(PatternKind.PROPERTY_ARRAY, details, text)


def classify(text: str | None) -> ClassificationResult:
    """Classify an expression as one of the supported list view shapes."""
    text = (text or "").strip()
    if not text:
        return ClassificationResult.invalid(EMPTY_QUERY)

    body = _projection_body(text)
    if body is not None:
        return _classify_projection(body)

    if is_simple_path(text):
        detail = ColumnDetail(key=text, expression=text)
        return ClassificationResult.valid(PatternKind.SIMPLE_PROPERTY, [detail], text)

    result = _classify_property_array(text)
    if result is not None:
        return result

    return ClassificationResult.invalid(
        f"Query does not match a supported list view pattern. {RECOMMENDATION}"
    )
