"""
Query Builder

Turns optional request criteria into a single SQLAlchemy predicate. Every
value a caller supplies ends up as a bound parameter; nothing is pasted
into the statement text.

Criteria are ANDed. A criterion whose value is missing or an empty string
adds no clause, so a builder with no criteria yields a bare ``true``.

List columns (authors, genres) support two kinds of match:

- ``contains``: case-insensitive substring of at least one element
- ``equals``: exact membership of the value in the list
"""
import math
import re
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import String, and_, any_, func, literal, or_, select, true
from sqlalchemy.sql.elements import ColumnElement

from app.database import INTEGER_MAX, INTEGER_MIN, StringList
from app.errors import InvalidQuery

LIKE_ESCAPE = "\\"
_INTEGER = re.compile(r"-?[0-9]+")


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _like_pattern(value: str) -> str:
    escaped = (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def parse_price(raw: Optional[str], name: str) -> Optional[float]:
    """Parse a price bound; blank means no bound."""
    if _is_blank(raw):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise InvalidQuery(f"{name} must be a number")
    if math.isnan(value) or math.isinf(value):
        raise InvalidQuery(f"{name} must be a finite number")
    return value


def parse_int(raw: Optional[str], name: str) -> int:
    """Parse a plain base-10 integer, optionally negative."""
    text = "" if raw is None else str(raw).strip()
    if not _INTEGER.fullmatch(text):
        raise InvalidQuery(f"{name} must be an integer")
    negative = text.startswith("-")
    if len(text.lstrip("-").lstrip("0")) > len(str(INTEGER_MAX)):
        # Clamp just outside the store range rather than converting huge digit strings.
        return INTEGER_MIN - 1 if negative else INTEGER_MAX + 1
    return int(text)


def parse_positive_int(raw: Optional[str], name: str, default: Optional[int] = None) -> int:
    if _is_blank(raw):
        if default is None:
            raise InvalidQuery(f"{name} is required")
        return default
    value = parse_int(raw, name)
    if value < 1:
        raise InvalidQuery(f"{name} must be at least 1")
    if value > INTEGER_MAX:
        raise InvalidQuery(f"{name} is too large")
    return value


@dataclass(frozen=True)
class PaginationWindow:
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def parse(cls, page: Optional[str], limit: Optional[str]) -> "PaginationWindow":
        window = cls(
            page=parse_positive_int(page, "page", default=cls.page),
            limit=parse_positive_int(limit, "limit", default=cls.limit),
        )
        if window.offset > INTEGER_MAX:
            raise InvalidQuery("page is too large")
        return window

    def apply(self, stmt):
        return stmt.limit(self.limit).offset(self.offset)


class QueryBuilder:
    """Collects clauses for one query against ``model``."""

    def __init__(self, model, dialect_name: str):
        self.model = model
        self.dialect_name = dialect_name
        self.clauses: List[ColumnElement] = []

    def _is_list(self, column) -> bool:
        return isinstance(column.type, StringList)

    def _elements(self, column):
        """The list column as a one-column table, correlated to the outer row."""
        if self.dialect_name == "postgresql":
            return func.unnest(column).table_valued("value").render_derived()
        return func.json_each(column).table_valued("value")

    def _contains(self, column, value: str) -> ColumnElement:
        pattern = _like_pattern(value)
        if not self._is_list(column):
            return column.ilike(pattern, escape=LIKE_ESCAPE)
        elements = self._elements(column)
        return select(elements.c.value).where(elements.c.value.ilike(pattern, escape=LIKE_ESCAPE)).exists()

    def _equals(self, column, value: str) -> ColumnElement:
        if not self._is_list(column):
            return column == value
        if self.dialect_name == "postgresql":
            return literal(value, String) == any_(column)
        elements = self._elements(column)
        return select(elements.c.value).where(elements.c.value == value).exists()

    def contains(self, column, value: Optional[str]) -> "QueryBuilder":
        if not _is_blank(value):
            self.clauses.append(self._contains(column, value))
        return self

    def contains_any(self, columns, value: Optional[str]) -> "QueryBuilder":
        """Substring match against any of ``columns``."""
        if not _is_blank(value):
            self.clauses.append(or_(*(self._contains(column, value) for column in columns)))
        return self

    def equals(self, column, value: Optional[str]) -> "QueryBuilder":
        if not _is_blank(value):
            self.clauses.append(self._equals(column, value))
        return self

    def between(self, column, minimum: Optional[str], maximum: Optional[str],
                min_name: str = "minPrice", max_name: str = "maxPrice") -> "QueryBuilder":
        """Inclusive bounds; either side may be absent."""
        low = parse_price(minimum, min_name)
        high = parse_price(maximum, max_name)
        if low is not None:
            self.clauses.append(column >= low)
        if high is not None:
            self.clauses.append(column <= high)
        return self

    def predicate(self) -> ColumnElement:
        return and_(true(), *self.clauses)

    def statement(self):
        return select(self.model).where(self.predicate())
