"""
Filter builder for PocketBase-style filter expressions.

Builds `field op value` conditions joined by `&&` / `||` with explicit bracket
grouping. Optional search parameters can be wired straight into the builder:
a condition whose value is `None` or `""` is silently left out, and whatever
connectives or brackets it strands are cleaned up by `build()`.

Example:
    from pbquery import query

    q = query(Note)
    filter = (
        q.open_bracket()
        .like("title", search)
        .or_()
        .like("content", search)
        .or_()
        .like("tags", tag_id)  # dropped when tag_id == ""
        .close_bracket()
        .and_()
        .not_equal("notebook", trash_id)
        .build()
    )
    # '(title~"fo " || content~"fo ") && notebook!="6z3w9jjsbag070z"'

Values are wrapped in double quotes verbatim. Embedded `"` or `\\` characters
are NOT escaped; use `custom_filter()` with your own literal if you need them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Generic, TypeVar

from .fields import FieldConstraint
from .normalize import normalize
from .operators import Operator

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")

_AND = " && "
_OR = " || "


def is_valid_value(value: Any) -> bool:
    """Booleans always count; `None` and `""` never do."""
    if isinstance(value, bool):
        return True
    return value is not None and value != ""


def _format_literal(value: Any) -> str:
    """Format a Python value as a filter literal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    # Handle datetime before date (datetime is subclass of date)
    if isinstance(value, datetime):
        text = value.isoformat(sep=" ")
    elif isinstance(value, date):
        text = value.isoformat()
    else:
        text = value if isinstance(value, str) else str(value)
    return f'"{text}"'


def format_condition(field: str, operator: Operator, value: Any) -> str:
    """Encode one condition, or return `""` when the value is absent."""
    if not is_valid_value(value):
        return ""
    return f"{field}{operator.symbol}{_format_literal(value)}"


class QueryBuilder(Generic[RecordT]):
    """
    Accumulates a filter expression through chained calls.

    Every method except `get_query()` and `build()` returns the builder itself.
    Nothing is validated while building; `build()` normalizes the buffer,
    returns the result and resets the builder for reuse.

    One builder holds one expression under construction. Create a builder per
    logical query with `query()`; builders never share state.
    """

    def __init__(self, record: type[RecordT] | Iterable[str] | None = None):
        self._fields = FieldConstraint(record)
        self._buffer: list[str] = []
        self._last_value: Any = None

    @property
    def last_value(self) -> Any:
        """Raw value of the most recent condition or custom filter (`None` when reset)."""
        return self._last_value

    def _append(self, fragment: str) -> None:
        self._buffer.append(fragment)

    def _add_condition(self, field: str, operator: Operator, value: Any) -> QueryBuilder[RecordT]:
        self._fields.check(field)
        self._last_value = value
        fragment = format_condition(field, operator, value)
        if fragment:
            self._append(fragment)
        else:
            logger.debug(f"Skipping {field}{operator.symbol} condition with empty value")
        return self

    # ------------------------------------------------------------------
    # Conditions
    # ------------------------------------------------------------------

    def where(self, field: str, operator: Operator | str, value: Any) -> QueryBuilder[RecordT]:
        """Add a condition with an operator chosen at runtime (enum or symbol)."""
        if not isinstance(operator, Operator):
            operator = Operator.from_symbol(operator)
        return self._add_condition(field, operator, value)

    def equal(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        """`field="value"`, or `field=true` / `field=false` for booleans."""
        return self._add_condition(field, Operator.EQUAL, value)

    def not_equal(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        """`field!="value"`."""
        return self._add_condition(field, Operator.NOT_EQUAL, value)

    def greater_than(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        """`field>"value"`."""
        return self._add_condition(field, Operator.GREATER_THAN, value)

    def greater_than_or_equal(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        """`field>="value"`."""
        return self._add_condition(field, Operator.GREATER_THAN_OR_EQUAL, value)

    def less_than(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        """`field<"value"`."""
        return self._add_condition(field, Operator.LESS_THAN, value)

    def less_than_or_equal(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        """`field<="value"`."""
        return self._add_condition(field, Operator.LESS_THAN_OR_EQUAL, value)

    def like(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        """`field~"value"` (contains, case-insensitive on the server)."""
        return self._add_condition(field, Operator.LIKE, value)

    def not_like(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        """`field!~"value"`."""
        return self._add_condition(field, Operator.NOT_LIKE, value)

    # Multi-value fields: at least one element must satisfy the comparison.

    def any_equal(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        return self._add_condition(field, Operator.ANY_EQUAL, value)

    def any_not_equal(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        return self._add_condition(field, Operator.ANY_NOT_EQUAL, value)

    def any_greater_than(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        return self._add_condition(field, Operator.ANY_GREATER_THAN, value)

    def any_greater_than_or_equal(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        return self._add_condition(field, Operator.ANY_GREATER_THAN_OR_EQUAL, value)

    def any_less_than(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        return self._add_condition(field, Operator.ANY_LESS_THAN, value)

    def any_less_than_or_equal(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        return self._add_condition(field, Operator.ANY_LESS_THAN_OR_EQUAL, value)

    def any_like(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        return self._add_condition(field, Operator.ANY_LIKE, value)

    def any_not_like(self, field: str, value: Any) -> QueryBuilder[RecordT]:
        return self._add_condition(field, Operator.ANY_NOT_LIKE, value)

    def in_(self, field: str, values: Iterable[Any]) -> QueryBuilder[RecordT]:
        """
        Field matches any of `values`: `field~"a" || field~"b" || ...`.

        Absent values are dropped first. When none are left this is a no-op, so
        no stray connective is emitted.
        """
        self._fields.check(field)
        survivors = [value for value in values if is_valid_value(value)]
        for index, value in enumerate(survivors):
            if index:
                self._append(_OR)
            self._append(format_condition(field, Operator.LIKE, value))
        if survivors:
            self._last_value = survivors[-1]
        return self

    # ------------------------------------------------------------------
    # Connectives and grouping
    # ------------------------------------------------------------------

    def and_(self) -> QueryBuilder[RecordT]:
        """Append ` && `."""
        self._append(_AND)
        self._last_value = None
        return self

    def or_(self) -> QueryBuilder[RecordT]:
        """Append ` || `."""
        self._append(_OR)
        self._last_value = None
        return self

    def open_bracket(self) -> QueryBuilder[RecordT]:
        self._append("(")
        return self

    def close_bracket(self) -> QueryBuilder[RecordT]:
        self._append(")")
        return self

    @contextmanager
    def group(self) -> Iterator[QueryBuilder[RecordT]]:
        """
        Bracket everything added inside the `with` block.

        Example:
            with q.group():
                q.like("title", term).or_().like("content", term)
            q.and_().equal("status", "active")
        """
        self.open_bracket()
        try:
            yield self
        finally:
            self.close_bracket()

    def custom_filter(self, filter: str | None) -> QueryBuilder[RecordT]:
        """
        Append a raw filter fragment verbatim (escape hatch).

        Use this for syntax the builder does not cover, e.g.
        `'created >= @todayStart'`. Empty fragments are ignored.
        """
        self._last_value = filter
        if filter:
            self._append(filter)
        return self

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def get_query(self) -> str:
        """The raw, unnormalized buffer. Does not modify the builder."""
        return "".join(self._buffer)

    def build(self) -> str:
        """Normalize the buffer, reset the builder, and return the filter string."""
        raw = self.get_query()
        self._buffer = []
        self._last_value = None
        return normalize(raw)

    def __str__(self) -> str:
        return self.get_query()

    def __repr__(self) -> str:
        return f"QueryBuilder({self.get_query()!r})"


def query(record: type[RecordT] | Iterable[str] | None = None) -> QueryBuilder[RecordT]:
    """
    Create a new, empty filter builder.

    Args:
        record: Optional record shape restricting field names: a pydantic
            model, a dataclass, a TypedDict / annotated class, or an iterable
            of names. Unknown fields then raise `UnknownFieldError`.
    """
    return QueryBuilder(record)
