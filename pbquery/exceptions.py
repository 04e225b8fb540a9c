"""
Exceptions raised by pbquery.

Absent filter values are never errors; they are dropped from the expression.
These exceptions cover caller mistakes: a field the record shape does not
declare, an operator symbol outside the filter language, a record shape that
cannot be turned into field names, or bad command line input.

Every error carries what the command line needs to report it (`exit_code`,
`error_type`, an optional `hint` and structured `details`), so the CLI maps
them without knowing each subclass.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class PBQueryError(Exception):
    """Base class for all pbquery errors."""

    exit_code: int = 2
    error_type: str = "usage_error"

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    @property
    def details(self) -> dict[str, Any] | None:
        return None


class UnknownFieldError(PBQueryError, ValueError):
    """A field name is not declared by the builder's record shape."""

    def __init__(self, field: str, allowed: Iterable[str]) -> None:
        self.field = field
        self.allowed = frozenset(allowed)
        preview = ", ".join(sorted(self.allowed)[:10])
        super().__init__(f"Unknown field {field!r} (allowed: {preview})")

    @property
    def details(self) -> dict[str, Any]:
        return {"field": self.field, "allowed": sorted(self.allowed)}


class UnknownOperatorError(PBQueryError, ValueError):
    """An operator symbol is not part of the filter language."""

    def __init__(self, symbol: str, *, supported: Iterable[str] = ()) -> None:
        self.symbol = symbol
        supported = list(supported)
        hint = f"Supported operators: {' '.join(supported)}" if supported else None
        super().__init__(f"Unknown filter operator {symbol!r}", hint=hint)

    @property
    def details(self) -> dict[str, Any]:
        return {"symbol": self.symbol}


class RecordShapeError(PBQueryError, TypeError):
    """The record shape passed to `query()` has no readable field names."""


class UsageError(PBQueryError):
    """Command line input that cannot be turned into a filter, e.g. no text at all."""
