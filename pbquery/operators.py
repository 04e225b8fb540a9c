"""
Comparison operators of the PocketBase filter language.

The `ANY_*` variants apply to multi-value fields (relations, select lists, JSON
arrays) and match when at least one element satisfies the comparison.
"""

from __future__ import annotations

from enum import Enum

from .exceptions import UnknownOperatorError

CONNECTIVES = ("&&", "||")


class Operator(Enum):
    """Operator name -> filter symbol."""

    EQUAL = "="
    NOT_EQUAL = "!="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    LIKE = "~"
    NOT_LIKE = "!~"
    ANY_EQUAL = "?="
    ANY_NOT_EQUAL = "?!="
    ANY_GREATER_THAN = "?>"
    ANY_GREATER_THAN_OR_EQUAL = "?>="
    ANY_LESS_THAN = "?<"
    ANY_LESS_THAN_OR_EQUAL = "?<="
    ANY_LIKE = "?~"
    ANY_NOT_LIKE = "?!~"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def method_name(self) -> str:
        """Name of the `QueryBuilder` method emitting this operator."""
        return self.name.lower()

    @property
    def is_any(self) -> bool:
        return self.value.startswith("?")

    @classmethod
    def from_symbol(cls, symbol: str) -> Operator:
        try:
            return cls(symbol)
        except ValueError:
            raise UnknownOperatorError(symbol, supported=(op.value for op in cls)) from None


# Longest first so "?!=" wins over "?!" prefixes when matching text.
SYMBOLS = tuple(sorted((op.value for op in Operator), key=len, reverse=True))
