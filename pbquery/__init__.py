"""
pbquery: chainable builder for PocketBase filter expressions.

    >>> from pbquery import query
    >>> query().greater_than("age", "18").and_().equal("active", True).build()
    'age>"18" && active=true'
"""

from __future__ import annotations

from .exceptions import (
    PBQueryError,
    RecordShapeError,
    UnknownFieldError,
    UnknownOperatorError,
    UsageError,
)
from .filters import QueryBuilder, format_condition, is_valid_value, query
from .normalize import is_normalized, normalize
from .operators import CONNECTIVES, Operator

__version__ = "0.5.0"

__all__ = [
    "CONNECTIVES",
    "Operator",
    "PBQueryError",
    "QueryBuilder",
    "RecordShapeError",
    "UnknownFieldError",
    "UnknownOperatorError",
    "UsageError",
    "__version__",
    "format_condition",
    "is_normalized",
    "is_valid_value",
    "normalize",
    "query",
]
