"""
Record shapes: the set of field names a builder accepts.

A record shape is whatever the caller already uses to describe a collection
record: a pydantic model, a dataclass, a TypedDict (or any annotated class), or
a plain iterable of names.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from .exceptions import RecordShapeError, UnknownFieldError

# Every PocketBase record carries these, whatever the collection schema says.
SYSTEM_FIELDS = frozenset({"id", "created", "updated", "collectionId", "collectionName"})

_PATH_SEPARATOR = re.compile(r"[.:]")


def field_names(record: Any) -> frozenset[str]:
    """Resolve a record shape to the field names it declares."""
    if isinstance(record, type) and issubclass(record, BaseModel):
        names: set[str] = set()
        for name, info in record.model_fields.items():
            names.add(name)
            if info.alias:
                names.add(info.alias)
        return frozenset(names)
    if isinstance(record, type) and dataclasses.is_dataclass(record):
        return frozenset(f.name for f in dataclasses.fields(record))
    if isinstance(record, type):
        names = set()
        for klass in record.__mro__:
            names.update(getattr(klass, "__annotations__", {}))
        if not names:
            raise RecordShapeError(f"{record.__name__} declares no annotated fields")
        return frozenset(names)
    if isinstance(record, str):
        raise RecordShapeError("Record shape must be a type or an iterable of names, not a str")
    if isinstance(record, Iterable):
        names = set()
        for item in record:
            if not isinstance(item, str):
                raise RecordShapeError(f"Field names must be strings, got {item!r}")
            names.add(item)
        return frozenset(names)
    raise RecordShapeError(f"Cannot read field names from {record!r}")


def root_field(field: str) -> str:
    """`author.name` -> `author`; `tags:length` -> `tags`."""
    return _PATH_SEPARATOR.split(field, maxsplit=1)[0]


class FieldConstraint:
    """Runtime check that a field name belongs to a record shape."""

    def __init__(self, record: Any = None):
        self.record = record
        self.allowed: frozenset[str] | None = None
        if record is not None:
            self.allowed = field_names(record) | SYSTEM_FIELDS

    def check(self, field: str) -> str:
        if self.allowed is None or field.startswith("@"):
            return field
        if root_field(field) not in self.allowed:
            raise UnknownFieldError(field, self.allowed)
        return field
