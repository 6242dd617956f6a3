"""Host‑independent table schema types.

A :class:`TableDefinition` is the ``(name, schema, handler)`` triple handed to
whatever registration API the host exposes.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional

Row = dict[str, str]
QueryContext = Optional[Mapping[str, Any]]


class ColumnType(str, Enum):
    TEXT = "TEXT"
    INTEGER = "INTEGER"


@dataclass(frozen=True)
class Column:
    name: str
    type: ColumnType = ColumnType.TEXT


@dataclass(frozen=True)
class TableDefinition:
    """One table exposed to the host.

    ``generate`` receives the host's query context (predicate hints are
    ignored, every call is a full scan) and returns the complete row list.
    """

    name: str
    columns: tuple[Column, ...]
    generate: Callable[[QueryContext], list[Row]]

    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]
