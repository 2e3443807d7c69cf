"""Rows and columns of the search result table."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date


class ColSort(enum.Enum):
    """Sort state of a table column."""

    DEFAULT = "default"
    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass
class Something:
    """One search hit: a file or folder."""

    path: str
    name: str = ""
    kind: str = ""
    size: float = 0.0
    last_modified_date: date = field(default_factory=date.today)


@dataclass
class Column:
    """A table column: identifier, display name and optional sort state."""

    id: str
    name: str
    sort: ColSort | None = None