"""Model of the search result table: columns, cells, sorting and menus."""

from __future__ import annotations

from .item import ColSort, Column, Something

FIXED_LEFT = "left"
OPEN_FILE = "open_system_file"
OPEN_FOLDER = "open_system_folder"
PLACEHOLDER = "--"

_WIDTHS = (45.0, 300.0, 600.0, 80.0, 120.0)
_DEFAULT_WIDTH = 100.0

_KB = 1024.0
_MB = _KB * 1024.0
_GB = _MB * 1024.0


def format_size(size: float) -> str:
    """Format a byte count with a binary unit."""
    if size >= _GB:
        return f"{size / _GB:.1f} GB"
    if size >= _MB:
        return f"{size / _MB:.1f} MB"
    if size >= _KB:
        return f"{size / _KB:.1f} KB"
    return f"{size:.0f} B"


def string_to_bool(text: str) -> bool | None:
    """Return True for 'true', False for 'false' and None otherwise."""
    return {"true": True, "false": False}.get(text)


def _default_columns() -> list[Column]:
    return [
        Column("class", "Kind"),
        Column("name", "Name"),
        Column("path", "Path"),
        Column("size", "Size", ColSort.DEFAULT),
        Column("last_modified_date", "Last Modified", ColSort.DEFAULT),
    ]


class TableModel:
    """Rows of search hits together with the table's column layout."""

    def __init__(self, indexed: bool):
        self.rows: list[Something] = []
        self.columns = _default_columns()
        self.col_order = True
        self.col_sort = True
        self.indexed = indexed

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def loading(self) -> bool:
        """The table shows a loading state until the index is built."""
        return not self.indexed

    def replace(self, rows) -> None:
        """Replace all rows."""
        self.rows = list(rows)

    def column_name(self, index: int) -> str:
        if 0 <= index < len(self.columns):
            return self.columns[index].name
        return PLACEHOLDER

    def column_width(self, index: int) -> float:
        if 0 <= index < len(_WIDTHS):
            return _WIDTHS[index]
        return _DEFAULT_WIDTH

    def column_fixed(self, index: int) -> str | None:
        return FIXED_LEFT if index < 2 else None

    def column_sort(self, index: int) -> ColSort | None:
        if not self.col_sort or not 0 <= index < len(self.columns):
            return None
        return self.columns[index].sort

    def move_column(self, src: int, dst: int) -> None:
        column = self.columns.pop(src)
        self.columns.insert(dst, column)

    def perform_sort(self, index: int, sort: ColSort) -> None:
        """Sort rows by the size or date column; other columns are left alone."""
        if not self.col_sort or not 0 <= index < len(self.columns):
            return
        keys = {
            "size": lambda row: row.size,
            "last_modified_date": lambda row: row.last_modified_date,
        }
        key = keys.get(self.columns[index].id)
        if key is None:
            return
        self.rows.sort(key=key, reverse=sort is ColSort.DESCENDING)

    def cell(self, row: int, col: int) -> str:
        """Return the display text of one cell."""
        item = self.rows[row]
        column_id = self.columns[col].id
        if column_id == "class":
            return item.kind
        if column_id == "name":
            return item.name
        if column_id == "path":
            return item.path
        if column_id == "size":
            return format_size(item.size)
        if column_id == "last_modified_date":
            return item.last_modified_date.isoformat()
        return PLACEHOLDER

    def context_menu(self, row: int) -> list[tuple[str, str] | None]:
        """Return the row's menu entries as (label, action); None is a separator."""
        item = self.rows[row]
        return [
            (item.name, OPEN_FILE),
            None,
            ("Open", OPEN_FILE),
            ("Open Folder", OPEN_FOLDER),
        ]