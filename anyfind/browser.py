"""Search view: sends queries, receives hits and acts on the selected row."""

from __future__ import annotations

import logging
import os
import queue
import subprocess
import sys

from .item import Something
from .table import TableModel, string_to_bool
from .vault import Vault

PLACEHOLDER_TEXT = "file name..."

log = logging.getLogger(__name__)


class NoSelectionError(LookupError):
    """Raised when an action needs a selected row and none is selected."""


def _parse_flag(text: str) -> bool:
    value = string_to_bool(text)
    if value is None:
        raise ValueError(f"not a boolean flag: {text!r}")
    return value


def open_with_system(path) -> subprocess.Popen | None:
    """Open ``path`` with the application the desktop associates with it."""
    target = os.fspath(path)
    if sys.platform.startswith("win"):
        os.startfile(target)  # type: ignore[attr-defined]
        return None
    command = "open" if sys.platform == "darwin" else "xdg-open"
    return subprocess.Popen([command, target])


def reveal_path(path) -> subprocess.Popen:
    """Show ``path`` in the desktop file manager."""
    target = os.fspath(path)
    if sys.platform == "darwin":
        return subprocess.Popen(["open", "-R", target])
    if sys.platform.startswith("win"):
        return subprocess.Popen(["explorer", f"/select,{target}"])
    folder = os.path.dirname(target.rstrip("/")) or target
    return subprocess.Popen(["xdg-open", folder])


def quick_look(path) -> bool:
    """Preview ``path`` with Quick Look; return whether the previewer started."""
    target = os.fspath(path)
    log.debug("Previewing file at path: %s", target)
    try:
        subprocess.Popen(["qlmanage", "-p", target])
    except OSError:
        log.debug("Failed to open file with Quick Look: %s", target)
        return False
    log.debug("File opened successfully: %s", target)
    return True


class SearchView:
    """A query box above a result table, wired to the indexing service by queues."""

    placeholder = PLACEHOLDER_TEXT

    def __init__(self, requests: queue.Queue, results: queue.Queue, vault: Vault):
        self.requests = requests
        self.results = results
        self.vault = vault
        self.table = TableModel(indexed=_parse_flag(vault.get("indexed")))
        self.selected: int | None = None
        log.debug("creating table view")

    def _replace(self, rows) -> None:
        self.table.replace(rows)
        self.selected = None

    def on_query_change(self, text: str) -> None:
        """Send the trimmed query; an empty query clears the table instead."""
        query = text.strip()
        log.debug("query input changed")
        if not query:
            log.debug("empty query")
            self._replace([])
            return
        self.requests.put_nowait(query)
        log.debug("request sent: %s", query)

    def poll_results(self) -> bool:
        """Show the latest batch of results waiting; return whether any arrived."""
        latest: list[Something] | None = None
        while True:
            try:
                latest = self.results.get_nowait()
            except queue.Empty:
                break
        if latest is None:
            return False
        log.debug("received %d results", len(latest))
        self._replace(latest)
        return True

    def poll_indexed(self) -> bool:
        """Refresh the indexed flag from the vault until it becomes true."""
        if not self.table.indexed:
            self.table.indexed = _parse_flag(self.vault.get("indexed"))
            log.debug("indexed status: %s", self.table.indexed)
        return self.table.indexed

    def select(self, row: int | None) -> None:
        """Select a row by index, or clear the selection with None."""
        if row is not None and not 0 <= row < len(self.table):
            raise IndexError(f"row {row} out of range")
        self.selected = row

    def selected_path(self) -> str | None:
        """Return the path of the selected row, if any."""
        if self.selected is None:
            return None
        return self.table.rows[self.selected].path

    def _require_path(self) -> str:
        path = self.selected_path()
        if path is None:
            raise NoSelectionError("no row is selected")
        return path

    def open_selected(self):
        """Open the selected file with the system's default application."""
        return open_with_system(self._require_path())

    def reveal_selected(self):
        """Show the selected file in the file manager."""
        return reveal_path(self._require_path())

    def preview_selected(self) -> bool:
        """Preview the selected file; return False if nothing was previewed."""
        path = self.selected_path()
        if path is None:
            return False
        return quick_look(path)