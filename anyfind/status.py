"""Status line: indexed file count, indexing progress and reindex requests."""

from __future__ import annotations

import logging
import sys

from .vault import Vault

INITIAL_PROGRESS = 65.0
COMPLETE = 100.0

log = logging.getLogger(__name__)


def format_progress(value: float) -> str:
    """Format a progress percentage: '100' when complete, two decimals otherwise."""
    if value == COMPLETE:
        return "100"
    return f"{value:.2f}"


class StatusBar:
    """Shows how many files are indexed and how far indexing has come."""

    def __init__(self, vault: Vault):
        self.vault = vault
        self.progress_value = INITIAL_PROGRESS
        self.index_files_count = ""
        log.debug("title bar created")

    @property
    def complete(self) -> bool:
        return self.progress_value == COMPLETE

    def refresh(self) -> None:
        """Reload the file count and progress from the vault."""
        log.debug("the value of indexed files accessed by ui: %s", self.index_files_count)
        count = self.vault.get("indexed_files")
        progress = float(self.vault.get("indexed_progress"))
        self.index_files_count = count
        self.progress_value = progress
        log.debug("indexed files: %s", self.index_files_count)

    def render(self) -> str:
        """Return the status line as text."""
        state = "watching" if self.complete else "indexing"
        return (
            f"Indexed Files: {self.index_files_count} "
            f"• {format_progress(self.progress_value)}% ({state})"
        )

    def request_reindex(self) -> list[str]:
        """Flag the index for rebuilding; return the command that restarts the program."""
        self.vault.set("refresh", "true")
        log.debug("refresh requested")
        return [sys.executable, *sys.argv]