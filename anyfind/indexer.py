"""Indexing service: fills the file index, answers searches, tracks progress."""

from __future__ import annotations

import json
import logging
import os
import queue
import threading
import time
from datetime import date, datetime, timezone

from .engine import FileIndex, get_files, get_subfolders
from .item import Something
from .vault import VERSION, Vault

REINDEX_AFTER_SECONDS = 15 * 24 * 60 * 60
PROGRESS_EVERY = 20_000

_RESET_ENTRIES = (
    ("indexed", "false"),
    ("refresh", "false"),
    ("indexed_files", "0"),
    ("indexed_progress", "0.0"),
)

log = logging.getLogger(__name__)


def _format_float(value: float) -> str:
    """Format a float without a trailing '.0' for whole numbers."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _last_segment(path: str) -> str:
    """Return the last non-empty '/'-separated part of ``path``, or ''."""
    return next((part for part in reversed(path.split("/")) if part), "")


def _extension(name: str) -> str | None:
    """Return the text after the last dot of ``name``, if it is a real extension."""
    ext = name.rsplit(".", 1)[-1]
    if ext and ext != name:
        return ext
    return None


def _today_utc() -> date:
    return datetime.now(timezone.utc).date()


class Indexer:
    """Keeps a file index in step with the file system and the settings vault."""

    def __init__(self, vault: Vault, index: FileIndex):
        self.vault = vault
        self.index = index

    def index_files(self, path, exclude_paths, count_total: int = 0) -> int:
        """Index everything below ``path``; return the running total of entries."""
        log.debug("begin indexing files from %s", path)
        for entry in get_files(path, exclude_paths):
            count_total += 1
            self.index.add(entry.name, entry.path)
            if count_total % PROGRESS_EVERY == 0:
                self.vault.set("indexed_files", str(count_total))
                log.debug("indexed %d files", count_total)
        self.index.commit()
        self.vault.set("indexed_files", str(count_total))
        log.debug("indexed %d files", count_total)
        return count_total

    def search(self, query: str) -> list[Something]:
        """Search the index and fill each hit with its name, kind, size and date."""
        items = self.index.search(query)
        for item in items:
            name = _last_segment(item.path)
            ext = _extension(name)
            try:
                stat = os.stat(item.path)
            except OSError:
                item.kind = ext or "unknown"
                item.size = 0.0
                item.last_modified_date = _today_utc()
            else:
                is_dir = os.path.isdir(item.path)
                item.kind = ext or ("folder" if is_dir else "file")
                item.size = float(stat.st_size)
                try:
                    modified = datetime.fromtimestamp(int(stat.st_mtime), tz=timezone.utc)
                    item.last_modified_date = modified.date()
                except (OverflowError, OSError, ValueError):
                    item.last_modified_date = _today_utc()
            item.name = name
        return items

    def delete(self, path: str) -> None:
        """Queue removal of ``path`` from the index."""
        self.index.delete(path)

    def add(self, path: str) -> None:
        """Queue ``path`` for indexing under its last path component."""
        name = _last_segment(path)
        if not name:
            raise ValueError(f"path has no file name: {path!r}")
        self.index.add(name, path)

    def commit(self) -> None:
        self.index.commit()

    def list_all(self) -> list[tuple[int, str]]:
        """Return (document id, path) for every committed document."""
        entries = self.index.list_all()
        for doc_id, path in entries:
            log.debug("Document ID %d: %s", doc_id, path)
        return entries

    def num_docs(self) -> int:
        return self.index.num_docs()

    def _reset_index_state(self) -> None:
        self.vault.batch_set(_RESET_ENTRIES)
        for path in {path for _, path in self.index.list_all()}:
            self.index.delete(path)
        self.index.commit()
        log.debug("Cleared index at %s", self.index.directory)

    def indexed_status(self) -> bool:
        """Return True if the stored index is current; otherwise reset it and return False."""
        stored_version = self.vault.get("version")
        current_time = int(time.time())
        last_indexed = int(self.vault.get("last_indexed"))

        if current_time - last_indexed > REINDEX_AFTER_SECONDS:
            self._reset_index_state()
            log.debug("reindexing because the index is older than fifteen days")
            return False

        if stored_version != VERSION:
            self.vault.set("version", VERSION)
            self._reset_index_state()
            log.debug(
                "reindexing due to version change: %s -> %s", VERSION, stored_version
            )
            return False

        if self.vault.get("refresh") == "true":
            self._reset_index_state()
            log.debug("reindexing due to refresh flag being true")
            return False

        if self.vault.get("indexed") == "false":
            self._reset_index_state()
            log.debug("reindexing due to indexed flag being false")
            return False

        log.debug("index is up to date")
        return True

    def init_index(self, root="/") -> None:
        """Build the index from the folders directly under ``root`` unless it is current."""
        if self.indexed_status():
            log.info("index already initialized, skipping")
            return

        start = time.time()
        exclude = json.loads(self.vault.get("default_exclude_path"))
        subfolders = get_subfolders(root)
        log.debug("root_subfolder: %s", subfolders)

        excluded = [path for path in subfolders if path in exclude]
        remaining = [path for path in subfolders if path not in exclude]
        for path in excluded:
            log.debug("skipping path: %s", path)
        exclude = [path for path in exclude if path not in excluded]

        percent = 0.0
        count_total = 0
        for number, path in enumerate(remaining, start=1):
            log.debug("processing path: %s", path)
            count_total = self.index_files(path, exclude, count_total)
            percent = number / len(remaining) * 100.0
            self.vault.set("indexed_progress", _format_float(percent))
        log.debug("completed processing all paths: %.1f%%", percent)

        self.vault.batch_set(
            [
                ("indexed", "true"),
                ("last_indexed", str(int(start))),
                ("indexed_files", str(self.num_docs())),
            ]
        )
        log.info(
            "index initialized successfully in %d seconds", int(time.time() - start)
        )

    def serve(self, requests: queue.Queue, results: queue.Queue) -> None:
        """Answer queries from ``requests`` on ``results`` until a None arrives."""
        for query in iter(requests.get, None):
            try:
                found = self.search(query)
            except ValueError as exc:
                log.error("Failed to search for %r: %s", query, exc)
                found = []
            log.debug("Search results: %d", len(found))
            results.put(found)

    def start_service(self, requests: queue.Queue, results: queue.Queue) -> threading.Thread:
        """Build the index and serve queries on a background thread."""
        log.info("Initializing index service...")

        def run() -> None:
            try:
                self.init_index()
            except Exception:
                log.exception("Failed to initialize index")
                raise
            self.serve(requests, results)

        thread = threading.Thread(target=run, name="index service", daemon=True)
        thread.start()
        return thread