"""Keeps the file index in step with changes under a watched directory."""

from __future__ import annotations

import json
import logging
import os
import queue
import threading
from collections.abc import Iterable

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .indexer import Indexer
from .vault import Vault

BATCH_SIZE = 1000
POLL_SECONDS = 2.0
_EVENT_WAIT_SECONDS = 0.2

log = logging.getLogger(__name__)


class Sentry:
    """Applies file-system changes to the index, committing in batches."""

    def __init__(self, vault: Vault, indexer: Indexer, exclude_paths: Iterable[str]):
        self.vault = vault
        self.indexer = indexer
        self.exclude_paths = list(exclude_paths)
        self.count = 0

    def _excluded(self, path: str) -> bool:
        if any(path.startswith(prefix) for prefix in self.exclude_paths):
            log.debug("index skip: %s", path)
            return True
        return False

    def _record(self) -> None:
        self.count += 1
        if self.count >= BATCH_SIZE:
            self.indexer.commit()
            self.vault.set("indexed_files", str(self.indexer.num_docs()))
            log.debug("commit index batch: %d", self.count)
            self.count = 0

    def on_created(self, path: str) -> bool:
        """Index a newly created entry; return False if the path is excluded."""
        if self._excluded(path):
            return False
        self.indexer.add(path)
        self._record()
        return True

    def on_renamed(self, path: str) -> bool:
        """Add ``path`` if it now exists, otherwise remove it from the index."""
        if self._excluded(path):
            return False
        if os.path.exists(path):
            self.indexer.add(path)
        else:
            self.indexer.delete(path)
        self._record()
        return True

    def on_removed(self, path: str) -> bool:
        """Remove a deleted entry from the index; return False if excluded."""
        if self._excluded(path):
            return False
        self.indexer.delete(path)
        self._record()
        return True


class _QueueHandler(FileSystemEventHandler):
    """Forwards watchdog events to a queue as (kind, path) pairs."""

    def __init__(self, events: queue.Queue):
        super().__init__()
        self._events = events

    def on_created(self, event) -> None:
        self._events.put(("created", os.fsdecode(event.src_path)))

    def on_deleted(self, event) -> None:
        self._events.put(("removed", os.fsdecode(event.src_path)))

    def on_moved(self, event) -> None:
        self._events.put(("renamed", os.fsdecode(event.src_path)))
        self._events.put(("renamed", os.fsdecode(event.dest_path)))


def _is_indexed(vault: Vault) -> bool:
    try:
        return vault.get("indexed") == "true"
    except KeyError:
        return False


def guard(vault: Vault, indexer: Indexer, path, stop: threading.Event | None = None) -> None:
    """Watch ``path`` recursively and apply changes to the index until ``stop`` is set.

    Events are collected from the start but applied only once the initial
    index has been built.
    """
    stop = stop if stop is not None else threading.Event()
    events: queue.Queue = queue.Queue()
    observer = Observer()
    observer.schedule(_QueueHandler(events), os.fspath(path), recursive=True)
    observer.start()
    try:
        exclude = json.loads(vault.get("default_exclude_path"))
        sentry = Sentry(vault, indexer, exclude)
        handlers = {
            "created": sentry.on_created,
            "renamed": sentry.on_renamed,
            "removed": sentry.on_removed,
        }

        while not stop.is_set():
            if _is_indexed(vault):
                log.debug("indexing complete, starting file monitoring")
                break
            log.debug("waiting for indexing to complete")
            stop.wait(POLL_SECONDS)

        while not stop.is_set():
            try:
                kind, event_path = events.get(timeout=_EVENT_WAIT_SECONDS)
            except queue.Empty:
                continue
            handlers[kind](event_path)
    finally:
        observer.stop()
        observer.join()


def init_service(vault: Vault, indexer: Indexer) -> tuple[threading.Thread, threading.Event]:
    """Start watching the configured include path on a background thread.

    Returns the thread and the event that stops it.
    """
    stop = threading.Event()

    def run() -> None:
        try:
            guard(vault, indexer, vault.get("default_include_path"), stop)
        except Exception as exc:
            log.warning("guard error: %r", exc)

    thread = threading.Thread(target=run, name="sentry service", daemon=True)
    thread.start()
    return thread, stop