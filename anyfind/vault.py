"""Persistent key/value settings store backed by SQLite."""

from __future__ import annotations

import json
import logging
import shutil
import sqlite3
import threading
import time
from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path

import platformdirs

APP_NAME = "Anything"
DB_FILE_NAME = "anything.db"
INDEX_DIR_NAME = "index"
TABLE_NAME = "anything"
VERSION = "0.1.0"

log = logging.getLogger(__name__)


class Vault:
    """A small string-to-string store kept in a single database file."""

    def __init__(self, config_file, index_path):
        self.config_file = str(config_file)
        self.index_path = str(index_path)
        Path(self.index_path).mkdir(parents=True, exist_ok=True)
        Path(self.config_file).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.config_file, check_same_thread=False)
        with self._conn:
            self._conn.execute(
                f"CREATE TABLE IF NOT EXISTS {TABLE_NAME} "
                "(key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )

    def get(self, key: str) -> str:
        """Return the value stored under ``key``; raise KeyError if absent."""
        with self._lock:
            row = self._conn.execute(
                f"SELECT value FROM {TABLE_NAME} WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            raise KeyError(f"Key '{key}' not found")
        return row[0]

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        self.batch_set([(key, value)])

    def batch_set(self, pairs: Iterable[tuple[str, str]]) -> None:
        """Store several key/value pairs in one transaction."""
        items = [(key, str(value)) for key, value in pairs]
        with self._lock, self._conn:
            self._conn.executemany(
                f"INSERT OR REPLACE INTO {TABLE_NAME} (key, value) VALUES (?, ?)",
                items,
            )

    def list_all(self) -> list[tuple[str, str]]:
        """Return every entry, ordered by key."""
        with self._lock:
            rows = self._conn.execute(
                f"SELECT key, value FROM {TABLE_NAME} ORDER BY key"
            ).fetchall()
        return [(key, value) for key, value in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> Vault:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def get_directories() -> tuple[str, str, str]:
    """Return (database file, index directory, configuration directory)."""
    config_dir = Path(platformdirs.user_config_dir(APP_NAME, appauthor=False))
    return (
        str(config_dir / DB_FILE_NAME),
        str(config_dir / INDEX_DIR_NAME),
        str(config_dir),
    )


@lru_cache(maxsize=None)
def default_vault() -> Vault:
    """Return the process-wide vault in the user's configuration directory."""
    config_file, index_path, _ = get_directories()
    return Vault(config_file, index_path)


def init_vault(vault: Vault) -> None:
    """Fill ``vault`` with default settings unless it already holds them."""
    try:
        vault.get("config_file")
    except KeyError:
        log.info("Vault not initialized, creating new vault in %s", vault.config_file)
        init_config(vault)
    else:
        log.info("Vault already initialized")


def init_config(vault: Vault) -> None:
    """Write the default settings into ``vault``."""
    home_dir = str(Path.home())
    music_dir = platformdirs.user_music_dir()
    picture_dir = platformdirs.user_pictures_dir()
    _, _, config_path = get_directories()
    exclude = [
        "/System",
        "/bin",
        "/dev",
        "/sbin",
        "/lib",
        "/private",
        "/.VolumeIcon.icns",
        music_dir,
        picture_dir,
        config_path,
    ]
    vault.batch_set(
        [
            ("home_dir", home_dir),
            ("config_file", vault.config_file),
            ("index_path", vault.index_path),
            ("indexed", "false"),
            ("last_indexed", str(int(time.time()))),
            ("refresh", "false"),
            ("default_include_path", "/"),
            ("indexed_files", "0"),
            ("indexed_progress", "0.0"),
            ("version", VERSION),
            ("default_exclude_path", json.dumps(exclude)),
        ]
    )


def cleanup(path) -> None:
    """Remove the directory tree at ``path`` if it exists."""
    target = Path(path)
    if target.exists():
        shutil.rmtree(target)
        log.debug("Removed directory: %s", target)