"""Full-text index of file names, kept in SQLite, and file-system walking."""

from __future__ import annotations

import logging
import math
import os
import sqlite3
import threading
from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from itertools import groupby
from pathlib import Path

from .item import Something

INDEX_FILE_NAME = "files.sqlite3"
DEFAULT_LIMIT = 100

_K1 = 1.2
_B = 0.75

_CJK_RANGES = (
    (0x3040, 0x30FF),
    (0x3400, 0x4DBF),
    (0x4E00, 0x9FFF),
    (0xF900, 0xFAFF),
    (0x20000, 0x2FA1F),
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS docs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    path TEXT NOT NULL,
    length INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS docs_path ON docs (path);
CREATE TABLE IF NOT EXISTS postings (
    token TEXT NOT NULL,
    doc_id INTEGER NOT NULL,
    position INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS postings_token ON postings (token);
CREATE INDEX IF NOT EXISTS postings_doc ON postings (doc_id);
"""

log = logging.getLogger(__name__)


class QuerySyntaxError(ValueError):
    """Raised when a search query cannot be parsed."""


@dataclass(frozen=True)
class Entry:
    """A file-system entry found while walking a directory tree."""

    name: str
    path: str
    is_dir: bool


def _is_cjk(ch: str) -> bool:
    code = ord(ch)
    return any(low <= code <= high for low, high in _CJK_RANGES)


def _char_class(ch: str) -> bool | None:
    if not ch.isalnum():
        return None
    return _is_cjk(ch)


def tokenize(text: str) -> list[str]:
    """Split ``text`` into index tokens.

    Runs of letters and digits become tokens; runs of CJK ideographs are
    broken into overlapping two-character tokens so that words inside them
    can be found without a dictionary.
    """
    tokens: list[str] = []
    for cjk, group in groupby(text, key=_char_class):
        if cjk is None:
            continue
        segment = "".join(group)
        if cjk and len(segment) > 1:
            tokens.extend(a + b for a, b in zip(segment, segment[1:]))
        else:
            tokens.append(segment)
    return tokens


def _parse_query(query: str) -> list[list[str]]:
    """Return the phrases of ``query``; each phrase is a list of tokens."""
    parts = query.split('"')
    if len(parts) % 2 == 0:
        raise QuerySyntaxError(f"unbalanced quote in query: {query!r}")
    phrases: list[list[str]] = []
    for number, part in enumerate(parts):
        chunks = [part] if number % 2 else part.split()
        for chunk in chunks:
            tokens = tokenize(chunk)
            if tokens:
                phrases.append(tokens)
    return phrases


class FileIndex:
    """A persistent index of file names that can be searched by words.

    Additions and deletions are buffered and become visible on ``commit``.
    """

    def __init__(self, directory):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._pending: list[tuple[str, ...]] = []
        self._conn = sqlite3.connect(
            str(self.directory / INDEX_FILE_NAME), check_same_thread=False
        )
        self._conn.executescript(_SCHEMA)
        log.debug("index opened at %s", self.directory)

    def add(self, name: str, path: str) -> None:
        """Queue a document with the given file name and path."""
        with self._lock:
            self._pending.append(("add", name, path))

    def delete(self, path: str) -> None:
        """Queue removal of every document stored under ``path``."""
        with self._lock:
            self._pending.append(("delete", path))

    def commit(self) -> None:
        """Apply all queued changes in order, atomically."""
        with self._lock:
            with self._conn:
                for op in self._pending:
                    if op[0] == "add":
                        self._insert(op[1], op[2])
                    else:
                        self._remove(op[1])
            self._pending.clear()

    def _insert(self, name: str, path: str) -> None:
        tokens = tokenize(name)
        cursor = self._conn.execute(
            "INSERT INTO docs (name, path, length) VALUES (?, ?, ?)",
            (name, path, len(tokens)),
        )
        doc_id = cursor.lastrowid
        self._conn.executemany(
            "INSERT INTO postings (token, doc_id, position) VALUES (?, ?, ?)",
            ((token, doc_id, position) for position, token in enumerate(tokens)),
        )

    def _remove(self, path: str) -> None:
        self._conn.execute(
            "DELETE FROM postings WHERE doc_id IN (SELECT id FROM docs WHERE path = ?)",
            (path,),
        )
        self._conn.execute("DELETE FROM docs WHERE path = ?", (path,))

    def _phrase_freqs(self, phrase: list[str]) -> tuple[dict[int, int], dict[int, int]]:
        """Return (phrase frequency per document, token length per document)."""
        postings: dict[str, dict[int, set[int]]] = {}
        lengths: dict[int, int] = {}
        for token in set(phrase):
            by_doc: dict[int, set[int]] = defaultdict(set)
            rows = self._conn.execute(
                "SELECT p.doc_id, p.position, d.length FROM postings p "
                "JOIN docs d ON d.id = p.doc_id WHERE p.token = ?",
                (token,),
            )
            for doc_id, position, length in rows:
                by_doc[doc_id].add(position)
                lengths[doc_id] = length
            if not by_doc:
                return {}, {}
            postings[token] = by_doc

        candidates = set.intersection(*(set(docs) for docs in postings.values()))
        first, rest = phrase[0], list(enumerate(phrase[1:], start=1))
        freqs: dict[int, int] = {}
        for doc_id in candidates:
            tf = sum(
                1
                for start in postings[first][doc_id]
                if all(start + offset in postings[tok][doc_id] for offset, tok in rest)
            )
            if tf:
                freqs[doc_id] = tf
        return freqs, lengths

    def search(self, query: str, limit: int = DEFAULT_LIMIT) -> list[Something]:
        """Return up to ``limit`` committed documents matching ``query``, best first."""
        phrases = _parse_query(query)
        log.debug("Searching for %s", query)
        if not phrases or limit <= 0:
            return []
        with self._lock:
            total, average = self._conn.execute(
                "SELECT COUNT(*), AVG(length) FROM docs"
            ).fetchone()
            if not total:
                return []
            scores: dict[int, float] = defaultdict(float)
            for phrase in phrases:
                freqs, lengths = self._phrase_freqs(phrase)
                if not freqs:
                    continue
                df = len(freqs)
                idf = math.log(1 + (total - df + 0.5) / (df + 0.5))
                for doc_id, tf in freqs.items():
                    ratio = lengths[doc_id] / average if average else 0.0
                    norm = _K1 * (1 - _B + _B * ratio)
                    scores[doc_id] += idf * tf * (_K1 + 1) / (tf + norm)
            ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))[:limit]
            results = []
            for doc_id, _score in ranked:
                (path,) = self._conn.execute(
                    "SELECT path FROM docs WHERE id = ?", (doc_id,)
                ).fetchone()
                results.append(Something(path=path))
        log.debug("Found %d results", len(results))
        return results

    def num_docs(self) -> int:
        """Return the number of committed documents."""
        with self._lock:
            (count,) = self._conn.execute("SELECT COUNT(*) FROM docs").fetchone()
        return count

    def list_all(self) -> list[tuple[int, str]]:
        """Return (document id, path) for every committed document."""
        with self._lock:
            rows = self._conn.execute("SELECT id, path FROM docs ORDER BY id").fetchall()
        return [(doc_id, path) for doc_id, path in rows]

    def close(self) -> None:
        """Close the index; changes not yet committed are dropped."""
        with self._lock:
            self._pending.clear()
            self._conn.close()

    def __enter__(self) -> FileIndex:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def get_files(path, exclude_paths: Iterable[str]) -> Iterator[Entry]:
    """Walk ``path`` depth first, yielding the root and everything below it.

    Hidden entries are included. A directory whose path starts with one of
    ``exclude_paths`` is yielded but not descended into.
    """
    root = os.fspath(path)
    excludes = list(exclude_paths)
    log.debug("getting files from %s", root)
    root_is_dir = os.path.isdir(root)
    yield Entry(
        name=os.path.basename(root.rstrip(os.sep)) or root,
        path=root,
        is_dir=root_is_dir,
    )
    if not root_is_dir:
        return
    stack = [root]
    while stack:
        directory = stack.pop()
        try:
            with os.scandir(directory) as it:
                children = list(it)
        except OSError as exc:
            log.warning("failed to read directory %s: %s", directory, exc)
            continue
        for child in children:
            child_path = os.path.join(directory, child.name)
            try:
                is_dir = child.is_dir(follow_symlinks=False)
            except OSError:
                is_dir = False
            yield Entry(name=child.name, path=child_path, is_dir=is_dir)
            if not is_dir:
                continue
            if any(child_path.startswith(prefix) for prefix in excludes):
                log.debug("skip path %s", child_path)
                continue
            stack.append(child_path)


def get_subfolders(path) -> list[str]:
    """Return the paths of the entries directly inside ``path``, or [] if unreadable."""
    base = os.fspath(path)
    try:
        with os.scandir(base) as it:
            return [os.path.join(base, entry.name) for entry in it]
    except OSError:
        return []