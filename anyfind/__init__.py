"""Whole-disk file name search: settings store, name index, indexer, watcher and prompt."""

__version__ = "0.1.0"