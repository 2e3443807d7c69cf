"""Application entry point: wires the services together and runs the search prompt."""

from __future__ import annotations

import argparse
import logging
import os
import queue
import sys
import time
from collections.abc import Iterable
from typing import TextIO

from .browser import SearchView
from .engine import FileIndex
from .indexer import Indexer
from .logsetup import init_log
from .status import StatusBar
from .vault import Vault, default_vault, init_vault
from .watcher import init_service as init_watcher

WINDOW_WIDTH = 1600.0
WINDOW_HEIGHT = 1200.0
MIN_WINDOW_SIZE = (640.0, 480.0)
WIDTH_SHARE = 0.80
HEIGHT_SHARE = 0.65
RESULT_TIMEOUT = 5.0
_POLL_INTERVAL = 0.01

HELP_TEXT = (
    "commands: <query> | :open N | :reveal N | :preview N | "
    ":sort COLUMN [asc|desc] | :status | :refresh | :quit"
)

log = logging.getLogger(__name__)


def init_channels() -> tuple[queue.Queue, queue.Queue]:
    """Return the (request, result) queues shared by the view and the index service."""
    requests: queue.Queue = queue.Queue()
    results: queue.Queue = queue.Queue()
    log.info("channel initialized")
    return requests, results


def window_size(display_width=None, display_height=None) -> tuple[float, float]:
    """Return the initial window size, capped to a share of the display when known."""
    width, height = WINDOW_WIDTH, WINDOW_HEIGHT
    if display_width is not None and display_height is not None:
        width = min(width, display_width * WIDTH_SHARE)
        height = min(height, display_height * HEIGHT_SHARE)
    return width, height


def _await_results(view: SearchView) -> bool:
    deadline = time.monotonic() + RESULT_TIMEOUT
    while not view.poll_results():
        if time.monotonic() > deadline:
            return False
        time.sleep(_POLL_INTERVAL)
    return True


def _print_table(view: SearchView, output: TextIO) -> None:
    table = view.table
    header = "  ".join(table.column_name(col) for col in range(len(table.columns)))
    print(f"  #  {header}", file=output)
    for row in range(len(table)):
        cells = "  ".join(table.cell(row, col) for col in range(len(table.columns)))
        print(f"{row + 1:>3}  {cells}", file=output)
    print(f"{len(table)} results", file=output)


def _row_arg(args: list[str]) -> int:
    if len(args) != 1:
        raise ValueError("expected a row number")
    return int(args[0]) - 1


def _sort(view: SearchView, args: list[str]) -> None:
    from .item import ColSort

    if not 1 <= len(args) <= 2:
        raise ValueError("expected a column and an optional direction")
    ids = [column.id for column in view.table.columns]
    if args[0] not in ids:
        raise ValueError(f"unknown column: {args[0]}")
    direction = args[1] if len(args) == 2 else "asc"
    orders = {"asc": ColSort.ASCENDING, "desc": ColSort.DESCENDING}
    if direction not in orders:
        raise ValueError(f"unknown direction: {direction}")
    view.table.perform_sort(ids.index(args[0]), orders[direction])


def run(
    vault: Vault,
    requests: queue.Queue,
    results: queue.Queue,
    input_lines: Iterable[str],
    output: TextIO,
) -> bool:
    """Read queries and commands from ``input_lines``; return True if a restart was asked for."""
    view = SearchView(requests, results, vault)
    status = StatusBar(vault)

    def say(text: str) -> None:
        print(text, file=output)

    for raw in input_lines:
        line = raw.strip()
        if not line.startswith(":"):
            view.on_query_change(line)
            if not line:
                continue
            if not view.poll_indexed():
                say("index is still being built")
            if _await_results(view):
                _print_table(view, output)
            else:
                say("no response from index service")
            continue

        parts = line[1:].split()
        if not parts:
            continue
        command, args = parts[0], parts[1:]
        try:
            if command in ("quit", "q"):
                break
            if command == "open":
                view.select(_row_arg(args))
                view.open_selected()
            elif command == "reveal":
                view.select(_row_arg(args))
                view.reveal_selected()
            elif command == "preview":
                view.select(_row_arg(args))
                if not view.preview_selected():
                    say("preview failed")
            elif command == "sort":
                _sort(view, args)
                _print_table(view, output)
            elif command == "status":
                status.refresh()
                say(status.render())
            elif command == "refresh":
                status.request_reindex()
                say("index will be rebuilt on restart")
                return True
            elif command == "help":
                say(HELP_TEXT)
            else:
                say(f"unknown command: {command}")
        except (LookupError, ValueError, OSError) as exc:
            say(f"error: {exc}")
    return False


def main(argv=None) -> int:
    """Start logging, the settings vault, the index and watch services, then the prompt."""
    parser = argparse.ArgumentParser(
        prog="anything", description="Search file names across the whole disk."
    )
    parser.parse_args(argv)

    init_log()
    vault = default_vault()
    init_vault(vault)
    requests, results = init_channels()
    index = FileIndex(vault.get("index_path"))
    indexer = Indexer(vault, index)
    indexer.start_service(requests, results)
    _, stop = init_watcher(vault, indexer)

    print(HELP_TEXT, file=sys.stdout)
    try:
        restart = run(vault, requests, results, sys.stdin, sys.stdout)
    finally:
        requests.put(None)
        stop.set()

    if restart:
        command = [sys.executable, *sys.argv]
        os.execv(command[0], command)
    return 0


if __name__ == "__main__":
    sys.exit(main())