import sys

import pytest

from anyfind.status import INITIAL_PROGRESS, StatusBar, format_progress
from anyfind.vault import Vault


@pytest.fixture
def vault(tmp_path):
    store = Vault(tmp_path / "conf" / "anything.db", tmp_path / "index")
    store.batch_set(
        [("indexed_files", "0"), ("indexed_progress", "0.0"), ("refresh", "false")]
    )
    yield store
    store.close()


def test_format_progress_complete_is_whole():
    assert format_progress(100.0) == "100"


def test_format_progress_two_decimals():
    assert format_progress(45.5) == "45.50"
    assert format_progress(0.0) == "0.00"


def test_initial_state(vault):
    bar = StatusBar(vault)
    assert bar.progress_value == INITIAL_PROGRESS
    assert bar.index_files_count == ""
    assert not bar.complete


def test_refresh_reads_vault(vault):
    vault.batch_set([("indexed_files", "42"), ("indexed_progress", "12.5")])
    bar = StatusBar(vault)
    bar.refresh()
    assert bar.index_files_count == "42"
    assert bar.progress_value == 12.5


def test_render_in_progress(vault):
    vault.batch_set([("indexed_files", "42"), ("indexed_progress", "12.5")])
    bar = StatusBar(vault)
    bar.refresh()
    text = bar.render()
    assert "Indexed Files: 42" in text
    assert format_progress(12.5) + "%" in text
    assert "indexing" in text


def test_render_complete(vault):
    vault.batch_set([("indexed_files", "7"), ("indexed_progress", "100")])
    bar = StatusBar(vault)
    bar.refresh()
    assert bar.complete
    assert "100%" in bar.render()
    assert "watching" in bar.render()


def test_request_reindex_sets_flag(vault):
    bar = StatusBar(vault)
    command = bar.request_reindex()
    assert vault.get("refresh") == "true"
    assert command[0] == sys.executable


def test_refresh_missing_key_raises(tmp_path):
    with Vault(tmp_path / "db", tmp_path / "ix") as empty:
        bar = StatusBar(empty)
        with pytest.raises(KeyError):
            bar.refresh()


def test_refresh_bad_progress_raises(vault):
    vault.set("indexed_progress", "half")
    bar = StatusBar(vault)
    with pytest.raises(ValueError):
        bar.refresh()