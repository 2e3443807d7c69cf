import logging

import pytest

from anyfind.logsetup import init_log


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    package = logging.getLogger("anyfind")
    saved = (list(root.handlers), root.level, package.level)
    yield
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])
    package.setLevel(saved[2])


def test_package_logs_at_debug():
    logger = init_log()
    assert logger.name == "anyfind"
    assert logging.getLogger("anyfind.indexer").isEnabledFor(logging.DEBUG)


def test_other_loggers_at_warning():
    logger = init_log()
    assert logger.isEnabledFor(logging.DEBUG)
    other = logging.getLogger("somethingelse")
    assert not other.isEnabledFor(logging.INFO)
    assert other.isEnabledFor(logging.WARNING)


def test_handler_added_once():
    first = init_log()
    second = init_log()
    assert first is second
    assert second.name == "anyfind"
    names = [h.get_name() for h in logging.getLogger().handlers]
    assert names.count("anyfind-console") == 1


def test_announces_initialisation(caplog):
    with caplog.at_level(logging.INFO, logger="anyfind"):
        init_log()
    assert "Logger initialized" in caplog.messages