import logging

import pytest

from ownertree.engines.loggers import LogFormat, ResourceJsonFormatter, \
                                      ResourcePrefixingTextFormatter, configure


@pytest.fixture(autouse=True)
def _restored_loggers(root_logger_handlers):
    pass


@pytest.mark.parametrize('kwargs, level', [
    (dict(), logging.INFO),
    (dict(verbose=True), logging.DEBUG),
    (dict(debug=True), logging.DEBUG),
    (dict(quiet=True), logging.WARNING),
])
def test_levels(kwargs, level):
    configure(**kwargs)
    assert logging.getLogger().level == level


def test_handler_is_added_with_the_formatter(root_logger_handlers):
    configure(log_format=LogFormat.JSON)
    added = [h for h in logging.getLogger().handlers if h not in root_logger_handlers]
    assert len(added) == 1
    assert isinstance(added[0].formatter, ResourceJsonFormatter)


def test_text_is_prefixed_by_default(root_logger_handlers):
    configure()
    added = [h for h in logging.getLogger().handlers if h not in root_logger_handlers]
    assert isinstance(added[0].formatter, ResourcePrefixingTextFormatter)


def test_low_level_loggers_are_silenced_by_default():
    configure(verbose=True)
    for name in ['asyncio', 'aiohttp']:
        logger = logging.getLogger(name)
        assert not logger.propagate
        assert all(isinstance(h, logging.NullHandler) for h in logger.handlers)


def test_low_level_loggers_are_propagated_in_debug():
    configure(debug=True)
    for name in ['asyncio', 'aiohttp']:
        assert logging.getLogger(name).propagate
