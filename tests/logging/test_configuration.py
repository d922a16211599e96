import json
import logging

import pytest

from aiolinode._core.loggers import JsonFormatter, LogFormat, configure, make_formatter


@pytest.fixture(autouse=True)
def _restore_root_logger():
    logger = logging.getLogger()
    original_handlers = logger.handlers[:]
    original_level = logger.level
    levels = {name: logging.getLogger(name).level for name in ['asyncio', 'aiohttp']}
    yield
    logger.handlers[:] = original_handlers
    logger.setLevel(original_level)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def test_own_handler_is_added():
    handler = configure()
    logger = logging.getLogger()
    assert handler in logger.handlers
    assert isinstance(handler, logging.StreamHandler)


@pytest.mark.parametrize('kwargs, level', [
    (dict(), logging.INFO),
    (dict(verbose=True), logging.DEBUG),
    (dict(debug=True), logging.DEBUG),
    (dict(quiet=True), logging.WARNING),
])
def test_levels(kwargs, level):
    configure(**kwargs)
    assert logging.getLogger().level == level


def test_lowlevel_loggers_are_silenced_unless_debugging():
    configure(verbose=True)
    assert logging.getLogger('asyncio').level == logging.WARNING
    assert logging.getLogger('aiohttp').level == logging.WARNING


def test_lowlevel_loggers_are_verbose_when_debugging():
    configure(debug=True)
    assert logging.getLogger('asyncio').level == logging.DEBUG
    assert logging.getLogger('aiohttp').level == logging.DEBUG


@pytest.mark.parametrize('log_format', [LogFormat.FULL, LogFormat.PLAIN, '%(message)s'])
def test_text_formatters(log_format):
    handler = configure(log_format=log_format)
    assert type(handler.formatter) is logging.Formatter


def test_json_formatter():
    handler = configure(log_format=LogFormat.JSON)
    assert type(handler.formatter) is JsonFormatter


def test_unsupported_formats():
    with pytest.raises(ValueError):
        make_formatter(123)


@pytest.mark.parametrize('levelno, severity', [
    (logging.DEBUG, 'debug'),
    (logging.INFO, 'info'),
    (logging.WARNING, 'warn'),
    (logging.ERROR, 'error'),
    (logging.CRITICAL, 'fatal'),
])
def test_json_severities(levelno, severity):
    formatter = JsonFormatter()
    record = logging.LogRecord('aiolinode', levelno, __file__, 1, "hello %s", ('world',), None)
    data = json.loads(formatter.format(record))
    assert data['message'] == 'hello world'
    assert data['severity'] == severity
    assert 'timestamp' in data


def test_json_extras():
    formatter = JsonFormatter()
    record = logging.LogRecord('aiolinode', logging.INFO, __file__, 1, "hello", (), None)
    record.entity_id = 123
    data = json.loads(formatter.format(record))
    assert data['entity_id'] == 123
