"""
Logging setup for the applications that do not configure the logging themselves.

The library itself only logs via the standard loggers under ``aiolinode.*``
(or via the loggers explicitly passed into the low-level functions),
and never configures the handlers or levels on import.
"""
import enum
import logging
from typing import Any, MutableMapping, Optional, Union

import pythonjsonlogger.json


class LogFormat(enum.Enum):
    """ Log formats, as accepted by `configure`. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-20.20s [%(levelname)-8.8s] %(message)s'
    JSON = 'json'  # not a %-format: handled by its own formatter.


class JsonFormatter(pythonjsonlogger.json.JsonFormatter):
    """
    One JSON object per line, with a ``severity`` field for the log collectors.

    The ``extra=`` fields of the log calls become the top-level fields.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault('timestamp', True)
        super().__init__(*args, **kwargs)

    def add_fields(
            self,
            log_record: MutableMapping[str, object],
            record: logging.LogRecord,
            message_dict: MutableMapping[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)  # type: ignore

        if 'severity' not in log_record:
            log_record['severity'] = (
                "debug" if record.levelno <= logging.DEBUG else
                "info" if record.levelno <= logging.INFO else
                "warn" if record.levelno <= logging.WARNING else
                "error" if record.levelno <= logging.ERROR else
                "fatal")


def make_formatter(
        log_format: Union[LogFormat, str] = LogFormat.FULL,
) -> logging.Formatter:
    if log_format is LogFormat.JSON:
        return JsonFormatter()
    elif isinstance(log_format, LogFormat):
        return logging.Formatter(log_format.value)
    elif isinstance(log_format, str):
        return logging.Formatter(log_format)
    else:
        raise ValueError(f"Unsupported log format: {log_format!r}")


def configure(
        debug: Optional[bool] = None,
        verbose: Optional[bool] = None,
        quiet: Optional[bool] = None,
        log_format: Union[LogFormat, str] = LogFormat.FULL,
) -> logging.Handler:
    """
    Add a stream handler to the root logger, and set the levels.

    Returns the added handler, so that it could be removed when not needed.
    """
    log_level = 'DEBUG' if debug or verbose else 'WARNING' if quiet else 'INFO'
    handler = logging.StreamHandler()
    handler.setFormatter(make_formatter(log_format))
    logger = logging.getLogger()
    logger.addHandler(handler)
    logger.setLevel(log_level)

    # Prevent the low-level logging unless in the debug mode. Keep only the library's messages.
    for name in ['asyncio', 'aiohttp']:
        logging.getLogger(name).setLevel('DEBUG' if debug else 'WARNING')

    return handler
