"""
Logging setup for the command-line tools.

The library itself only logs via the per-module loggers and never configures
the logging on its own: it is up to the applications. The command-line tools
configure it as specified by the logging options.
"""
import enum
import logging
from typing import Any, MutableMapping, Optional, Union

import pythonjsonlogger.jsonlogger


class LogFormat(enum.Enum):
    """ Log formats, as specified on CLI. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-20.20s [%(levelname)-8.8s] %(message)s'
    JSON = enum.auto()


class JsonFormatter(pythonjsonlogger.jsonlogger.JsonFormatter):  # type: ignore
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault('timestamp', True)
        super().__init__(*args, **kwargs)

    def add_fields(
            self,
            log_record: MutableMapping[str, object],
            record: logging.LogRecord,
            message_dict: MutableMapping[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if 'severity' not in log_record:
            log_record['severity'] = (
                "debug" if record.levelno <= logging.DEBUG else
                "info" if record.levelno <= logging.INFO else
                "warn" if record.levelno <= logging.WARNING else
                "error" if record.levelno <= logging.ERROR else
                "fatal")


def configure(
        debug: Optional[bool] = None,
        verbose: Optional[bool] = None,
        quiet: Optional[bool] = None,
        log_format: Union[LogFormat, str] = LogFormat.FULL,
) -> None:
    log_level = 'DEBUG' if debug or verbose else 'WARNING' if quiet else 'INFO'
    formatter = make_formatter(log_format=log_format)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger = logging.getLogger()
    logger.addHandler(handler)
    logger.setLevel(log_level)


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
