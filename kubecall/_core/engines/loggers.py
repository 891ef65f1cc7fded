"""
Logging configuration for the applications built on the client (and its CLI).

The library itself never configures the logging: it only logs to its own
loggers (``kubecall.*``), and the call logger is given by the users explicitly.
"""
import enum
import logging
from typing import Any, MutableMapping, Optional, Union

import pythonjsonlogger.json


class LogFormat(enum.Enum):
    """ Log formats, as specified on CLI. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-20.20s [%(levelname)-8.8s] %(message)s'
    JSON = '-json-'


class ClientFormatter(logging.Formatter):
    pass


class ClientTextFormatter(ClientFormatter, logging.Formatter):
    pass


class ClientJsonFormatter(ClientFormatter, pythonjsonlogger.json.JsonFormatter):  # type: ignore
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

    # Prevent the low-level logging unless in the debug mode. Keep only the client's messages.
    # For no-propagation loggers, add a dummy null handler to prevent printing the messages.
    for name in ['asyncio', 'aiohttp']:
        logger = logging.getLogger(name)
        logger.propagate = bool(debug)
        if not debug:
            logger.handlers[:] = [logging.NullHandler()]


def make_formatter(
        log_format: Union[LogFormat, str] = LogFormat.FULL,
) -> ClientFormatter:
    if log_format is LogFormat.JSON:
        return ClientJsonFormatter()
    elif isinstance(log_format, LogFormat):
        return ClientTextFormatter(log_format.value)
    elif isinstance(log_format, str):
        return ClientTextFormatter(log_format)
    else:
        raise ValueError(f"Unsupported log format: {log_format!r}")
