'''
Structured logging configuration for Tally.

Configures structlog with orjson serialization, context variable
binding, and ISO 8601 UTC timestamps. Stdlib loggers used by the
accounting core are routed through the same JSON renderer. Call
configure_logging() once at session start.
'''

import logging
import sys
from typing import Any

import orjson
import structlog

__all__ = ['bind_context', 'clear_context', 'configure_logging', 'get_logger']


def _orjson_dumps_str(*args: Any, **kwargs: Any) -> str:

    '''
    Serialize to JSON string via orjson for stdlib ProcessorFormatter.

    Returns:
        str: JSON-encoded string
    '''

    return orjson.dumps(*args, **kwargs).decode()


def _shared_processors() -> list[structlog.types.Processor]:

    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso', utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(log_level: str = 'INFO') -> None:

    '''
    Configure structlog and stdlib logging with orjson JSON rendering to stdout.

    Args:
        log_level (str): Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        None
    '''

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    shared_processors = _shared_processors()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.JSONRenderer(serializer=orjson.dumps),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.BytesLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(serializer=_orjson_dumps_str),
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)


def get_logger(name: str | None = None) -> Any:

    '''
    Return a structlog logger, optionally tagged with a logger name.

    Args:
        name (str | None): Logger name added to every event as "logger"

    Returns:
        Any: Bound structlog logger
    '''

    log = structlog.get_logger()
    if name:
        log = log.bind(logger=name)

    return log


def bind_context(**kwargs: Any) -> None:

    '''
    Bind key-value pairs to every subsequent log line in this context.

    Args:
        **kwargs (Any): Fields to merge into log events, e.g. session_id
    '''

    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:

    '''Remove every field bound with bind_context.'''

    structlog.contextvars.clear_contextvars()
