"""Structured logging for the totals engine and the invt CLI.

Engine events are emitted at debug level through structlog loggers backed by
stdlib logging. Records are written to stderr (and optionally a file) so
that ``invt calculate --format json`` keeps stdout parseable.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from invoice_totals.config import Settings, get_settings

_SHARED_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["environment"] = settings.environment.value
    return event_dict


def get_console_processors() -> list[Processor]:
    return [
        *_SHARED_PROCESSORS,
        structlog.stdlib.add_log_level,
        structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback),
    ]


def get_json_processors() -> list[Processor]:
    return [
        *_SHARED_PROCESSORS,
        structlog.processors.add_log_level,
        _add_app_context,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(settings: Settings | None = None) -> None:
    """Route structlog through stdlib logging at the configured level.

    JSON rendering is used when ``settings.log_format`` is ``"json"``
    (the production default), console rendering otherwise.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.value)

    structlog.configure(
        processors=(
            get_json_processors()
            if settings.log_format == "json"
            else get_console_processors()
        ),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(settings.log_file)
        handler.setLevel(level)
        logging.getLogger().addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


class LogContext:
    """Bind key/value pairs to every event logged inside a ``with`` block.

    Example:
        with LogContext(document_number=document.number):
            InvoiceSum(document, currency).build()
    """

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.kwargs)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.kwargs)
