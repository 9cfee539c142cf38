"""Structured logging helpers with correlation IDs.

Library modules obtain a :class:`LoggerAdapter` through :func:`get_logger`;
the adapter injects ``operation`` and ``status`` fields (and the current
correlation ID) into every record. Handlers are configured only at the
application boundary via :func:`setup_logging`.

Examples
--------
>>> from docforge.logging import get_logger
>>> logger = get_logger(__name__)
>>> logger.info("Sidebar built", extra={"operation": "sidebar", "item_count": 3})
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from typing import TYPE_CHECKING, Any, Self

if TYPE_CHECKING:
    from types import TracebackType

__all__ = [
    "CorrelationContext",
    "JsonFormatter",
    "LoggerAdapter",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
    "setup_logging",
    "with_fields",
]

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    The payload carries ``ts``, ``level``, ``name`` and ``message`` followed by
    every JSON-compatible extra field attached to the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, object] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S") + "Z",
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if "correlation_id" not in record.__dict__:
            ctx_correlation_id = _correlation_id.get()
            if ctx_correlation_id is not None:
                data["correlation_id"] = ctx_correlation_id

        for key, value in record.__dict__.items():
            if (
                key not in _STANDARD_ATTRS
                and key not in data
                and not key.startswith("_")
                and value is not None
                and isinstance(value, (str, int, float, bool, list, dict))
            ):
                data[key] = value

        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class LoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """Logger adapter that injects structured context fields.

    Fields bound at construction are merged into each call's ``extra`` without
    overwriting keys passed explicitly. ``operation`` defaults to
    ``"unknown"`` and ``status`` is inferred from the level when absent.
    """

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = kwargs.setdefault("extra", {})
        if self.extra:
            for key, value in self.extra.items():
                extra.setdefault(key, value)

        if "correlation_id" not in extra:
            ctx_correlation_id = _correlation_id.get()
            if ctx_correlation_id is not None:
                extra["correlation_id"] = ctx_correlation_id

        extra.setdefault("operation", "unknown")
        return msg, kwargs

    def log(self, level: int, msg: object, *args: object, **kwargs: Any) -> None:
        extra = kwargs.setdefault("extra", {})
        if "status" not in extra:
            if level >= logging.ERROR:
                extra["status"] = "error"
            elif level >= logging.WARNING:
                extra["status"] = "warning"
            else:
                extra["status"] = "success"
        super().log(level, msg, *args, **kwargs)

    def debug(self, msg: object, *args: object, **kwargs: Any) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: object, *args: object, **kwargs: Any) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: object, *args: object, **kwargs: Any) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: object, *args: object, **kwargs: Any) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: object, *args: object, **kwargs: Any) -> None:
        kwargs.setdefault("exc_info", True)
        self.log(logging.ERROR, msg, *args, **kwargs)


def get_logger(name: str) -> LoggerAdapter:
    """Return a structured logger adapter for ``name``.

    A ``NullHandler`` is attached when the underlying logger has no handlers
    so library use never prints unless the application configures logging.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return LoggerAdapter(logger, {})


def with_fields(logger: logging.Logger | LoggerAdapter, **fields: object) -> LoggerAdapter:
    """Return an adapter that binds ``fields`` to every log call.

    Parameters
    ----------
    logger : logging.Logger | LoggerAdapter
        Base logger, possibly already wrapped.
    **fields : object
        Structured fields merged into each record.

    Returns
    -------
    LoggerAdapter
        Adapter carrying the union of any existing bound fields and ``fields``.
    """
    if isinstance(logger, LoggerAdapter):
        merged: dict[str, object] = dict(logger.extra or {})
        merged.update(fields)
        return LoggerAdapter(logger.logger, merged)
    return LoggerAdapter(logger, dict(fields))


def setup_logging(level: int | str = logging.INFO) -> None:
    """Configure the root logger with :class:`JsonFormatter` on stderr.

    Should be called once by the application entry point.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)


def set_correlation_id(correlation_id: str | None) -> None:
    """Set the correlation ID injected into subsequent log records."""
    _correlation_id.set(correlation_id)


def get_correlation_id() -> str | None:
    """Return the correlation ID of the current context, if any."""
    return _correlation_id.get()


class CorrelationContext:
    """Context manager that scopes a correlation ID.

    Examples
    --------
    >>> from docforge.logging import CorrelationContext, get_correlation_id
    >>> with CorrelationContext("build-42"):
    ...     get_correlation_id()
    'build-42'
    >>> get_correlation_id() is None
    True
    """

    def __init__(self, correlation_id: str | None) -> None:
        self.correlation_id = correlation_id
        self._token: contextvars.Token[str | None] | None = None

    def __enter__(self) -> Self:
        self._token = _correlation_id.set(self.correlation_id)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _correlation_id.reset(self._token)
        del exc_type, exc_val, exc_tb
