from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Optional, Union

# Per-request context: set by the request middleware and the bearer-token dependency
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
actor_id_var: ContextVar[Optional[str]] = ContextVar("actor_id", default=None)
actor_role_var: ContextVar[Optional[str]] = ContextVar("actor_role", default=None)

_QUIET_LOGGERS = ("aiosqlite", "multipart", "passlib")


class LoggingContextFilter(logging.Filter):
    """
    Inject correlation_id and the acting user (as actor=<role>:<id>) into each
    log record so formatters can include them. "-" stands in for missing values.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.correlation_id = correlation_id_var.get() or "-"
        aid = actor_id_var.get()
        role = actor_role_var.get()
        record.actor = f"{role}:{aid}" if aid and role else (aid or "-")
        return True


# PUBLIC_INTERFACE
def bind_actor(user_id: Optional[str], role: Optional[str]) -> None:
    """Attach the acting user to log records of the current request."""
    actor_id_var.set(user_id)
    actor_role_var.set(role)


# PUBLIC_INTERFACE
def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure root logging with a structured format and context filter."""
    handler = logging.StreamHandler(stream=sys.stdout)
    fmt = "%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | actor=%(actor)s | %(message)s"
    handler.setFormatter(logging.Formatter(fmt=fmt))
    handler.addFilter(LoggingContextFilter())

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(level)

    # Chatty third-party loggers stay at WARNING unless asked for DEBUG
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if root.level <= logging.DEBUG else logging.WARNING)
