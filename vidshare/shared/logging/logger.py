"""Structured logging utilities."""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from pathlib import Path

from loguru import logger as _logger

from .sensitive_filter import sanitize_record

_FMT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<yellow>{extra[service]}</yellow> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "urllib3")

_CORRELATION_ID: ContextVar[str] = ContextVar("correlation_id", default="-")

_logger.configure(extra={"correlation_id": "-", "service": "vidshare"})


def _log_file_path(explicit: str | os.PathLike[str] | None = None) -> Path:
    if explicit:
        return Path(explicit)
    from_env = os.getenv("LOG_FILE")
    if from_env:
        return Path(from_env)
    return Path.cwd() / "instance" / "vidshare.log"


class _InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)
        _logger.opt(depth=6, exception=record.exc_info).log(
            level,
            record.getMessage(),
            correlation_id=_CORRELATION_ID.get(),
        )


class ContextualLogger:
    """Proxy for loguru that injects correlation ids via ContextVar."""

    def __getattr__(self, name):  # pragma: no cover
        bound = _logger.bind(correlation_id=_CORRELATION_ID.get())
        return getattr(bound, name)


def set_correlation_id(value: str | None) -> None:
    _CORRELATION_ID.set(value or "-")


def get_correlation_id() -> str:
    return _CORRELATION_ID.get()


def clear_correlation_id() -> None:
    _CORRELATION_ID.set("-")


def setup_logging(
    level: str | None = None,
    *,
    debug_mode: bool = False,
    service_name: str = "vidshare",
    log_file: str | os.PathLike[str] | None = None,
) -> None:
    """Route all logging through loguru with redaction on every sink.

    The file sink writes JSON lines when ``LOG_JSON`` is truthy, for log
    shippers; stderr always stays human readable.
    """

    default_level = "DEBUG" if debug_mode else "INFO"
    level = (level or os.getenv("LOG_LEVEL") or default_level).upper()
    path = _log_file_path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    json_file = os.getenv("LOG_JSON", "").lower() in ("1", "true", "yes")

    _logger.remove()
    _logger.configure(extra={"correlation_id": "-", "service": service_name})
    _logger.add(
        sys.stderr,
        level=level,
        format=_FMT,
        filter=sanitize_record,
        colorize=True,
        backtrace=False,
        diagnose=False,
    )
    _logger.add(
        str(path),
        level=level,
        format=_FMT,
        filter=sanitize_record,
        colorize=False,
        serialize=json_file,
        backtrace=False,
        diagnose=False,
        enqueue=True,
        rotation="10 MB",
        retention=5,
        encoding="utf-8",
    )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    logging.getLogger("werkzeug").setLevel(logging.INFO)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


logger = ContextualLogger()

__all__ = [
    "logger",
    "setup_logging",
    "set_correlation_id",
    "clear_correlation_id",
    "get_correlation_id",
]
