"""Package loggers for minimizers.

Solvers and line searches report through loggers named ``minimizers.<module>``.
Each has its own stderr handler and does not propagate, so the package stays
quiet below WARNING regardless of the root logger configuration.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

_PACKAGE = "minimizers"
_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_level = logging.WARNING
_stream: Optional[IO[str]] = None
_format = _FORMAT
_loggers: dict[str, logging.Logger] = {}


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the cached package logger for ``name`` (typically ``__name__``).

    Names outside the package namespace are prefixed with ``minimizers.``;
    ``None`` gives the package logger itself.
    """
    if name is None:
        name = _PACKAGE
    elif name != _PACKAGE and not name.startswith(_PACKAGE + "."):
        name = f"{_PACKAGE}.{name}"

    if name not in _loggers:
        logger = logging.getLogger(name)
        if not logger.handlers:
            _attach_handler(logger, _stream or sys.stderr, _format)
        logger.setLevel(_level)
        logger.propagate = False
        _loggers[name] = logger
    return _loggers[name]


def _attach_handler(logger: logging.Logger, stream: IO[str], fmt: str) -> None:
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)


def set_log_level(level: int | str) -> None:
    """Set the level of every package logger, e.g. ``"DEBUG"`` to trace line searches."""
    global _level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)
    _level = level
    for logger in _loggers.values():
        logger.setLevel(level)


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """Route every package logger, current and future, to ``stream`` (stderr by default)."""
    global _stream, _format
    _stream = stream
    _format = format_string or _FORMAT
    for logger in _loggers.values():
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        _attach_handler(logger, stream or sys.stderr, _format)
    set_log_level(level)


__all__ = ["configure_logging", "get_logger", "set_log_level"]
