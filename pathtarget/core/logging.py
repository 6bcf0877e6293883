#!/usr/bin/env python3
"""Structured logging for pathtarget.

Wraps the standard library logger with:
- Key-value context appended to each message
- Thread-local context pushed with ``add_context()``
- Console output by default, optional rotating log file

Module loggers are dotted children of ``pathtarget`` and write through
whatever the command line configured on the parent.

Example:
    >>> logger = Logger(level=LogLevel.DEBUG)
    >>> with logger.add_context(config="targets.yaml"):
    ...     logger.debug("Matcher built", inclusion=2, exclusion=1)
"""

import logging
import logging.handlers
import threading
from contextlib import contextmanager
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogLevel(IntEnum):
    """Log levels matching Python's logging module."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class Logger:
    """Structured logger with context support."""

    # Shared by every Logger so context reaches module loggers too
    _local = threading.local()

    def __init__(
        self,
        name: str = "pathtarget",
        level: Optional[Union[LogLevel, str]] = None,
        handlers: Optional[List[logging.Handler]] = None,
    ):
        """Initialize logger.

        Dotted names ("pathtarget.matcher") are children: unless given a level
        or handlers they inherit the parent's level and write through the
        parent's handlers.

        Args:
            name: Logger name
            level: Minimum level; top-level loggers default to INFO
            handlers: Replaces the default console handler
        """
        self.name = name
        self.logger = logging.getLogger(name)
        is_child = "." in name

        if level is not None:
            self.set_level(level)
        else:
            self.logger.setLevel(logging.NOTSET if is_child else LogLevel.INFO)

        if handlers is None:
            handlers = [] if is_child else [self._console_handler()]

        self.logger.handlers.clear()
        for handler in handlers:
            self.logger.addHandler(handler)

        self.logger.propagate = is_child and not handlers

    @staticmethod
    def _console_handler() -> logging.StreamHandler:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DATE_FORMAT))
        return handler

    def create_file_handler(
        self,
        filename: Union[str, Path],
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
    ) -> logging.handlers.RotatingFileHandler:
        """Create a rotating file handler in the console format.

        Args:
            filename: Path to log file
            max_bytes: Size at which the file rotates
            backup_count: Rotated files to keep
        """
        handler = logging.handlers.RotatingFileHandler(
            filename, maxBytes=max_bytes, backupCount=backup_count
        )
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DATE_FORMAT))
        return handler

    def add_handler(self, handler: logging.Handler) -> None:
        self.logger.addHandler(handler)

    def set_level(self, level: Union[LogLevel, str]) -> None:
        """Set the minimum level from a LogLevel or its name."""
        if isinstance(level, str):
            level = LogLevel[level.upper()]
        self.logger.setLevel(level)

    def _context(self) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for layer in getattr(self._local, "stack", []):
            merged.update(layer)
        return merged

    @contextmanager
    def add_context(self, **kwargs):
        """Append ``kwargs`` to every message logged on this thread inside the block.

        Example:
            >>> with logger.add_context(pattern="**/*.cls"):
            ...     logger.debug("Compiling")
        """
        if not hasattr(self._local, "stack"):
            self._local.stack = []

        self._local.stack.append(kwargs)
        try:
            yield
        finally:
            self._local.stack.pop()

    def _log(self, level: LogLevel, msg: str, context: Dict[str, Any]) -> None:
        if not self.logger.isEnabledFor(level):
            return
        merged = self._context()
        merged.update(context)
        if merged:
            msg = f"{msg} | " + " ".join(f"{k}={v}" for k, v in merged.items())
        self.logger.log(level, msg, extra={"context": merged})

    def debug(self, msg: str, **context) -> None:
        self._log(LogLevel.DEBUG, msg, context)

    def warning(self, msg: str, **context) -> None:
        self._log(LogLevel.WARNING, msg, context)


# Logger instances by name
_loggers: Dict[str, Logger] = {}


def get_logger(name: str = "pathtarget") -> Logger:
    """Get or create the shared logger for ``name``."""
    if name not in _loggers:
        _loggers[name] = Logger(name=name)
    return _loggers[name]


def set_global_logger(logger: Logger) -> None:
    """Register a configured logger under its name."""
    _loggers[logger.name] = logger
