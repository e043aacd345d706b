"""
DevenvLogger - Structured logging for the devenv tooling.

The terminal UI (banners, status lines) is the user-facing output; this
logger carries diagnostics on stderr and, optionally, into a JSON log file.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from .formatters import ConsoleFormatter, JsonFormatter


class _ConsoleHandler(logging.StreamHandler):
    """Stream handler that always writes to the current sys.stderr."""

    def __init__(self, level: int = logging.NOTSET):
        logging.Handler.__init__(self, level)

    @property
    def stream(self):
        return sys.stderr


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper())


class DevenvLogger:
    """Structured logger for devenv components.

    Usage:
        from devenv_logging import get_logger

        logger = get_logger("devenv")
        logger.debug("Loaded env file", path=".env.local")
    """

    def __init__(
        self,
        name: str,
        level: int | str = logging.WARNING,
        component: str | None = None,
    ):
        """Initialize the logger.

        Args:
            name: Logger name
            level: Log level (default WARNING)
            component: Optional component within the tool
        """
        self.name = name
        self.component = component
        self._console_level = _resolve_level(level)
        self._logger = logging.getLogger(name if component is None else f"{name}.{component}")
        self._logger.setLevel(self._console_level)
        self._logger.propagate = False

        self._environment = self._detect_environment()

    def _detect_environment(self) -> str:
        """Detect the running environment."""
        if os.environ.get("IN_NIX_SHELL"):
            return "nix-shell"

        if os.environ.get("CI"):
            return "ci"

        return "host"

    def _console_handler(self) -> logging.Handler | None:
        for handler in self._logger.handlers:
            if getattr(handler, "_devenv_console", False):
                return handler
        return None

    def _ensure_handlers(self) -> None:
        """Ensure a console handler is configured (lazy initialization)."""
        if self._console_handler() is not None:
            return

        console_handler = _ConsoleHandler(self._console_level)
        console_handler.setFormatter(ConsoleFormatter(service=self.name, use_colors=None))
        console_handler._devenv_console = True

        self._logger.addHandler(console_handler)

    def _sync_logger_level(self) -> None:
        # File handlers may want records the console drops
        levels = [self._console_level]
        levels.extend(
            h.level for h in self._logger.handlers if not getattr(h, "_devenv_console", False)
        )
        self._logger.setLevel(min(levels))

    def set_level(self, level: int | str) -> None:
        """Change the console level of this logger."""
        self._console_level = _resolve_level(level)
        handler = self._console_handler()
        if handler is not None:
            handler.setLevel(self._console_level)
        self._sync_logger_level()

    @property
    def level(self) -> int:
        """The console level of this logger."""
        return self._console_level

    def _log(
        self,
        level: int,
        msg: str,
        *args: Any,
        exc_info: Any = None,
        **kwargs: Any,
    ) -> None:
        """Internal logging method."""
        self._ensure_handlers()

        self._logger.log(
            level,
            msg,
            *args,
            exc_info=exc_info,
            extra=kwargs,
        )

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a debug message."""
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an info message."""
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a warning message."""
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, exc_info: Any = None, **kwargs: Any) -> None:
        """Log an error message."""
        self._log(logging.ERROR, msg, *args, exc_info=exc_info, **kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an exception (includes stack trace)."""
        self._log(logging.ERROR, msg, *args, exc_info=True, **kwargs)

    def add_file_handler(
        self,
        log_file: str | Path,
        level: int = logging.DEBUG,
        max_bytes: int = 1024 * 1024,  # 1 MB
        backup_count: int = 3,
    ) -> None:
        """Attach the JSON file handler for a log file.

        Loggers writing to the same file share one handler, and attaching it
        a second time is a no-op.

        Args:
            log_file: Path to the log file
            level: Log level for file handler
            max_bytes: Max file size before rotation
            backup_count: Number of backup files to keep
        """
        file_handler = _shared_file_handler(
            Path(log_file),
            service=self.name,
            environment=self._environment,
            level=level,
            max_bytes=max_bytes,
            backup_count=backup_count,
        )
        if file_handler not in self._logger.handlers:
            self._logger.addHandler(file_handler)
        self._sync_logger_level()

    def with_context(self, **kwargs: Any) -> "BoundLogger":
        """Create a bound logger with additional fields.

        Usage:
            bound = logger.with_context(requirement="API_KEY")
            bound.debug("Prompting")  # Includes requirement in the record
        """
        return BoundLogger(self, kwargs)


class BoundLogger:
    """Logger bound to specific fields.

    All log calls from a BoundLogger include the bound fields.
    """

    def __init__(self, parent: DevenvLogger, bound_fields: dict[str, Any]):
        self._parent = parent
        self._bound_fields = bound_fields

    def _merge_kwargs(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        result = dict(self._bound_fields)
        result.update(kwargs)
        return result

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._parent.debug(msg, *args, **self._merge_kwargs(kwargs))

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._parent.info(msg, *args, **self._merge_kwargs(kwargs))

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._parent.warning(msg, *args, **self._merge_kwargs(kwargs))

    def error(self, msg: str, *args: Any, exc_info: Any = None, **kwargs: Any) -> None:
        self._parent.error(msg, *args, exc_info=exc_info, **self._merge_kwargs(kwargs))

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._parent.exception(msg, *args, **self._merge_kwargs(kwargs))

    def with_context(self, **kwargs: Any) -> "BoundLogger":
        """Create a new bound logger with additional fields."""
        merged = dict(self._bound_fields)
        merged.update(kwargs)
        return BoundLogger(self._parent, merged)


# Logger registry for singleton behavior
_loggers: dict[str, DevenvLogger] = {}

# File handlers by resolved path and service
_file_handlers: dict[tuple[Path, str], RotatingFileHandler] = {}


def _shared_file_handler(
    log_file: Path,
    service: str,
    environment: str,
    level: int,
    max_bytes: int,
    backup_count: int,
) -> RotatingFileHandler:
    key = (log_file.resolve(), service)
    if key not in _file_handlers:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        handler.setLevel(level)
        handler.setFormatter(JsonFormatter(service=service, environment=environment))
        _file_handlers[key] = handler
    return _file_handlers[key]


def get_logger(
    name: str = "devenv",
    level: int | str = logging.WARNING,
    component: str | None = None,
) -> DevenvLogger:
    """Get or create a logger by name.

    Loggers are cached by name and component, so repeated calls return the
    same instance. The level only applies when the logger is created; use
    ``configure_logging`` to change it afterwards.

    Args:
        name: Logger name
        level: Log level (default WARNING)
        component: Optional component within the tool

    Returns:
        DevenvLogger instance
    """
    key = f"{name}:{component or ''}"

    if key not in _loggers:
        _loggers[key] = DevenvLogger(name, level, component)

    return _loggers[key]


def configure_logging(
    level: int | str = logging.WARNING,
    log_file: str | Path | None = None,
) -> None:
    """Apply a level to every devenv logger and optionally add a JSON log file.

    All loggers share one handler for the log file, so calling this again
    with the same file does not duplicate records.

    Args:
        level: Log level for all cached loggers
        log_file: Optional path of a JSON log file
    """
    for logger in _loggers.values():
        logger.set_level(level)
        if log_file is not None:
            logger.add_file_handler(log_file)
