"""
Log formatters for devenv_logging.

Provides a JSON formatter for log files and a console formatter for stderr.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any


# Standard LogRecord attributes that never count as extra fields
_STANDARD_ATTRS = {
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
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "exc_info",
    "exc_text",
    "thread",
    "threadName",
    "message",
    "taskName",
}


def extract_extra(record: logging.LogRecord) -> dict[str, Any]:
    """Extract the keyword fields that were passed to the log call."""
    extra = {}
    for key, value in record.__dict__.items():
        if key not in _STANDARD_ATTRS and not key.startswith("_"):
            extra[key] = value
    return extra


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured log files.

    Output format:
        {
            "timestamp": "2025-11-28T12:34:56.789Z",
            "severity": "INFO",
            "message": "Loaded env file",
            "service": "devenv",
            "environment": "nix-shell",
            "extra": {"path": ".env.local"}
        }
    """

    SEVERITY_MAP = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARNING",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
    }

    def __init__(
        self,
        service: str = "devenv",
        component: str | None = None,
        environment: str | None = None,
        include_extra: bool = True,
    ):
        """Initialize the JSON formatter.

        Args:
            service: Service name for all logs
            component: Optional component within the service; when unset it
                is taken from a logger named ``<service>.<component>``
            environment: Environment name (e.g., "nix-shell", "ci", "host")
            include_extra: Whether to include extra fields from log records
        """
        super().__init__()
        self.service = service
        self.component = component
        self.environment = environment
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_entry: dict[str, Any] = {
            "timestamp": self._format_timestamp(record),
            "severity": self.SEVERITY_MAP.get(record.levelno, "DEFAULT"),
            "message": record.getMessage(),
            "service": self.service,
        }

        component = self.component
        if component is None and record.name.startswith(f"{self.service}."):
            component = record.name[len(self.service) + 1 :]
        if component:
            log_entry["component"] = component

        if self.environment:
            log_entry["environment"] = self.environment

        if record.name and record.name != self.service:
            log_entry["logger"] = record.name

        if self.include_extra:
            extra = extract_extra(record)
            if extra:
                log_entry["extra"] = extra

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if record.levelno >= logging.WARNING:
            log_entry["sourceLocation"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_entry, default=str, ensure_ascii=False)

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        """Format timestamp in ISO 8601 format with UTC timezone."""
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{int(dt.microsecond / 1000):03d}Z"


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter.

    Output format:
        12:34:56 [WARNING ] devenv: Generator command failed (requirement=API_KEY)
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(
        self,
        service: str = "devenv",
        use_colors: bool | None = None,
        show_fields: bool = True,
    ):
        """Initialize the console formatter.

        Args:
            service: Service name for logs
            use_colors: Whether to use ANSI colors (auto-detected if None)
            show_fields: Whether to append keyword fields to the message
        """
        super().__init__()
        self.service = service
        self.use_colors = use_colors if use_colors is not None else self._detect_color_support()
        self.show_fields = show_fields

    def _detect_color_support(self) -> bool:
        """Detect if the terminal supports colors."""
        if not hasattr(sys.stderr, "isatty") or not sys.stderr.isatty():
            return False

        if os.environ.get("NO_COLOR"):
            return False

        return True

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record for console output."""
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        level = record.levelname
        if self.use_colors:
            color = self.COLORS.get(level, "")
            level = f"{color}{level:8}{self.RESET}"
        else:
            level = f"{level:8}"

        parts = [f"{timestamp} [{level}] {self.service}"]

        if record.name and record.name != self.service and "." in record.name:
            parts.append(f".{record.name.split('.')[-1]}")

        parts.append(f": {record.getMessage()}")

        if self.show_fields:
            fields = extract_extra(record)
            if fields:
                field_str = " ".join(f"{key}={value}" for key, value in fields.items())
                if self.use_colors:
                    field_str = f"\033[90m({field_str})\033[0m"
                else:
                    field_str = f"({field_str})"
                parts.append(f" {field_str}")

        message = "".join(parts)

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message
