"""
devenv_logging - Structured logging for the devenv tooling.

Usage:
    from devenv_logging import get_logger

    logger = get_logger("devenv", component="wizard")
    logger.debug("Running generator command", command="openssl rand -hex 16")

    bound = logger.with_context(requirement="API_KEY")
    bound.warning("Generator command failed", returncode=1)

Features:
    - Human-readable console output on stderr
    - Structured JSON log files with rotation
    - Keyword fields attached to every record
"""

from .formatters import ConsoleFormatter, JsonFormatter
from .logger import BoundLogger, DevenvLogger, configure_logging, get_logger


__all__ = [
    "BoundLogger",
    "ConsoleFormatter",
    "DevenvLogger",
    "JsonFormatter",
    "configure_logging",
    "get_logger",
]

__version__ = "0.1.0"
