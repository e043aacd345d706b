"""
Settings for the devenv command line tool.

Loads settings from:
1. Command line flags (highest priority, applied by the CLI)
2. DEVENV_* environment variables
3. Defaults
"""

import logging
import os
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any

from .base import ValidationResult
from .envfile import DEFAULT_ENV_FILES
from .validators import validate_non_empty, validate_relative_file_name


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def safe_int(value: str | None, default: int | None = None) -> int | None:
    """Safely parse an integer from a string.

    Args:
        value: String to parse (can be None)
        default: Default value if parsing fails

    Returns:
        Parsed integer or default value
    """
    if value is None:
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def split_list(value: str | None) -> tuple[str, ...]:
    """Split a comma separated list, dropping empty entries."""
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass
class DevenvSettings:
    """Settings of one devenv invocation.

    Attributes:
        cwd: Project directory all file names are relative to
        devenv_file: Name of the requirements document
        env_file: .env file the setup wizard writes to
        env_file_names: .env files loaded before checking, in order
        setup_cmd: Command users are told to run for the wizard
        max_prompt_attempts: Bound on invalid answers per prompt (None = unbounded)
        log_level: Console log level
        log_file: Optional JSON log file
    """

    cwd: Path = field(default_factory=Path.cwd)
    devenv_file: str = "devenv.json"
    env_file: str = ".env.local"
    env_file_names: tuple[str, ...] = DEFAULT_ENV_FILES
    setup_cmd: str = "setup"
    max_prompt_attempts: int | None = None
    log_level: str = "WARNING"
    log_file: Path | None = None

    def __post_init__(self) -> None:
        self.cwd = Path(self.cwd)
        self.env_file_names = tuple(self.env_file_names)
        self.log_level = self.log_level.upper()
        if self.log_file is not None:
            self.log_file = Path(self.log_file)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides: Any) -> "DevenvSettings":
        """Load settings from DEVENV_* environment variables.

        Args:
            environ: Environment to read (defaults to ``os.environ``)
            **overrides: Values that take precedence; None values are ignored
        """
        environ = environ if environ is not None else os.environ
        values: dict[str, Any] = {}

        if environ.get("DEVENV_FILE"):
            values["devenv_file"] = environ["DEVENV_FILE"]
        if environ.get("DEVENV_ENV_FILE"):
            values["env_file"] = environ["DEVENV_ENV_FILE"]
        if environ.get("DEVENV_ENV_FILES"):
            values["env_file_names"] = split_list(environ["DEVENV_ENV_FILES"])
        if environ.get("DEVENV_SETUP_CMD"):
            values["setup_cmd"] = environ["DEVENV_SETUP_CMD"]
        if environ.get("DEVENV_MAX_PROMPT_ATTEMPTS"):
            values["max_prompt_attempts"] = safe_int(environ["DEVENV_MAX_PROMPT_ATTEMPTS"])
        if environ.get("DEVENV_LOG_LEVEL"):
            values["log_level"] = environ["DEVENV_LOG_LEVEL"]
        if environ.get("DEVENV_LOG_FILE"):
            values["log_file"] = Path(environ["DEVENV_LOG_FILE"])

        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "DevenvSettings":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})

    @property
    def devenv_path(self) -> Path:
        return self.cwd / self.devenv_file

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level, logging.WARNING)

    def validate(self) -> ValidationResult:
        """Validate the settings."""
        errors: list[str] = []
        warnings: list[str] = []

        if not self.cwd.is_dir():
            errors.append(f"cwd: {self.cwd} is not a directory")

        for name, value in (("devenv_file", self.devenv_file), ("env_file", self.env_file)):
            is_valid, error = validate_relative_file_name(value, name)
            if not is_valid:
                errors.append(error)

        if not self.env_file_names:
            errors.append("env_file_names: at least one .env file name is required")
        for value in self.env_file_names:
            is_valid, error = validate_relative_file_name(value, "env_file_names")
            if not is_valid:
                errors.append(error)

        is_valid, error = validate_non_empty(self.setup_cmd, "setup_cmd")
        if not is_valid:
            errors.append(error)

        if self.max_prompt_attempts is not None and self.max_prompt_attempts < 1:
            errors.append(f"max_prompt_attempts must be at least 1, got {self.max_prompt_attempts}")

        if self.log_level not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level}")

        if self.env_file not in self.env_file_names:
            warnings.append(
                f"env_file {self.env_file} is not among the loaded env files "
                f"({', '.join(self.env_file_names)}); values written by setup "
                "will not be picked up on the next check"
            )

        return ValidationResult.from_messages(errors, warnings)

    def to_dict(self) -> dict[str, Any]:
        """Return the settings as a JSON friendly dictionary."""
        result = asdict(self)
        result["cwd"] = str(self.cwd)
        result["env_file_names"] = list(self.env_file_names)
        result["log_file"] = str(self.log_file) if self.log_file else None
        return result
