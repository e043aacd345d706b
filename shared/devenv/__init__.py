"""
devenv - requirement checks and setup wizard for development environments.

This package provides:
- LinePrinter / visible_length: terminal banners, status lines, wrapping
- load_env_files / write_to_env_file: .env file handling
- DevenvConfig / Requirement: the devenv.json document
- RequirementChecker: requirement checks and the startup check
- SetupWizard: interactive remediation of unmet requirements
- each_system helpers: per-system output folding

Usage:
    from devenv import RequirementChecker, load_devenv_file

    config = load_devenv_file(root / "devenv.json")
    checker = RequirementChecker(root)
    report = checker.check_all(config.requirements)
    if not report.all_satisfied:
        print("Run `setup` to fix the environment")
"""

from .base import ConfigStatus, ValidationResult
from .checker import (
    CheckReport,
    CheckResult,
    FailureReason,
    RequirementChecker,
    check_env_var,
    check_file,
)
from .envfile import DEFAULT_ENV_FILES, load_env_files, read_env_file, write_to_env_file
from .project import add_to_gitignore, get_project_root
from .requirements import (
    DevenvConfig,
    InfoGroup,
    InfoItem,
    InvalidConfigurationError,
    Requirement,
    RequirementKind,
    load_devenv_file,
)
from .settings import DevenvSettings
from .systems import (
    DEFAULT_SYSTEMS,
    current_system,
    each_default,
    each_default_mapped,
    each_default_passthrough,
    each_system,
    each_system_mapped,
    each_system_passthrough,
)
from .terminal import LinePrinter, strip_ansi, visible_length
from .wizard import CommandRunner, PromptAborted, SetupWizard, UserPrompter


__all__ = [
    "CheckReport",
    "CheckResult",
    "CommandRunner",
    "ConfigStatus",
    "DEFAULT_ENV_FILES",
    "DEFAULT_SYSTEMS",
    "DevenvConfig",
    "DevenvSettings",
    "FailureReason",
    "InfoGroup",
    "InfoItem",
    "InvalidConfigurationError",
    "LinePrinter",
    "PromptAborted",
    "Requirement",
    "RequirementChecker",
    "RequirementKind",
    "SetupWizard",
    "UserPrompter",
    "ValidationResult",
    "add_to_gitignore",
    "check_env_var",
    "check_file",
    "current_system",
    "each_default",
    "each_default_mapped",
    "each_default_passthrough",
    "each_system",
    "each_system_mapped",
    "each_system_passthrough",
    "get_project_root",
    "load_devenv_file",
    "load_env_files",
    "read_env_file",
    "strip_ansi",
    "visible_length",
    "write_to_env_file",
]

__version__ = "0.1.0"
