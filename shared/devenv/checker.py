"""
Requirement checks.

check_env_var and check_file evaluate a single requirement;
RequirementChecker evaluates a whole devenv file, prints one status line
per requirement and aggregates the results into a CheckReport.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping, MutableMapping

from devenv_logging import get_logger

from .envfile import DEFAULT_ENV_FILES, load_env_files
from .requirements import Requirement, RequirementKind
from .terminal import Colors, LinePrinter, emphasize
from .validators import pattern_matches


logger = get_logger("devenv", component="checker")


class FailureReason(Enum):
    """Why a requirement is not satisfied."""

    MISSING_ENV_VAR = "missing_env_var"
    ENV_VAR_REGEX_MISMATCH = "env_var_regex_mismatch"
    MISSING_FILE = "missing_file"


@dataclass
class CheckResult:
    """Outcome of checking one requirement."""

    requirement: Requirement
    satisfied: bool
    failure: FailureReason | None = None

    def __bool__(self) -> bool:
        return self.satisfied

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.requirement.kind.value,
            "target": self.requirement.name_or_path,
            "satisfied": self.satisfied,
            "failure": self.failure.value if self.failure else None,
        }


@dataclass
class CheckReport:
    """Aggregated results of one requirements check.

    Attributes:
        results: Individual results in requirement order
        env_files_found: Whether any .env file was loaded before checking
    """

    results: list[CheckResult] = field(default_factory=list)
    env_files_found: bool = False

    @property
    def all_satisfied(self) -> bool:
        return all(result.satisfied for result in self.results)

    @property
    def failed(self) -> list[CheckResult]:
        return [result for result in self.results if not result.satisfied]

    def __bool__(self) -> bool:
        return self.all_satisfied

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "all_satisfied": self.all_satisfied,
            "env_files_found": self.env_files_found,
            "results": [result.to_dict() for result in self.results],
        }


def _env_requirement(name: str, regex: str | None) -> Requirement:
    return Requirement(kind=RequirementKind.ENV, name=name, regex=regex)


def check_env_var(
    name: str,
    regex: str | None = None,
    env: Mapping[str, str] | None = None,
    printer: LinePrinter | None = None,
    *,
    requirement: Requirement | None = None,
) -> CheckResult:
    """Check that an environment variable is set and matches a pattern.

    A variable that is set to the empty string counts as set. The pattern
    is an extended regular expression, POSIX bracket classes included. It
    is searched anywhere in the value, with ``^`` and ``$`` matching at
    line boundaries.

    Args:
        name: Variable name
        regex: Optional pattern the value must match
        env: Environment to check (defaults to ``os.environ``)
        printer: If given, a status line is printed

    Returns:
        CheckResult for the variable
    """
    source = env if env is not None else os.environ
    requirement = requirement or _env_requirement(name, regex)

    if name not in source:
        if printer is not None:
            printer.print_status_line("error", f"Environment variable {emphasize(name)} is not defined")
        return CheckResult(requirement, False, FailureReason.MISSING_ENV_VAR)

    if regex and not pattern_matches(regex, source[name]):
        if printer is not None:
            printer.print_status_line(
                "error", f"Environment variable {emphasize(name)} did not match: {regex}"
            )
        return CheckResult(requirement, False, FailureReason.ENV_VAR_REGEX_MISMATCH)

    if printer is not None:
        printer.print_status_line("success", f"Environment variable {emphasize(name)} is set")
    return CheckResult(requirement, True)


def resolve_path(path: str, cwd: Path | None = None) -> Path:
    """Resolve a requirement path against the project directory."""
    candidate = Path(path)
    if candidate.is_absolute() or cwd is None:
        return candidate
    return Path(cwd) / candidate


def _display_path(path: str, cwd: Path | None) -> str:
    if cwd is None:
        return path
    try:
        return f"./{resolve_path(path, cwd).relative_to(cwd)}"
    except ValueError:
        return path


def check_file(
    path: str,
    cwd: Path | None = None,
    printer: LinePrinter | None = None,
    *,
    requirement: Requirement | None = None,
) -> CheckResult:
    """Check that a regular file exists.

    Args:
        path: Absolute path, or path relative to ``cwd``
        cwd: Base directory for relative paths
        printer: If given, a status line is printed

    Returns:
        CheckResult for the file
    """
    requirement = requirement or Requirement(kind=RequirementKind.FILE, path=path)
    shown = _display_path(path, cwd)

    if not resolve_path(path, cwd).is_file():
        if printer is not None:
            printer.print_status_line("error", f"File {emphasize(shown)} does not exist")
        return CheckResult(requirement, False, FailureReason.MISSING_FILE)

    if printer is not None:
        printer.print_status_line("success", f"File {emphasize(shown)} exists")
    return CheckResult(requirement, True)


class RequirementChecker:
    """Evaluates requirements against an environment and a project directory.

    The environment is an explicit mapping (``os.environ`` by default); .env
    files are loaded into it before every full check.
    """

    def __init__(
        self,
        cwd: Path,
        env: MutableMapping[str, str] | None = None,
        printer: LinePrinter | None = None,
        env_file_names: Iterable[str] = DEFAULT_ENV_FILES,
        setup_cmd: str = "setup",
    ):
        self.cwd = Path(cwd)
        self.env = env if env is not None else os.environ
        self.printer = printer or LinePrinter()
        self.env_file_names = tuple(env_file_names)
        self.setup_cmd = setup_cmd

    def check(self, requirement: Requirement, printer: LinePrinter | None = None) -> CheckResult:
        """Check a single requirement, printing a status line if a printer is given."""
        if requirement.kind is RequirementKind.ENV:
            return check_env_var(
                requirement.name, requirement.regex, self.env, printer, requirement=requirement
            )
        return check_file(requirement.path, self.cwd, printer, requirement=requirement)

    def load_env(self, *, verbose: bool = False, printer: LinePrinter | None = None) -> bool:
        """Load the configured .env files into the environment."""
        return load_env_files(
            self.cwd,
            self.env_file_names,
            self.env,
            verbose=verbose,
            printer=printer or self.printer,
        )

    def check_all(
        self, requirements: Iterable[Requirement], printer: LinePrinter | None = None
    ) -> CheckReport:
        """Load .env files and check every requirement.

        All requirements are evaluated, even after a failure, so the full
        status is shown.
        """
        printer = printer or self.printer
        report = CheckReport(env_files_found=self.load_env())

        if not report.env_files_found:
            names = " nor a ".join(self.env_file_names) if self.env_file_names else "no"
            printer.print_banner(
                "warning",
                "No env files found!",
                [
                    f"Neither a {names} file could be found in project root folder.",
                    "",
                    f"{Colors.CYAN}Please type `{self.setup_cmd}` to start the setup wizard.",
                ],
            )
            printer.echo()

        for requirement in requirements:
            report.results.append(self.check(requirement, printer))

        logger.debug(
            "Requirements checked",
            total=len(report.results),
            failed=len(report.failed),
        )
        return report

    def startup_check(self, title: str, requirements: Iterable[Requirement]) -> bool:
        """Quick check meant for shell startup.

        Prints the title, checks silently (only errors are shown) and prints
        a banner pointing at the setup wizard when something is missing.

        Returns:
            True if all requirements are satisfied
        """
        self.printer.print_figlet(title)

        report = self.check_all(requirements, printer=self.printer.muted())
        if report.all_satisfied:
            return True

        self.printer.echo()
        self.printer.print_banner(
            "error",
            "Devenv not functional",
            [
                "The development environment is not yet fully functional.",
                "",
                f"{Colors.CYAN}Please type `{self.setup_cmd}` to start the setup wizard "
                "to add missing requirements.",
            ],
        )
        return False
