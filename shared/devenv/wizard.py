"""
Interactive setup wizard.

Walks over the requirements of a devenv file and remedies every unmet one,
either by running its generator command or by asking the user, then runs
the full requirements check again.
"""

import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, MutableMapping

from devenv_logging import get_logger

from .checker import RequirementChecker, resolve_path
from .envfile import DEFAULT_ENV_FILES, write_to_env_file
from .requirements import DevenvConfig, Requirement, RequirementKind
from .terminal import Colors, LinePrinter, emphasize
from .validators import pattern_matches


logger = get_logger("devenv", component="wizard")


class PromptAborted(Exception):
    """Raised when the user gives up on a prompt (EOF or too many attempts)."""


class UserPrompter:
    """Handles user input prompts with validation."""

    def __init__(
        self,
        printer: LinePrinter,
        input_func: Callable[[str], str] | None = None,
        max_attempts: int | None = None,
    ):
        """
        Args:
            printer: Printer for prompt decorations and errors
            input_func: Reads one line of input given a prompt text (default: input)
            max_attempts: Give up after this many invalid answers (None = ask forever)
        """
        self.printer = printer
        self.input_func = input_func or input
        self.max_attempts = max_attempts

    def prompt_value(
        self,
        name: str,
        description: str | None = None,
        link: str | None = None,
        regex: str | None = None,
    ) -> str:
        """Ask for a value until it is non-empty and matches ``regex``.

        Returns:
            The stripped value

        Raises:
            PromptAborted: On end of input or when max_attempts is exceeded
        """
        self.printer.echo(f" Enter value for: {emphasize(name)}", error=True)
        self.printer.print_details(description, link, error=True)
        self.printer.echo(error=True)

        attempts = 0
        while self.max_attempts is None or attempts < self.max_attempts:
            attempts += 1
            try:
                value = self.input_func("   Value: ").strip()
            except EOFError:
                raise PromptAborted(f"No input available for {name}") from None

            if not value:
                continue

            if regex and not pattern_matches(regex, value):
                self.printer.echo(f"     {Colors.RED}Input did not match {regex}!{Colors.ENDC}", error=True)
                continue

            return value

        raise PromptAborted(f"No valid value for {name} after {attempts} attempts")


@dataclass
class CommandResult:
    """Result of a generator command."""

    returncode: int
    stdout: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs generator commands as child processes without a shell."""

    def __init__(self, cwd: Path, env: MutableMapping[str, str] | None = None):
        self.cwd = Path(cwd)
        self.env = env

    def _process_env(self) -> dict[str, str] | None:
        return dict(self.env) if self.env is not None else None

    def capture(self, command: str, on_stderr_line: Callable[[str], None]) -> CommandResult:
        """Run a command and capture its standard output.

        Standard error lines are handed to ``on_stderr_line``.

        Output that is not valid UTF-8 is decoded with replacement characters.

        Raises:
            OSError: If the command cannot be started
            ValueError: If the command line has unbalanced quotes
        """
        result = subprocess.run(
            shlex.split(command),
            cwd=self.cwd,
            env=self._process_env(),
            capture_output=True,
            text=True,
            errors="replace",
        )
        for line in result.stderr.splitlines():
            on_stderr_line(line)
        return CommandResult(result.returncode, result.stdout)

    def stream(self, command: str, on_line: Callable[[str], None]) -> CommandResult:
        """Run a command, handing every output line to ``on_line`` as it arrives.

        Output that is not valid UTF-8 is decoded with replacement characters.

        Raises:
            OSError: If the command cannot be started
            ValueError: If the command line has unbalanced quotes
        """
        with subprocess.Popen(
            shlex.split(command),
            cwd=self.cwd,
            env=self._process_env(),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        ) as process:
            for line in process.stdout:
                on_line(line.rstrip("\n"))
        return CommandResult(process.returncode)


def expand_command(template: str, requirement: Requirement, cwd: Path) -> str:
    """Substitute ``#name#``, ``#regex#``, ``#path#`` and ``#abs_path#`` in a command."""
    path = requirement.path or ""
    abs_path = str(resolve_path(path, cwd).resolve()) if path else ""
    replacements = {
        "#name#": requirement.name or "",
        "#regex#": requirement.regex or "",
        "#path#": path,
        "#abs_path#": abs_path,
    }
    for placeholder, value in replacements.items():
        template = template.replace(placeholder, value)
    return template


class SetupWizard:
    """Interactive and automated remediation of unmet requirements.

    States: banner -> load env files -> one step per unmet requirement ->
    final check. No single step is fatal; the final check decides.
    """

    def __init__(
        self,
        config: DevenvConfig,
        cwd: Path,
        env_file: str = ".env.local",
        env: MutableMapping[str, str] | None = None,
        printer: LinePrinter | None = None,
        prompter: UserPrompter | None = None,
        runner: CommandRunner | None = None,
        env_file_names: Iterable[str] = DEFAULT_ENV_FILES,
        setup_cmd: str = "setup",
    ):
        self.config = config
        self.cwd = Path(cwd)
        self.env_file = env_file
        self.env = env if env is not None else os.environ
        self.printer = printer or LinePrinter()
        self.prompter = prompter or UserPrompter(self.printer)
        self.runner = runner or CommandRunner(self.cwd, self.env)
        self.checker = RequirementChecker(
            self.cwd,
            env=self.env,
            printer=self.printer,
            env_file_names=env_file_names,
            setup_cmd=setup_cmd,
        )

    @property
    def env_file_path(self) -> Path:
        return self.cwd / self.env_file

    def run(self) -> bool:
        """Run the wizard.

        Returns:
            True if every requirement is satisfied at the end
        """
        self.printer.print_banner(
            "info",
            "Interactive Setup Wizard",
            ["This wizard will help you set up the development environment."],
        )

        self.checker.load_env(verbose=True)
        self.printer.echo()

        quiet = self.printer.muted()
        for requirement in self.config.requirements:
            if self.checker.check(requirement, quiet).satisfied:
                continue

            self.printer.echo()
            if requirement.kind is RequirementKind.ENV:
                self._resolve_env(requirement)
            else:
                self._resolve_file(requirement)
            self.printer.echo()

        return self._final_check()

    def _resolve_env(self, requirement: Requirement) -> None:
        log = logger.with_context(requirement=requirement.name)

        if requirement.command:
            command = expand_command(requirement.command, requirement, self.cwd)
            self.printer.print_note(f"Generating env var from command: {command}")
            log.debug("Running generator command", command=command)

            try:
                result = self.runner.capture(command, self._print_command_output)
            except (OSError, ValueError) as e:
                log.warning("Generator command could not be started", command=command, error=str(e))
                self._print_command_output(str(e))
                return

            if not result.ok:
                log.warning("Generator command failed", command=command, returncode=result.returncode)
                return

            self._store(requirement.name, result.stdout.strip())
            return

        try:
            value = self.prompter.prompt_value(
                requirement.name,
                description=requirement.description,
                link=requirement.link,
                regex=requirement.regex,
            )
        except PromptAborted as e:
            log.info("Prompt aborted", reason=str(e))
            self.printer.echo(
                f"     {Colors.YELLOW}Skipped {requirement.name}: {e}{Colors.ENDC}", error=True
            )
            return

        self._store(requirement.name, value)

    def _resolve_file(self, requirement: Requirement) -> None:
        log = logger.with_context(requirement=requirement.path)

        if requirement.command:
            command = expand_command(requirement.command, requirement, self.cwd)
            self.printer.print_note(f"Generating file from command: {command}")
            log.debug("Running generator command", command=command)

            try:
                result = self.runner.stream(command, self._print_command_output)
            except (OSError, ValueError) as e:
                log.warning("Generator command could not be started", command=command, error=str(e))
                self._print_command_output(str(e))
                return

            if not result.ok:
                log.warning("Generator command failed", command=command, returncode=result.returncode)
            return

        self.printer.print_note(
            f"Please manually create the file at: {requirement.path}", color=Colors.YELLOW
        )
        self.printer.print_details(requirement.description, requirement.link)

    def _print_command_output(self, line: str) -> None:
        self.printer.echo(f"     {Colors.GRAY}> {Colors.ENDC}{line}")

    def _store(self, name: str, value: str) -> None:
        write_to_env_file(self.env_file_path, name, value)
        self.env[name] = value

    def _final_check(self) -> bool:
        self.printer.echo()
        self.printer.print_rule()
        self.printer.echo()
        self.printer.echo(" 🛈 Running requirements check...")
        self.printer.echo()

        report = self.checker.check_all(self.config.requirements)
        self.printer.echo()

        if report.all_satisfied:
            self.printer.print_banner(
                "success",
                "Setup complete",
                ["Please exit and re-enter the dev shell for changes to take effect!"],
            )
            return True

        self.printer.print_banner(
            "warning",
            "Setup non-successful",
            [
                "The requirements check did not succeed!",
                "",
                "Please re-run setup and check logs for any problems.",
            ],
        )
        return False
