"""
CLI tool for checking and setting up a development environment.

Usage:
    devenv check                     # Check all requirements
    devenv startup-check --title X   # Quiet check for shell startup
    devenv setup                     # Interactive setup wizard
    devenv info                      # Show info groups from the devenv file
    devenv validate                  # Validate settings and the devenv file
    devenv env                       # Print .env files as shell exports
    devenv write-env KEY VALUE       # Write one value to the .env file
    devenv gitignore LINE            # Add a line to .gitignore
    devenv systems                   # Show default and current Nix systems
"""

import argparse
import json
import shlex
import sys
from pathlib import Path

from devenv_logging import configure_logging, get_logger

from .base import ConfigStatus, ValidationResult
from .checker import RequirementChecker
from .envfile import read_env_file, write_to_env_file
from .project import add_to_gitignore, get_project_root
from .requirements import DevenvConfig, InvalidConfigurationError, load_devenv_file
from .settings import DevenvSettings
from .systems import DEFAULT_SYSTEMS, current_system, each_default_mapped
from .terminal import LinePrinter
from .validators import validate_env_var_name
from .wizard import SetupWizard, UserPrompter


logger = get_logger("devenv", component="cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def _load_config(settings: DevenvSettings) -> DevenvConfig:
    return load_devenv_file(settings.devenv_path)


def _checker(settings: DevenvSettings, printer: LinePrinter) -> RequirementChecker:
    return RequirementChecker(
        settings.cwd,
        printer=printer,
        env_file_names=settings.env_file_names,
        setup_cmd=settings.setup_cmd,
    )


def cmd_check(args: argparse.Namespace, settings: DevenvSettings) -> int:
    """Check all requirements and return exit code."""
    config = _load_config(settings)
    printer = LinePrinter()

    if args.json:
        report = _checker(settings, printer).check_all(config.requirements, printer=printer.muted())
        print(json.dumps(report.to_dict(), indent=2))
    else:
        report = _checker(settings, printer).check_all(config.requirements)

    return EXIT_OK if report.all_satisfied else EXIT_FAILED


def cmd_startup_check(args: argparse.Namespace, settings: DevenvSettings) -> int:
    """Run the startup check and return exit code."""
    config = _load_config(settings)
    checker = _checker(settings, LinePrinter())
    return EXIT_OK if checker.startup_check(args.title or "", config.requirements) else EXIT_FAILED


def cmd_setup(args: argparse.Namespace, settings: DevenvSettings) -> int:
    """Run the setup wizard and return exit code."""
    config = _load_config(settings)
    printer = LinePrinter()
    wizard = SetupWizard(
        config,
        settings.cwd,
        env_file=settings.env_file,
        printer=printer,
        prompter=UserPrompter(printer, max_attempts=settings.max_prompt_attempts),
        env_file_names=settings.env_file_names,
        setup_cmd=settings.setup_cmd,
    )
    return EXIT_OK if wizard.run() else EXIT_FAILED


def cmd_info(args: argparse.Namespace, settings: DevenvSettings) -> int:
    """Print the info groups of the devenv file."""
    config = _load_config(settings)
    LinePrinter().print_info(config.info_groups)
    return EXIT_OK


def _print_validation_result(name: str, result: ValidationResult, *, verbose: bool = False) -> None:
    """Print a single validation result."""
    status_icons = {
        ConfigStatus.VALID: "[OK]",
        ConfigStatus.INVALID: "[FAIL]",
        ConfigStatus.DEGRADED: "[WARN]",
    }
    icon = status_icons.get(result.status, "[?]")
    print(f"{icon} {name}: {result.status.value}")

    for error in result.errors:
        print(f"      ERROR: {error}")

    if verbose or result.status == ConfigStatus.DEGRADED:
        for warning in result.warnings:
            print(f"      WARNING: {warning}")


def cmd_validate(args: argparse.Namespace, settings: DevenvSettings) -> int:
    """Validate settings and the devenv file and return exit code."""
    settings_result = settings.validate()
    _print_validation_result("settings", settings_result, verbose=args.verbose)

    try:
        config_result = _load_config(settings).validate()
    except InvalidConfigurationError as e:
        config_result = ValidationResult.invalid([str(e)])
    _print_validation_result(settings.devenv_file, config_result, verbose=args.verbose)

    if args.verbose:
        print()
        print(json.dumps(settings.to_dict(), indent=2))

    if settings_result.is_valid and config_result.is_valid:
        print("\nConfiguration valid.")
        return EXIT_OK

    print("\nConfiguration has errors.")
    return EXIT_FAILED


def cmd_env(args: argparse.Namespace, settings: DevenvSettings) -> int:
    """Print the values of .env files as shell export statements."""
    names = args.files or settings.env_file_names
    values: dict[str, str] = {}
    found = False

    for name in names:
        path = settings.cwd / name
        if path.is_file():
            values.update(read_env_file(path))
            found = True

    for key, value in values.items():
        print(f"export {key}={shlex.quote(value)}")

    if not found:
        print(f"No env file found in {settings.cwd}: {', '.join(names)}", file=sys.stderr)
        return EXIT_FAILED
    return EXIT_OK


def cmd_write_env(args: argparse.Namespace, settings: DevenvSettings) -> int:
    """Write one variable to the .env file."""
    is_valid, error = validate_env_var_name(args.key)
    if not is_valid:
        print(error, file=sys.stderr)
        return EXIT_USAGE

    write_to_env_file(settings.cwd / settings.env_file, args.key, args.value)
    return EXIT_OK


def cmd_gitignore(args: argparse.Namespace, settings: DevenvSettings) -> int:
    """Add a line to the project's .gitignore."""
    add_to_gitignore(settings.cwd, args.line)
    return EXIT_OK


def cmd_systems(args: argparse.Namespace, settings: DevenvSettings) -> int:
    """Print the default systems and the current system."""
    if args.mapped:
        result = each_default_mapped(lambda system: {"current": system == current_system()})
    else:
        result = {"defaultSystems": list(DEFAULT_SYSTEMS), "currentSystem": current_system()}
    print(json.dumps(result, indent=2))
    return EXIT_OK


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="devenv",
        description="Check and set up the requirements of a development environment.",
    )
    parser.add_argument("--cwd", type=Path, help="Project directory (default: nearest flake.nix)")
    parser.add_argument("--devenv-file", help="Requirements document (default: devenv.json)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", type=Path, help="Also write JSON logs to this file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # check command
    check_parser = subparsers.add_parser("check", help="Check all requirements")
    check_parser.add_argument("--setup-cmd", help="Setup command shown in hints")
    check_parser.add_argument("--json", "-j", action="store_true", help="Output the report as JSON")

    # startup-check command
    startup_parser = subparsers.add_parser("startup-check", help="Quiet check for shell startup")
    startup_parser.add_argument("--title", "-t", default="", help="Title printed as figlet")
    startup_parser.add_argument("--setup-cmd", help="Setup command shown in hints")

    # setup command
    setup_parser = subparsers.add_parser("setup", help="Run the interactive setup wizard")
    setup_parser.add_argument("--env-file", help=".env file to write to (default: .env.local)")
    setup_parser.add_argument(
        "--max-attempts", type=int, help="Give up a prompt after this many invalid answers"
    )

    # info command
    subparsers.add_parser("info", help="Show info groups from the devenv file")

    # validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Validate settings and devenv file (-v shows warnings)"
    )
    # Absent flag must not reset the global --verbose
    validate_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Show warnings and effective settings",
    )

    # env command
    env_parser = subparsers.add_parser("env", help="Print .env files as shell exports")
    env_parser.add_argument("files", nargs="*", help="Env files to read (default: .env .env.local)")

    # write-env command
    write_parser = subparsers.add_parser("write-env", help="Write a value to the .env file")
    write_parser.add_argument("--env-file", help=".env file to write to (default: .env.local)")
    write_parser.add_argument("key", help="Variable name")
    write_parser.add_argument("value", help="Variable value")

    # gitignore command
    gitignore_parser = subparsers.add_parser("gitignore", help="Add a line to .gitignore")
    gitignore_parser.add_argument("line", help="Line to add")

    # systems command
    systems_parser = subparsers.add_parser("systems", help="Show default and current systems")
    systems_parser.add_argument(
        "--mapped", action="store_true", help="Show a mapping keyed by system"
    )

    return parser


def build_settings(args: argparse.Namespace) -> DevenvSettings:
    """Combine environment settings with command line flags."""
    cwd = args.cwd if args.cwd is not None else get_project_root()
    return DevenvSettings.from_env(
        cwd=cwd,
        devenv_file=args.devenv_file,
        env_file=getattr(args, "env_file", None),
        setup_cmd=getattr(args, "setup_cmd", None),
        max_prompt_attempts=getattr(args, "max_attempts", None),
        log_level="DEBUG" if args.verbose else None,
        log_file=args.log_file,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for unmet requirements, 2 for usage errors)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    commands = {
        "check": cmd_check,
        "startup-check": cmd_startup_check,
        "setup": cmd_setup,
        "info": cmd_info,
        "validate": cmd_validate,
        "env": cmd_env,
        "write-env": cmd_write_env,
        "gitignore": cmd_gitignore,
        "systems": cmd_systems,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return EXIT_USAGE

    settings = build_settings(args)
    configure_logging(settings.log_level_number, settings.log_file)

    if handler is not cmd_validate:
        result = settings.validate()
        if not result.is_valid:
            for error in result.errors:
                print(f"Invalid settings: {error}", file=sys.stderr)
            return EXIT_USAGE

    try:
        return handler(args, settings)
    except InvalidConfigurationError as e:
        logger.debug("Invalid devenv file", error=str(e))
        LinePrinter(out=sys.stderr).print_banner("error", "Invalid devenv file", [str(e)])
        return EXIT_USAGE
    except KeyboardInterrupt:
        print("\n\nSetup cancelled by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
