"""
Loading and writing of .env style files.

Files hold ``KEY=value`` lines. Parsing and writing are delegated to
python-dotenv. Values that are not purely alphanumeric are written single
quoted, and files are read without variable expansion, so a written value
loads back unchanged.
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, MutableMapping

from dotenv import dotenv_values, set_key

from devenv_logging import get_logger

from .terminal import Colors


if TYPE_CHECKING:
    from .terminal import LinePrinter


logger = get_logger("devenv", component="envfile")

DEFAULT_ENV_FILES = (".env", ".env.local")


def read_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file without touching the environment.

    Args:
        path: Path to the .env file

    Returns:
        Dictionary of key-value pairs. Keys without a value map to "".
        A missing file gives an empty dictionary.
    """
    if not path.is_file():
        return {}

    values = dotenv_values(path, interpolate=False)
    return {key: value if value is not None else "" for key, value in values.items()}


def load_env_files(
    cwd: Path,
    file_names: Iterable[str] = DEFAULT_ENV_FILES,
    env: MutableMapping[str, str] | None = None,
    *,
    verbose: bool = False,
    printer: "LinePrinter | None" = None,
) -> bool:
    """Load .env files into an environment mapping.

    Files are loaded in order, so later files override keys from earlier
    ones as well as values already present in the environment.

    Args:
        cwd: Directory the file names are relative to
        file_names: The .env files to load
        env: Target mapping (defaults to ``os.environ``)
        verbose: Print a line for every loaded file
        printer: Printer used for verbose output

    Returns:
        True if at least one file was loaded, False otherwise
    """
    target = env if env is not None else os.environ
    found = False

    for name in file_names:
        path = Path(cwd) / name
        if not path.is_file():
            continue

        values = read_env_file(path)
        target.update(values)
        found = True

        logger.debug("Loaded env file", file=str(path), keys=len(values))
        if verbose and printer is not None:
            printer.echo(f"{Colors.GRAY} 🛈 Loaded env variables from file: {name}{Colors.ENDC}")

    return found


def write_to_env_file(path: Path, key: str, value: str) -> None:
    """Write a single ``key=value`` line to a .env file.

    The file is created if it does not exist. An existing line for the key
    is replaced in place, otherwise the line is appended. Plain alphanumeric
    values are written bare, anything else in single quotes.

    Args:
        path: Path to the .env file
        key: Variable name
        value: Literal value

    Raises:
        OSError: If the file cannot be created or written
    """
    path = Path(path)
    path.touch(exist_ok=True)
    # set_key escapes quotes but not backslashes; the reader decodes both
    set_key(path, key, value.replace("\\", "\\\\"), quote_mode="auto")
    logger.debug("Wrote env var", file=str(path), key=key)
