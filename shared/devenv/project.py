"""
Project level helpers: root discovery and .gitignore maintenance.
"""

from pathlib import Path

from devenv_logging import get_logger


logger = get_logger("devenv", component="project")


def get_project_root(anchor: str = "flake.nix", start: Path | None = None) -> Path:
    """Find the project root by searching upwards for an anchor file.

    Args:
        anchor: File that marks the project root
        start: Directory to start from (defaults to the current directory)

    Returns:
        The first directory containing ``anchor``, or the filesystem root
        if no directory does
    """
    current = (start or Path.cwd()).resolve()

    for candidate in (current, *current.parents):
        if (candidate / anchor).exists():
            return candidate

    return Path(current.anchor)


def add_to_gitignore(cwd: Path, line: str) -> bool:
    """Add a line to ``.gitignore`` unless it is already present.

    Creates the file if it does not exist.

    Returns:
        True if the line was appended, False if it already existed
    """
    gitignore = Path(cwd) / ".gitignore"
    gitignore.touch(exist_ok=True)

    content = gitignore.read_text()
    if line in content.splitlines():
        return False

    with open(gitignore, "a") as f:
        if content and not content.endswith("\n"):
            f.write("\n")
        f.write(f"{line}\n")

    logger.debug("Added line to .gitignore", line=line)
    return True
