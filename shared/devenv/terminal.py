"""
Terminal output helpers for the devenv tooling.

This module provides:
- visible_length / strip_ansi: measure text as it appears on screen
- LinePrinter: padded and wrapped lines, boxed banners, status lines,
  figlet titles and info trees
"""

import io
import os
import re
import shutil
import subprocess
import sys
from typing import Iterable, TextIO

from devenv_logging import get_logger


logger = get_logger("devenv", component="terminal")

# CSI sequences (colors, cursor movement) and OSC sequences (hyperlinks, titles)
ANSI_ESCAPE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")

DEFAULT_MAX_WIDTH = 100


class Colors:
    """Terminal color codes for formatted output."""

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    GRAY = "\033[38;5;242m"
    BOLD = "\033[1m"
    ITALIC_BOLD = "\033[3;1m"
    BOLD_GREEN = "\033[1;32m"
    BOLD_CYAN = "\033[36;1m"
    ENDC = "\033[0m"


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return ANSI_ESCAPE.sub("", text)


def visible_length(text: str) -> int:
    """Return the number of characters of text as shown on a terminal.

    ANSI escape sequences are ignored and unicode characters count as one
    character each.
    """
    return len(strip_ansi(text))


def emphasize(text: str) -> str:
    """Render text in bold italics, as used for names in status lines."""
    return f"{Colors.ITALIC_BOLD}{text}{Colors.ENDC}"


# Banner kind -> (color, title glyph)
BANNER_STYLES = {
    "error": (Colors.RED, "⚠ "),
    "warning": (Colors.YELLOW, "⚠ "),
    "success": (Colors.GREEN, "✓ "),
    "info": (Colors.CYAN, ""),
}

# Status kind -> (color, glyph)
STATUS_STYLES = {
    "error": (Colors.RED, "✕"),
    "warning": (Colors.YELLOW, "?"),
    "success": (Colors.GREEN, "✓"),
}


class LinePrinter:
    """Renders lines, banners and status lines to a terminal.

    Regular output goes to ``out`` and error status lines to ``err``. When
    colors are disabled, ANSI sequences are stripped right before writing;
    all padding is computed on visible length so the layout is identical
    either way.
    """

    def __init__(
        self,
        out: TextIO | None = None,
        err: TextIO | None = None,
        width: int | None = None,
        use_colors: bool | None = None,
        max_width: int = DEFAULT_MAX_WIDTH,
    ):
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.max_width = max_width
        self._width = width
        self.use_colors = use_colors if use_colors is not None else self._detect_color_support()

    def _detect_color_support(self) -> bool:
        if os.environ.get("NO_COLOR"):
            return False
        return hasattr(self.out, "isatty") and self.out.isatty()

    @property
    def width(self) -> int:
        """Banner width: the terminal width capped at ``max_width``."""
        if self._width is not None:
            return self._width
        try:
            columns = shutil.get_terminal_size().columns
        except (OSError, ValueError):
            columns = 80
        return min(columns, self.max_width)

    def muted(self) -> "LinePrinter":
        """Return a printer that discards regular output but keeps errors."""
        return LinePrinter(
            out=io.StringIO(),
            err=self.err,
            width=self._width,
            use_colors=self.use_colors,
            max_width=self.max_width,
        )

    def write(self, text: str, *, stream: TextIO | None = None) -> None:
        """Write raw text, stripping colors when they are disabled."""
        if not self.use_colors:
            text = strip_ansi(text)
        target = stream if stream is not None else self.out
        target.write(text)
        target.flush()

    def echo(self, text: str = "", *, error: bool = False) -> None:
        """Write a line of text."""
        self.write(text + "\n", stream=self.err if error else None)

    def print_padded(
        self,
        max_columns: int,
        before: str = "",
        after: str = "",
        fill_char: str = " ",
        *,
        stream: TextIO | None = None,
    ) -> None:
        """Fill a line with ``fill_char`` between ``before`` and ``after``.

        The visible length of the line never exceeds ``max_columns``.
        """
        count = max(0, max_columns - visible_length(before) - visible_length(after))
        self.write(f"{before}{fill_char * count}{after}\n", stream=stream)

    def print_wrapped(
        self,
        max_columns: int,
        before: str = "",
        after: str = "",
        text: str = "",
        *,
        stream: TextIO | None = None,
    ) -> None:
        """Print text word-wrapped between ``before`` and ``after``.

        Every word takes its visible length plus one trailing space. The
        last line is padded with spaces up to ``max_columns``.
        """
        available = max_columns - visible_length(before) - visible_length(after)
        lines: list[str] = []
        current = ""
        used = 0

        for word in text.split():
            word_len = visible_length(word) + 1
            if used and used + word_len > available:
                lines.append(f"{before}{current}{' ' * max(0, available - used)}{after}")
                current = ""
                used = 0
            current += f"{word} "
            used += word_len

        lines.append(f"{before}{current}{' ' * max(0, available - used)}{after}")
        self.write("\n".join(lines) + "\n", stream=stream)

    def print_banner(self, kind: str, title: str, body_lines: Iterable[str] = ()) -> None:
        """Print a boxed banner.

        Args:
            kind: One of "error", "warning", "success", "info"
            title: Banner title, prefixed with the kind's glyph
            body_lines: Content lines; an empty string renders a blank line
        """
        if kind not in BANNER_STYLES:
            raise ValueError(f"Unknown banner kind: {kind}")

        color, glyph = BANNER_STYLES[kind]
        gray = Colors.GRAY
        cols = self.width

        self.print_padded(cols, f"{gray} ┌", "┐ ", "─")
        self.print_wrapped(cols, f"{gray} │ {color}", f"{gray} │ ", f"{color}{glyph}{title}")
        self.print_padded(cols, f"{gray} │", f"{gray} │ ", " ")

        for line in body_lines:
            if not line:
                self.print_padded(cols, f"{gray} │", f"{gray} │ ", " ")
            else:
                self.print_wrapped(cols, f"{gray} │ {Colors.ENDC}", f"{gray} │ ", line)

        self.print_padded(cols, f"{gray} └", "┘ ", "─")
        self.write(Colors.ENDC)

    def print_status_line(self, kind: str, text: str, prefix: str = " ") -> None:
        """Print a one-line status like ``[✓] Environment variable X is set``.

        Error lines go to the error stream, everything else to the output
        stream.
        """
        if kind not in STATUS_STYLES:
            raise ValueError(f"Unknown status kind: {kind}")

        color, glyph = STATUS_STYLES[kind]
        line = f"{prefix}{Colors.GRAY}[{color}{glyph}{Colors.GRAY}]{Colors.ENDC} {text}\n"
        self.write(line, stream=self.err if kind == "error" else None)

    def print_rule(self) -> None:
        """Print a gray horizontal rule across the banner width."""
        self.print_padded(self.width, f"{Colors.GRAY} ", f"{Colors.ENDC} ", "─")

    def print_note(self, text: str, *, color: str = Colors.GRAY, indent: str = "   ") -> None:
        """Print an indented ``🛈`` note line."""
        self.echo(f"{color}{indent}🛈 {text}{Colors.ENDC}")

    def print_details(
        self,
        description: str | None,
        link: str | None,
        *,
        error: bool = False,
    ) -> None:
        """Print an optional description and link as a small gray tree."""
        if description:
            symbol = "├" if link else "└"
            self.echo(f"   {Colors.GRAY}{symbol} {description}{Colors.ENDC}", error=error)
        if link:
            self.echo(f"   {Colors.GRAY}└ Link: {link}{Colors.ENDC}", error=error)

    def print_figlet(self, text: str, prefix: str = f"{Colors.BOLD_GREEN}  ") -> None:
        """Print text as a figlet title.

        Uses the ``figlet`` binary when available and falls back to the
        plain bold text.
        """
        if not text:
            return

        rendered: list[str] | None = None
        figlet = shutil.which("figlet")
        if figlet:
            try:
                result = subprocess.run(
                    [figlet, "-f", "small", text],
                    capture_output=True,
                    text=True,
                    check=True,
                )
                rendered = result.stdout.rstrip("\n").splitlines()
            except (OSError, subprocess.CalledProcessError) as e:
                logger.debug("figlet failed, using plain title", error=str(e))

        if rendered is None:
            rendered = [f"{Colors.BOLD}{text}"]

        for line in rendered:
            self.echo(f"{prefix}{line}")
        self.write(Colors.ENDC)

    def print_info(self, groups) -> None:
        """Print info groups as a tree.

        Args:
            groups: Iterable of objects with ``name`` and ``items``, each item
                having ``name`` and an optional ``description``
        """
        for group in groups:
            self.echo(f" {Colors.BOLD_CYAN}{group.name}:{Colors.ENDC}")

            items = list(group.items)
            for index, item in enumerate(items, start=1):
                symbol = "└" if index == len(items) else "├"
                line = f"   {symbol} {item.name}"
                if item.description:
                    line += f" {Colors.GRAY}# {item.description}{Colors.ENDC}"
                self.echo(line)

            self.echo()
