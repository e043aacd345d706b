"""
Reusable validation functions for requirement and settings values.

All validators return a tuple of (is_valid, error_message); error_message
is None if the value is valid.
"""

import re
import string
from pathlib import PurePath
from urllib.parse import urlparse


ENV_VAR_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# POSIX bracket classes and their Python character set equivalents
POSIX_CLASSES = {
    "alnum": "a-zA-Z0-9",
    "alpha": "a-zA-Z",
    "blank": " \\t",
    "cntrl": "\\x00-\\x1f\\x7f",
    "digit": "0-9",
    "graph": "\\x21-\\x7e",
    "lower": "a-z",
    "print": "\\x20-\\x7e",
    "punct": re.escape(string.punctuation),
    "space": " \\t\\n\\r\\f\\v",
    "upper": "A-Z",
    "xdigit": "0-9A-Fa-f",
}

_POSIX_CLASS = re.compile(r"\[:([a-z]+):\]")


def translate_posix_classes(pattern: str) -> str:
    """Rewrite POSIX bracket classes such as ``[[:digit:]]`` for Python's ``re``.

    Only ``[:name:]`` inside a bracket expression is rewritten; everything
    else is passed through unchanged.

    Raises:
        re.error: If the pattern names an unknown class
    """
    result: list[str] = []
    in_bracket = False
    i = 0

    while i < len(pattern):
        char = pattern[i]

        if char == "\\":
            result.append(pattern[i : i + 2])
            i += 2
            continue

        if in_bracket:
            match = _POSIX_CLASS.match(pattern, i)
            if match:
                name = match.group(1)
                if name not in POSIX_CLASSES:
                    raise re.error(f"unknown character class [:{name}:]", pattern, i)
                result.append(POSIX_CLASSES[name])
                i = match.end()
                continue
            if char == "]":
                in_bracket = False
        elif char == "[":
            in_bracket = True
            result.append(char)
            i += 1
            # A leading ^ negates, a ']' right after it is a literal member
            if pattern.startswith("^", i):
                result.append("^")
                i += 1
            if pattern.startswith("]", i):
                result.append("\\]")
                i += 1
            continue

        result.append(char)
        i += 1

    return "".join(result)


def compile_pattern(pattern: str) -> re.Pattern:
    """Compile an extended regular expression for matching variable values.

    POSIX bracket classes are supported and ``^``/``$`` match at line
    boundaries, like ``grep -E`` run over the value.
    """
    return re.compile(translate_posix_classes(pattern), re.MULTILINE)


def pattern_matches(pattern: str, value: str) -> bool:
    """Return True if ``pattern`` is found anywhere in ``value``."""
    return compile_pattern(pattern).search(value) is not None


def validate_env_var_name(name: str | None) -> tuple[bool, str | None]:
    """Validate an environment variable name.

    Args:
        name: The variable name to validate

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    if not name:
        return False, "Variable name is empty"

    if not ENV_VAR_NAME.match(name):
        return False, f"Invalid variable name: {name!r}"

    return True, None


def validate_regex(pattern: str | None) -> tuple[bool, str | None]:
    """Validate that a pattern compiles.

    An absent pattern is valid.
    """
    if pattern is None:
        return True, None

    try:
        compile_pattern(pattern)
    except re.error as e:
        return False, f"Invalid regex {pattern!r}: {e}"

    return True, None


def validate_url(url: str, *, require_https: bool = False) -> tuple[bool, str | None]:
    """Validate a URL.

    Args:
        url: The URL to validate
        require_https: If True, only HTTPS URLs are valid

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    if not url:
        return False, "URL is empty"

    try:
        parsed = urlparse(url)
    except ValueError as e:
        return False, f"Invalid URL format: {e}"

    if not parsed.scheme:
        return False, "URL missing scheme (http:// or https://)"

    if not parsed.netloc:
        return False, "URL missing host"

    if require_https and parsed.scheme != "https":
        return False, f"URL must use HTTPS, got {parsed.scheme}://"

    if parsed.scheme not in ("http", "https"):
        return False, f"URL scheme must be http or https, got {parsed.scheme}"

    return True, None


def validate_non_empty(value: str | None, field_name: str) -> tuple[bool, str | None]:
    """Validate that a value is not empty or None.

    Args:
        value: The value to check
        field_name: Name of the field for error messages
    """
    if value is None:
        return False, f"{field_name} is not set"

    if not value.strip():
        return False, f"{field_name} is empty"

    return True, None


def validate_relative_file_name(value: str | None, field_name: str) -> tuple[bool, str | None]:
    """Validate a file name that is joined onto the project directory."""
    is_valid, error = validate_non_empty(value, field_name)
    if not is_valid:
        return is_valid, error

    if PurePath(value).is_absolute():
        return False, f"{field_name} must be relative to the project directory, got {value}"

    return True, None
