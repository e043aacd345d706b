"""
Requirement model and the devenv configuration document.

A devenv file (``devenv.json`` by default, YAML is accepted too) declares
the requirements of a development environment and optional info groups:

    {
      "requirements": [
        {"type": "env", "name": "API_KEY", "regex": "^[a-z0-9]+$",
         "description": "Key for the API", "link": "https://...",
         "command": null},
        {"type": "file", "path": "certs/dev.pem", "command": "mkcert #abs_path#"}
      ],
      "info": {"groups": [{"name": "Commands", "items": [{"name": "setup"}]}]}
    }
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .base import ValidationResult
from .validators import validate_env_var_name, validate_non_empty, validate_regex, validate_url


class InvalidConfigurationError(ValueError):
    """Raised when a devenv file is missing, malformed or incomplete."""


class RequirementKind(Enum):
    """Kind of requirement."""

    ENV = "env"
    FILE = "file"


def _optional(data: dict[str, Any], key: str) -> str | None:
    """Read an optional string field; null and empty strings are absent."""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidConfigurationError(f"Field {key!r} must be a string, got {type(value).__name__}")
    return value or None


@dataclass(frozen=True)
class Requirement:
    """A declared precondition of the development environment.

    Attributes:
        kind: ENV for an environment variable, FILE for a file
        name: Variable name (ENV requirements)
        path: File path, absolute or relative to the project (FILE requirements)
        regex: Pattern the variable value must match
        description: Human readable explanation
        link: URL with further help
        command: Generator command template
    """

    kind: RequirementKind
    name: str | None = None
    path: str | None = None
    regex: str | None = None
    description: str | None = None
    link: str | None = None
    command: str | None = None

    def __post_init__(self) -> None:
        if self.kind is RequirementKind.ENV:
            is_valid, error = validate_env_var_name(self.name)
            if not is_valid:
                raise InvalidConfigurationError(f"env requirement: {error}")
        else:
            is_valid, error = validate_non_empty(self.path, "path")
            if not is_valid:
                raise InvalidConfigurationError(f"file requirement: {error}")

        is_valid, error = validate_regex(self.regex)
        if not is_valid:
            raise InvalidConfigurationError(error)

    @property
    def name_or_path(self) -> str:
        """The variable name for ENV requirements, the path for FILE ones."""
        if self.kind is RequirementKind.ENV:
            return self.name
        return self.path

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Requirement":
        """Parse one entry of the ``requirements`` list."""
        if not isinstance(data, dict):
            raise InvalidConfigurationError(f"Requirement must be an object, got {data!r}")

        raw_type = data.get("type")
        try:
            kind = RequirementKind(raw_type)
        except ValueError:
            raise InvalidConfigurationError(
                f"Unknown requirement type {raw_type!r} (expected 'env' or 'file')"
            ) from None

        return cls(
            kind=kind,
            name=_optional(data, "name") if kind is RequirementKind.ENV else None,
            path=_optional(data, "path") if kind is RequirementKind.FILE else None,
            regex=_optional(data, "regex"),
            description=_optional(data, "description"),
            link=_optional(data, "link"),
            command=_optional(data, "command"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert back to the document representation."""
        result: dict[str, Any] = {"type": self.kind.value}
        if self.kind is RequirementKind.ENV:
            result["name"] = self.name
        else:
            result["path"] = self.path
        for key in ("regex", "description", "link", "command"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


@dataclass(frozen=True)
class InfoItem:
    name: str
    description: str | None = None


@dataclass(frozen=True)
class InfoGroup:
    name: str
    items: tuple[InfoItem, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InfoGroup":
        if not isinstance(data, dict) or not data.get("name"):
            raise InvalidConfigurationError(f"Info group needs a name: {data!r}")

        items = []
        for item in data.get("items") or []:
            if not isinstance(item, dict) or not item.get("name"):
                raise InvalidConfigurationError(f"Info item needs a name: {item!r}")
            items.append(InfoItem(name=str(item["name"]), description=_optional(item, "description")))

        return cls(name=str(data["name"]), items=tuple(items))


@dataclass(frozen=True)
class DevenvConfig:
    """Parsed devenv configuration document.

    Attributes:
        requirements: Requirements in declaration order
        info_groups: Informational groups shown by ``devenv info``
        source: File the document was loaded from, if any
    """

    requirements: tuple[Requirement, ...] = ()
    info_groups: tuple[InfoGroup, ...] = ()
    source: Path | None = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: Any, source: Path | None = None) -> "DevenvConfig":
        """Build a config from a decoded document.

        Raises:
            InvalidConfigurationError: If the structure is invalid
        """
        if not isinstance(data, dict):
            raise InvalidConfigurationError("Devenv document must be an object")

        raw_requirements = data.get("requirements") or []
        if not isinstance(raw_requirements, list):
            raise InvalidConfigurationError("'requirements' must be a list")

        requirements = []
        for index, entry in enumerate(raw_requirements):
            try:
                requirements.append(Requirement.from_dict(entry))
            except InvalidConfigurationError as e:
                raise InvalidConfigurationError(f"requirements[{index}]: {e}") from None

        info = data.get("info") or {}
        if not isinstance(info, dict):
            raise InvalidConfigurationError("'info' must be an object")
        groups = tuple(InfoGroup.from_dict(group) for group in info.get("groups") or [])

        return cls(requirements=tuple(requirements), info_groups=groups, source=source)

    def validate(self) -> ValidationResult:
        """Report problems that do not prevent loading the document."""
        warnings: list[str] = []
        seen: set[tuple[RequirementKind, str]] = set()

        for requirement in self.requirements:
            label = f"{requirement.kind.value} {requirement.name_or_path}"
            key = (requirement.kind, requirement.name_or_path)
            if key in seen:
                warnings.append(f"{label}: declared more than once")
            seen.add(key)

            if requirement.link:
                is_valid, error = validate_url(requirement.link)
                if not is_valid:
                    warnings.append(f"{label}: link: {error}")

            if requirement.kind is RequirementKind.FILE and requirement.regex:
                warnings.append(f"{label}: regex is ignored for file requirements")

        if not self.requirements:
            warnings.append("No requirements declared")

        return ValidationResult.valid(warnings)


def load_devenv_file(path: Path) -> DevenvConfig:
    """Load and parse a devenv file.

    Files ending in ``.yaml`` or ``.yml`` are parsed as YAML, everything
    else as JSON.

    Raises:
        InvalidConfigurationError: If the file is missing or invalid
    """
    path = Path(path)
    try:
        text = path.read_text()
    except FileNotFoundError:
        raise InvalidConfigurationError(f"Devenv file not found: {path}") from None
    except OSError as e:
        raise InvalidConfigurationError(f"Cannot read devenv file {path}: {e}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidConfigurationError(f"Malformed devenv file {path}: {e}") from e

    return DevenvConfig.from_dict(data, source=path)
