"""
Per-system output helpers.

These fold a callback over a list of Nix system identifiers and merge the
per-system results, mirroring the ``eachSystem`` family of flake helpers:

- each_system:             {attr: value} -> {attr: {system: value}}
- each_system_mapped:      {attr: value} -> {system: {attr: value}}
- each_system_passthrough: merges every result into one flat mapping
"""

import platform
import sys
from functools import partial
from typing import Any, Callable, Iterable


DEFAULT_SYSTEMS = (
    "aarch64-linux",
    "aarch64-darwin",
    "x86_64-darwin",
    "x86_64-linux",
)

SystemFn = Callable[[str], dict[str, Any]]

_MACHINE_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "armv8": "aarch64",
}


def current_system() -> str:
    """Return the running platform as a Nix system string, e.g. ``x86_64-linux``."""
    machine = platform.machine().lower()
    machine = _MACHINE_ALIASES.get(machine, machine)
    kernel = "darwin" if sys.platform == "darwin" else sys.platform.rstrip("0123456789")
    return f"{machine}-{kernel}"


def _with_current(systems: Iterable[str], current: str | None) -> list[str]:
    result = list(systems)
    if current is not None and current not in result:
        result.append(current)
    return result


def each_system(
    systems: Iterable[str], fn: SystemFn, current_system: str | None = None
) -> dict[str, dict[str, Any]]:
    """Build ``{attr: {system: value}}`` from ``fn(system) -> {attr: value}``.

    Args:
        systems: System identifiers to fold over
        fn: Callback returning the outputs for one system
        current_system: Appended to ``systems`` when not already listed
    """
    result: dict[str, dict[str, Any]] = {}
    for system in _with_current(systems, current_system):
        for key, value in fn(system).items():
            result.setdefault(key, {})[system] = value
    return result


def each_system_passthrough(
    systems: Iterable[str], fn: SystemFn, current_system: str | None = None
) -> dict[str, Any]:
    """Merge every ``fn(system)`` into one mapping; later systems win."""
    result: dict[str, Any] = {}
    for system in _with_current(systems, current_system):
        result.update(fn(system))
    return result


def each_system_mapped(systems: Iterable[str], fn: Callable[[str], Any]) -> dict[str, Any]:
    """Build ``{system: fn(system)}``."""
    return {system: fn(system) for system in systems}


each_default = partial(each_system, DEFAULT_SYSTEMS)
each_default_passthrough = partial(each_system_passthrough, DEFAULT_SYSTEMS)
each_default_mapped = partial(each_system_mapped, DEFAULT_SYSTEMS)
