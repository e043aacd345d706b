"""
Tests for devenv.systems module.
"""

from devenv import systems
from devenv.systems import (
    DEFAULT_SYSTEMS,
    current_system,
    each_default,
    each_system,
    each_system_mapped,
    each_system_passthrough,
)


def outputs(system):
    return {"packages": f"pkgs-{system}", "devShells": f"shell-{system}"}


class TestEachSystem:
    """Tests for each_system."""

    def test_nests_by_attribute(self):
        """Test results are grouped per attribute, then per system."""
        result = each_system(["a-linux", "b-darwin"], outputs)

        assert result == {
            "packages": {"a-linux": "pkgs-a-linux", "b-darwin": "pkgs-b-darwin"},
            "devShells": {"a-linux": "shell-a-linux", "b-darwin": "shell-b-darwin"},
        }

    def test_current_system_appended(self):
        """Test an unlisted current system is added."""
        result = each_system(["a-linux"], outputs, current_system="c-linux")

        assert set(result["packages"]) == {"a-linux", "c-linux"}

    def test_current_system_not_duplicated(self):
        """Test a listed current system is evaluated once."""
        calls = []

        def fn(system):
            calls.append(system)
            return {"x": system}

        each_system(["a-linux"], fn, current_system="a-linux")

        assert calls == ["a-linux"]

    def test_empty_systems(self):
        """Test no systems gives an empty result."""
        assert each_system([], outputs) == {}


class TestEachSystemPassthrough:
    """Tests for each_system_passthrough."""

    def test_later_systems_win(self):
        """Test results are merged flat with later systems overriding."""
        result = each_system_passthrough(["a", "b"], lambda s: {"lib": s, f"only-{s}": True})

        assert result == {"lib": "b", "only-a": True, "only-b": True}


class TestEachSystemMapped:
    """Tests for each_system_mapped."""

    def test_keyed_by_system(self):
        """Test results are keyed by system."""
        assert each_system_mapped(["a", "b"], outputs) == {"a": outputs("a"), "b": outputs("b")}

    def test_no_current_system(self):
        """Test only the given systems appear."""
        assert list(each_system_mapped(["a"], str.upper)) == ["a"]


class TestDefaults:
    """Tests for the default system helpers."""

    def test_default_systems(self):
        """Test the four common platforms are listed."""
        assert set(DEFAULT_SYSTEMS) == {
            "aarch64-linux",
            "aarch64-darwin",
            "x86_64-darwin",
            "x86_64-linux",
        }

    def test_each_default(self):
        """Test each_default folds over the default systems."""
        result = each_default(lambda s: {"x": s})

        assert set(result["x"]) == set(DEFAULT_SYSTEMS)


class TestCurrentSystem:
    """Tests for current_system."""

    def test_linux_amd64(self, monkeypatch):
        """Test machine aliases are normalized."""
        monkeypatch.setattr(systems.platform, "machine", lambda: "AMD64")
        monkeypatch.setattr(systems.sys, "platform", "linux")

        assert current_system() == "x86_64-linux"

    def test_darwin_arm64(self, monkeypatch):
        """Test Apple silicon maps to aarch64-darwin."""
        monkeypatch.setattr(systems.platform, "machine", lambda: "arm64")
        monkeypatch.setattr(systems.sys, "platform", "darwin")

        assert current_system() == "aarch64-darwin"

    def test_format(self):
        """Test the running system has machine-kernel form."""
        machine, _, kernel = current_system().partition("-")
        assert machine
        assert kernel
