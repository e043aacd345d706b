"""
Tests for devenv.requirements module.
"""

import json

import pytest

from devenv.base import ConfigStatus
from devenv.requirements import (
    DevenvConfig,
    InfoGroup,
    InvalidConfigurationError,
    Requirement,
    RequirementKind,
    load_devenv_file,
)


class TestRequirement:
    """Tests for Requirement."""

    def test_env_from_dict(self):
        """Test parsing an env requirement with every field."""
        req = Requirement.from_dict(
            {
                "type": "env",
                "name": "API_KEY",
                "regex": "^[a-z]+$",
                "description": "Key for the API",
                "link": "https://example.com/keys",
                "command": "openssl rand -hex 16",
            }
        )

        assert req.kind is RequirementKind.ENV
        assert req.name == "API_KEY"
        assert req.path is None
        assert req.regex == "^[a-z]+$"
        assert req.command == "openssl rand -hex 16"
        assert req.name_or_path == "API_KEY"

    def test_file_from_dict(self):
        """Test parsing a file requirement."""
        req = Requirement.from_dict({"type": "file", "path": "certs/dev.pem"})

        assert req.kind is RequirementKind.FILE
        assert req.path == "certs/dev.pem"
        assert req.name is None
        assert req.name_or_path == "certs/dev.pem"

    def test_null_and_empty_fields_are_absent(self):
        """Test null and empty optional fields become None."""
        req = Requirement.from_dict(
            {"type": "env", "name": "A", "regex": None, "description": "", "command": None}
        )

        assert req.regex is None
        assert req.description is None
        assert req.command is None

    def test_unknown_type_rejected(self):
        """Test an unknown type is a configuration error."""
        with pytest.raises(InvalidConfigurationError, match="Unknown requirement type 'dir'"):
            Requirement.from_dict({"type": "dir", "path": "x"})

    def test_missing_type_rejected(self):
        """Test a missing type is a configuration error."""
        with pytest.raises(InvalidConfigurationError):
            Requirement.from_dict({"name": "A"})

    def test_env_without_name_rejected(self):
        """Test env requirements need a name."""
        with pytest.raises(InvalidConfigurationError, match="Variable name is empty"):
            Requirement.from_dict({"type": "env"})

    def test_invalid_env_name_rejected(self):
        """Test env names must be valid shell identifiers."""
        with pytest.raises(InvalidConfigurationError, match="Invalid variable name"):
            Requirement.from_dict({"type": "env", "name": "1BAD-NAME"})

    def test_file_without_path_rejected(self):
        """Test file requirements need a path."""
        with pytest.raises(InvalidConfigurationError, match="path is not set"):
            Requirement.from_dict({"type": "file"})

    def test_posix_class_regex_accepted(self):
        """Test a regex using POSIX bracket classes is accepted."""
        req = Requirement.from_dict({"type": "env", "name": "A", "regex": "^[[:alnum:]_-]+$"})

        assert req.regex == "^[[:alnum:]_-]+$"

    def test_invalid_regex_rejected(self):
        """Test a regex that does not compile is rejected."""
        with pytest.raises(InvalidConfigurationError, match="Invalid regex"):
            Requirement.from_dict({"type": "env", "name": "A", "regex": "(unclosed"})

    def test_non_string_field_rejected(self):
        """Test optional fields must be strings."""
        with pytest.raises(InvalidConfigurationError, match="must be a string"):
            Requirement.from_dict({"type": "env", "name": "A", "regex": 42})

    def test_non_object_rejected(self):
        """Test a requirement entry must be an object."""
        with pytest.raises(InvalidConfigurationError, match="must be an object"):
            Requirement.from_dict("API_KEY")

    def test_to_dict_omits_absent_fields(self):
        """Test to_dict only contains set fields."""
        req = Requirement(kind=RequirementKind.FILE, path="a.txt", command="touch #path#")

        assert req.to_dict() == {"type": "file", "path": "a.txt", "command": "touch #path#"}


class TestInfoGroup:
    """Tests for InfoGroup."""

    def test_from_dict(self):
        """Test parsing a group with items."""
        group = InfoGroup.from_dict(
            {"name": "Commands", "items": [{"name": "setup", "description": "Run wizard"}, {"name": "check"}]}
        )

        assert group.name == "Commands"
        assert [item.name for item in group.items] == ["setup", "check"]
        assert group.items[0].description == "Run wizard"
        assert group.items[1].description is None

    def test_group_without_name_rejected(self):
        """Test groups need a name."""
        with pytest.raises(InvalidConfigurationError, match="needs a name"):
            InfoGroup.from_dict({"items": []})

    def test_item_without_name_rejected(self):
        """Test items need a name."""
        with pytest.raises(InvalidConfigurationError, match="Info item needs a name"):
            InfoGroup.from_dict({"name": "G", "items": [{"description": "x"}]})


class TestDevenvConfig:
    """Tests for DevenvConfig."""

    def test_from_dict_keeps_order(self):
        """Test requirements keep declaration order."""
        config = DevenvConfig.from_dict(
            {
                "requirements": [
                    {"type": "env", "name": "B"},
                    {"type": "file", "path": "a.txt"},
                    {"type": "env", "name": "A"},
                ]
            }
        )

        assert [r.name_or_path for r in config.requirements] == ["B", "a.txt", "A"]

    def test_empty_document(self):
        """Test a document without requirements is allowed."""
        config = DevenvConfig.from_dict({})

        assert config.requirements == ()
        assert config.info_groups == ()

    def test_error_names_requirement_index(self):
        """Test errors point at the offending entry."""
        with pytest.raises(InvalidConfigurationError, match=r"requirements\[1\]"):
            DevenvConfig.from_dict(
                {"requirements": [{"type": "env", "name": "A"}, {"type": "bogus"}]}
            )

    def test_requirements_must_be_list(self):
        """Test requirements must be a list."""
        with pytest.raises(InvalidConfigurationError, match="must be a list"):
            DevenvConfig.from_dict({"requirements": {"type": "env"}})

    def test_document_must_be_object(self):
        """Test the top level must be an object."""
        with pytest.raises(InvalidConfigurationError):
            DevenvConfig.from_dict([])

    def test_info_groups(self):
        """Test info groups are parsed."""
        config = DevenvConfig.from_dict({"info": {"groups": [{"name": "Links"}]}})

        assert config.info_groups == (InfoGroup(name="Links"),)

    def test_validate_clean(self):
        """Test a clean document validates without warnings."""
        config = DevenvConfig.from_dict(
            {"requirements": [{"type": "env", "name": "A", "link": "https://example.com"}]}
        )

        result = config.validate()

        assert result.status == ConfigStatus.VALID
        assert result.warnings == []

    def test_validate_warnings(self):
        """Test duplicates, bad links and file regexes produce warnings."""
        config = DevenvConfig.from_dict(
            {
                "requirements": [
                    {"type": "env", "name": "A"},
                    {"type": "env", "name": "A", "link": "not a url"},
                    {"type": "file", "path": "x", "regex": ".*"},
                ]
            }
        )

        result = config.validate()

        assert result.is_valid
        assert result.status == ConfigStatus.DEGRADED
        assert len(result.warnings) == 3
        assert any("declared more than once" in w for w in result.warnings)
        assert any("link" in w for w in result.warnings)
        assert any("regex is ignored" in w for w in result.warnings)

    def test_validate_no_requirements(self):
        """Test an empty document warns."""
        result = DevenvConfig.from_dict({}).validate()

        assert result.warnings == ["No requirements declared"]


class TestLoadDevenvFile:
    """Tests for load_devenv_file."""

    def test_json(self, tmp_path):
        """Test loading a JSON document."""
        path = tmp_path / "devenv.json"
        path.write_text(json.dumps({"requirements": [{"type": "env", "name": "A"}]}))

        config = load_devenv_file(path)

        assert config.requirements[0].name == "A"
        assert config.source == path

    def test_yaml(self, tmp_path):
        """Test loading a YAML document."""
        path = tmp_path / "devenv.yaml"
        path.write_text("requirements:\n  - type: file\n    path: certs/dev.pem\n")

        config = load_devenv_file(path)

        assert config.requirements[0].path == "certs/dev.pem"

    def test_missing_file(self, tmp_path):
        """Test a missing file is a configuration error."""
        with pytest.raises(InvalidConfigurationError, match="not found"):
            load_devenv_file(tmp_path / "devenv.json")

    def test_malformed_json(self, tmp_path):
        """Test malformed JSON is a configuration error."""
        path = tmp_path / "devenv.json"
        path.write_text("{not json")

        with pytest.raises(InvalidConfigurationError, match="Malformed"):
            load_devenv_file(path)
