"""
Unit tests for configuration data models.

Tests defaults, validation and normalization of the ignore rules, project
type declarations and enumerator settings.
"""

import pytest
from unittest.mock import patch
from pydantic import ValidationError

from projscope.models.config import (
    DEFAULT_IGNORED_DIRS,
    DEFAULT_IGNORED_FILES,
    DEFAULT_TAGS_COMMAND,
    EnumeratorBackend,
    EnumeratorConfig,
    IgnoreConfig,
    ProjectTypeConfig,
    ProjscopeConfig,
    TagsConfig,
    validate_config_dict
)
from projscope.models.project_type import MarkerProjectType


class TestIgnoreConfig:
    """Test cases for IgnoreConfig."""

    def test_defaults(self):
        """Defaults are the built-in ignore sets."""
        config = IgnoreConfig()
        assert config.directories == DEFAULT_IGNORED_DIRS
        assert config.files == DEFAULT_IGNORED_FILES

    def test_defaults_are_copies(self):
        """Instances do not share the default lists."""
        config = IgnoreConfig()
        config.directories.append("extra")
        assert "extra" not in IgnoreConfig().directories

    def test_entries_cleaned(self):
        """Blank and duplicate entries are dropped."""
        config = IgnoreConfig(directories=[" .git", ".git", ""], files=["*.o", "*.o "])
        assert config.directories == [".git"]
        assert config.files == ["*.o"]

    def test_directory_paths_rejected(self):
        """Ignored directories are names, not paths."""
        with pytest.raises(ValidationError, match="must be a name"):
            IgnoreConfig(directories=["build/output"])


class TestProjectTypeConfig:
    """Test cases for ProjectTypeConfig."""

    def test_flat_markers(self):
        """A flat marker list is one group of alternatives."""
        config = ProjectTypeConfig(name="Python", markers=["pyproject.toml", "setup.py"])
        assert config.markers == [["pyproject.toml", "setup.py"]]

    def test_single_marker(self):
        """A single string is one group with one marker."""
        config = ProjectTypeConfig(name="Node", markers="package.json")
        assert config.markers == [["package.json"]]

    def test_grouped_markers(self):
        """Lists of lists are kept as groups."""
        config = ProjectTypeConfig(name="Rust", markers=[[".git"], ["Cargo.toml"]])
        assert config.markers == [[".git"], ["Cargo.toml"]]

    def test_to_spec(self):
        """Configured types build catalog descriptors."""
        config = ProjectTypeConfig(
            name="Node",
            markers=["package.json"],
            ignored_dirs=["node_modules"],
            ignored_files=["*.min.js"],
            tags_command="ctags -R ."
        )
        spec = config.to_spec()

        assert isinstance(spec, MarkerProjectType)
        assert spec.name == "Node"
        assert spec.marker_groups == [["package.json"]]
        assert spec.ignored_dirs == ["node_modules"]
        assert spec.ignored_files == ["*.min.js"]
        assert spec.tags_command == "ctags -R ."

    def test_missing_markers(self):
        """Markers are required."""
        with pytest.raises(ValidationError):
            ProjectTypeConfig(name="Broken")


class TestEnumeratorConfig:
    """Test cases for EnumeratorConfig."""

    def test_defaults(self):
        """find is the default backend."""
        config = EnumeratorConfig()
        assert config.backend == EnumeratorBackend.FIND
        assert config.find_executable == "find"

    def test_string_backend_conversion(self):
        """Backend names convert to the enum, case-insensitively."""
        assert EnumeratorConfig(backend="Python").backend == EnumeratorBackend.PYTHON

    def test_invalid_backend(self):
        """Unknown backends are rejected."""
        with pytest.raises(ValueError, match="Invalid enumerator backend"):
            EnumeratorConfig(backend="locate")

    def test_to_dict(self):
        """The backend serializes to its value."""
        assert EnumeratorConfig().to_dict() == {'backend': 'find', 'find_executable': 'find'}


class TestProjscopeConfig:
    """Test cases for ProjscopeConfig."""

    def test_defaults(self):
        """The default configuration has no extra types."""
        config = ProjscopeConfig()
        assert config.project_types == []
        assert config.tags == TagsConfig()
        assert config.tags.default_command == DEFAULT_TAGS_COMMAND

    def test_duplicate_type_names(self):
        """Configured type names must be unique."""
        with pytest.raises(ValidationError, match="Duplicate project type names"):
            ProjscopeConfig(project_types=[
                {'name': 'A', 'markers': ['a']},
                {'name': 'A', 'markers': ['b']},
            ])

    def test_project_type_specs_in_order(self):
        """Descriptors keep the configured order."""
        config = ProjscopeConfig(project_types=[
            {'name': 'First', 'markers': ['a']},
            {'name': 'Second', 'markers': ['b']},
        ])
        assert [s.name for s in config.project_type_specs()] == ['First', 'Second']

    def test_warning_without_ignored_dirs(self):
        """An empty directory ignore list produces a warning."""
        config = ProjscopeConfig(ignore={'directories': []})
        assert any("No ignored directories" in w for w in config.validate_configuration())

    def test_warning_missing_find(self):
        """A missing find executable produces a warning."""
        with patch('projscope.models.config.shutil.which', return_value=None):
            warnings = ProjscopeConfig().validate_configuration()
        assert any("find executable not found" in w for w in warnings)

    def test_no_find_warning_for_python_backend(self):
        """The python backend does not need find."""
        with patch('projscope.models.config.shutil.which', return_value=None):
            warnings = ProjscopeConfig(enumerator={'backend': 'python'}).validate_configuration()
        assert warnings == []

    def test_to_dict_round_trip(self):
        """to_dict output validates back into an equal configuration."""
        config = ProjscopeConfig(
            project_types=[{'name': 'Node', 'markers': ['package.json']}],
            enumerator={'backend': 'python'}
        )
        data = config.to_dict()

        assert data['enumerator']['backend'] == 'python'
        assert ProjscopeConfig.from_dict(data) == config

    def test_str(self):
        """The string form summarizes the configuration."""
        assert "Enumerator: find" in str(ProjscopeConfig())


class TestValidateConfigDict:
    """Test cases for validate_config_dict."""

    def test_unknown_sections_dropped(self):
        """Only known sections are kept."""
        data = validate_config_dict({'ignore': {}, 'roots': ['.']})
        assert data == {'ignore': {}}

    def test_null_sections_dropped(self):
        """Empty YAML sections fall back to defaults."""
        assert validate_config_dict({'ignore': None}) == {}

    def test_wrong_section_type(self):
        """A section of the wrong type is rejected."""
        with pytest.raises(ValueError, match="must be a list"):
            validate_config_dict({'project_types': {'name': 'x'}})

    def test_not_a_mapping(self):
        """The top level must be a mapping."""
        with pytest.raises(ValueError, match="must be a mapping"):
            validate_config_dict(['ignore'])
