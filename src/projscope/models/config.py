"""
Configuration data models for projscope.

This module defines the settings an embedding environment can change: the
global ignore rules, additional project types, the file enumeration backend
and the default tag generation command.
"""

from typing import Dict, List, Optional, Any
from enum import Enum
import shutil
from pydantic import BaseModel, Field, field_validator

from .project_type import MarkerProjectType


DEFAULT_IGNORED_DIRS = [
    ".git", ".hg", ".svn", ".bzr", "_darcs", "CVS", "RCS", "SCCS", "_MTN", ".rbx"
]

DEFAULT_IGNORED_FILES = [
    # compiled script caches
    "*.elc", "*.pyc", "*.pyo", "*.class", "*.rbc",
    # object, archive and binary files
    "*.o", "*.obj", "*.a", "*.so", "*.dll", "*.dylib", "*.exe", "*.bin", "*.jar",
    # databases
    "*.db", "*.sqlite", "*.sqlite3",
    # generated indexes
    "TAGS", "GTAGS", "GRTAGS", "GPATH",
    # backups
    "*~", "*.bak", "#*#", ".#*"
]

DEFAULT_TAGS_COMMAND = "ctags -e -R ."


class EnumeratorBackend(Enum):
    """Supported file enumeration backends."""
    FIND = "find"
    PYTHON = "python"


def _clean_names(values: List[str]) -> List[str]:
    """Strip entries, drop blanks and duplicates, keep first occurrence order."""
    seen = set()
    cleaned = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            continue
        value = value.strip()
        if value not in seen:
            seen.add(value)
            cleaned.append(value)
    return cleaned


class IgnoreConfig(BaseModel):
    """
    Global ignore rules applied to every project.

    Attributes:
        directories: Directory names or wildcards pruned during enumeration
        files: Filename wildcards excluded case-insensitively
    """

    directories: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_DIRS),
        description="Directory names pruned during enumeration"
    )
    files: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_FILES),
        description="Filename wildcards excluded from enumeration"
    )

    @field_validator('directories')
    @classmethod
    def validate_directories(cls, v: List[str]) -> List[str]:
        """Directory entries are plain names, not paths."""
        cleaned = _clean_names(v)
        for name in cleaned:
            if '/' in name:
                raise ValueError(f"Ignored directory must be a name, not a path: {name}")
        return cleaned

    @field_validator('files')
    @classmethod
    def validate_files(cls, v: List[str]) -> List[str]:
        return _clean_names(v)


class ProjectTypeConfig(BaseModel):
    """
    A project type declared in configuration.

    ``markers`` accepts either a flat list (any one marker must exist) or a
    list of lists (every inner list needs one existing marker).

    Attributes:
        name: Type label
        markers: Marker groups identifying the project root
        ignored_dirs: Additional ignored directory names
        ignored_files: Additional ignored filename wildcards
        tags_command: Optional tag generation command
    """

    name: str = Field(..., min_length=1, description="Type label")
    markers: List[List[str]] = Field(..., min_length=1, description="Marker groups")
    ignored_dirs: List[str] = Field(default_factory=list, description="Additional ignored directories")
    ignored_files: List[str] = Field(default_factory=list, description="Additional ignored files")
    tags_command: Optional[str] = Field(None, description="Tag generation command")

    @field_validator('markers', mode='before')
    @classmethod
    def validate_markers(cls, v) -> List[List[str]]:
        """Accept a single marker, a flat list or a list of groups."""
        if isinstance(v, str):
            return [[v]]
        if isinstance(v, list) and v and all(isinstance(m, str) for m in v):
            return [v]
        return v

    def to_spec(self) -> MarkerProjectType:
        """Build the catalog descriptor for this configured type."""
        return MarkerProjectType(
            name=self.name,
            marker_groups=self.markers,
            ignored_dirs=self.ignored_dirs,
            ignored_files=self.ignored_files,
            tags_command=self.tags_command
        )


class EnumeratorConfig(BaseModel):
    """
    Configuration for file enumeration.

    Attributes:
        backend: ``find`` runs an external find process, ``python`` walks in-process
        find_executable: Name or path of the find executable
    """

    backend: EnumeratorBackend = Field(EnumeratorBackend.FIND, description="Enumeration backend")
    find_executable: str = Field("find", min_length=1, description="find executable")

    @field_validator('backend', mode='before')
    @classmethod
    def validate_backend(cls, v) -> EnumeratorBackend:
        """Validate and convert backend to enum."""
        if isinstance(v, str):
            try:
                return EnumeratorBackend(v.lower())
            except ValueError:
                raise ValueError(f"Invalid enumerator backend: {v}")
        return v

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump()
        data['backend'] = self.backend.value
        return data


class TagsConfig(BaseModel):
    """Configuration for tag generation commands."""

    default_command: str = Field(DEFAULT_TAGS_COMMAND, min_length=1, description="Default tag command")


class ProjscopeConfig(BaseModel):
    """
    Main configuration class for projscope.

    Attributes:
        ignore: Global ignore rules
        project_types: Additional project types, checked before the built-ins
        enumerator: File enumeration settings
        tags: Tag generation settings
    """

    ignore: IgnoreConfig = Field(default_factory=IgnoreConfig, description="Global ignore rules")
    project_types: List[ProjectTypeConfig] = Field(default_factory=list, description="Additional project types")
    enumerator: EnumeratorConfig = Field(default_factory=EnumeratorConfig, description="File enumeration settings")
    tags: TagsConfig = Field(default_factory=TagsConfig, description="Tag generation settings")

    @field_validator('project_types')
    @classmethod
    def validate_project_types(cls, v: List[ProjectTypeConfig]) -> List[ProjectTypeConfig]:
        """Type names must be unique."""
        names = [t.name for t in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate project type names: {', '.join(duplicates)}")
        return v

    def project_type_specs(self) -> List[MarkerProjectType]:
        """Configured project types as catalog descriptors, in file order."""
        return [t.to_spec() for t in self.project_types]

    def validate_configuration(self) -> List[str]:
        """
        Return non-fatal warnings about the configuration.

        Returns:
            List of warning messages
        """
        warnings = []
        if not self.ignore.directories:
            warnings.append("No ignored directories configured - version control metadata will be enumerated")
        if self.enumerator.backend == EnumeratorBackend.FIND and not shutil.which(self.enumerator.find_executable):
            warnings.append(f"find executable not found on PATH: {self.enumerator.find_executable}")
        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        data = self.model_dump(exclude_none=True)
        data['enumerator'] = self.enumerator.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjscopeConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        parts = [f"Ignored dirs: {len(self.ignore.directories)}"]
        parts.append(f"Ignored files: {len(self.ignore.files)}")
        parts.append(f"Project types: {len(self.project_types)}")
        parts.append(f"Enumerator: {self.enumerator.backend.value}")
        return " | ".join(parts)


def validate_config_dict(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check the top-level shape of a raw configuration dictionary.

    Args:
        config_data: Raw configuration data

    Returns:
        The same data, with unknown sections removed

    Raises:
        ValueError: If a known section has the wrong type
    """
    if not isinstance(config_data, dict):
        raise ValueError(f"Configuration must be a mapping, got {type(config_data).__name__}")

    sections: Dict[str, type] = {
        'ignore': dict,
        'project_types': list,
        'enumerator': dict,
        'tags': dict,
    }
    validated = {}
    for key, value in config_data.items():
        if key not in sections:
            continue
        if value is None:
            continue
        if not isinstance(value, sections[key]):
            raise ValueError(f"Section '{key}' must be a {sections[key].__name__}")
        validated[key] = value
    return validated
