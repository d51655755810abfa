"""
Project value object for projscope.

A Project binds a root directory to the name of the project type that
classified it. Projects compare and hash by root only.
"""

from typing import Any, Dict
import os
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def normalize_root(path: str) -> str:
    """
    Normalize a directory path to an absolute, slash-terminated form.

    Args:
        path: Directory path, possibly relative or starting with ``~``

    Returns:
        Absolute path ending with the platform separator
    """
    absolute = os.path.abspath(os.path.expanduser(str(path)))
    if not absolute.endswith(os.sep):
        absolute += os.sep
    return absolute


def name_from_root(root: str) -> str:
    """Derive a project name from the basename of its root."""
    name = os.path.basename(root.rstrip(os.sep))
    return name or os.sep


class Project(BaseModel):
    """
    A resolved project.

    Attributes:
        root: Absolute, slash-terminated root directory
        name: Project name, derived from the root's basename when omitted
        type: Name of the ProjectTypeSpec that matched the root
    """

    model_config = ConfigDict(frozen=True)

    root: str = Field(..., min_length=1, description="Absolute root directory")
    name: str = Field("", description="Project name")
    type: str = Field(..., min_length=1, description="Matched project type name")

    @field_validator('root')
    @classmethod
    def validate_root(cls, v: str) -> str:
        """Normalize the root directory."""
        if not v.strip():
            raise ValueError("Project root cannot be empty")
        return normalize_root(v)

    @model_validator(mode='before')
    @classmethod
    def derive_name(cls, data: Any) -> Any:
        """Fill in the name from the root when it is not given."""
        if isinstance(data, dict) and not data.get('name') and data.get('root'):
            data = dict(data)
            data['name'] = name_from_root(normalize_root(data['root']))
        return data

    @classmethod
    def at(cls, root: str, type_name: str) -> 'Project':
        """Create a project rooted at ``root`` with the given type name."""
        return cls(root=root, type=type_name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Project):
            return NotImplemented
        return self.root == other.root

    def __hash__(self) -> int:
        return hash(self.root)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()

    def __str__(self) -> str:
        return f"{self.name} ({self.type}) at {self.root}"
