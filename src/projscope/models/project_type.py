"""
Project type descriptors for projscope.

A project type is a named test deciding whether a directory looks like the
root of a project of that kind, plus the ignore-rule overrides and tag
command used once a project of that type has been resolved.
"""

from typing import Callable, List, Optional
import glob
import logging
import os
from pydantic import BaseModel, ConfigDict, Field, field_validator


logger = logging.getLogger(__name__)

GLOB_CHARS = set('*?[')


class ProjectTypeSpec(BaseModel):
    """
    Immutable descriptor of one kind of project.

    Subclasses provide the ``_test`` used by ``matches``. Catalog order, not
    this class, decides which type wins when several match one directory.

    Attributes:
        name: Human-readable type label
        ignored_dirs: Directory names excluded in addition to the global set
        ignored_files: Filename wildcards excluded in addition to the global set
        tags_command: Optional shell command overriding the default tag generator
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Human-readable type label")
    ignored_dirs: List[str] = Field(default_factory=list, description="Additional ignored directory names")
    ignored_files: List[str] = Field(default_factory=list, description="Additional ignored filename wildcards")
    tags_command: Optional[str] = Field(None, description="Override command for tag generation")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject blank type names."""
        if not v.strip():
            raise ValueError("Project type name cannot be empty")
        return v.strip()

    @field_validator('ignored_dirs', 'ignored_files')
    @classmethod
    def validate_ignore_entries(cls, v: List[str]) -> List[str]:
        """Drop blank entries while keeping order."""
        return [entry.strip() for entry in v if entry and entry.strip()]

    def matches(self, path: str) -> bool:
        """
        Check whether ``path`` looks like the root of a project of this type.

        Filesystem errors raised while testing count as a non-match.
        """
        try:
            return bool(self._test(path))
        except OSError as e:
            logger.debug(f"Type test '{self.name}' failed on {path}: {e}")
            return False

    def _test(self, path: str) -> bool:
        raise NotImplementedError


class MarkerProjectType(ProjectTypeSpec):
    """
    Project type detected by marker files or directories.

    ``marker_groups`` is a conjunction of alternatives: the directory matches
    when every group has at least one entry present. Entries may be glob
    patterns such as ``*.gemspec`` or relative paths such as
    ``spec/spec_helper.rb``.
    """

    marker_groups: List[List[str]] = Field(..., min_length=1, description="Groups of alternative marker names")

    @field_validator('marker_groups')
    @classmethod
    def validate_marker_groups(cls, v: List[List[str]]) -> List[List[str]]:
        """Every group needs at least one non-blank marker."""
        normalized = []
        for group in v:
            markers = [m.strip() for m in group if m and m.strip()]
            if not markers:
                raise ValueError("Marker groups cannot be empty")
            normalized.append(markers)
        return normalized

    def _test(self, path: str) -> bool:
        if not os.path.isdir(path):
            return False
        return all(self._group_present(path, group) for group in self.marker_groups)

    def _group_present(self, path: str, group: List[str]) -> bool:
        for marker in group:
            if GLOB_CHARS.intersection(marker):
                if glob.glob(os.path.join(glob.escape(path), marker)):
                    return True
            elif os.path.lexists(os.path.join(path, marker)):
                return True
        return False


class PredicateProjectType(ProjectTypeSpec):
    """Project type backed by an arbitrary callable over a directory path."""

    predicate: Callable[[str], bool] = Field(..., description="Directory test")

    def _test(self, path: str) -> bool:
        return self.predicate(path)


def marker_type(name: str, *groups: List[str], **kwargs) -> MarkerProjectType:
    """Shorthand for building a MarkerProjectType from positional groups."""
    return MarkerProjectType(name=name, marker_groups=[list(g) for g in groups], **kwargs)

