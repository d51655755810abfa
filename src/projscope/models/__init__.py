"""
Data models for projscope.

This module contains the project, project type and configuration models
used throughout the system.
"""

from .project import Project, normalize_root
from .project_type import ProjectTypeSpec, MarkerProjectType, PredicateProjectType, marker_type

__all__ = [
    'Project',
    'normalize_root',
    'ProjectTypeSpec',
    'MarkerProjectType',
    'PredicateProjectType',
    'marker_type'
]
