"""
Projscope - Core Package

Resolves the project a file or directory belongs to by walking up its
ancestors against an ordered catalog of project types, and enumerates the
project's files for the tools that run inside it.
"""

from .core.catalog import TypeCatalog, default_catalog
from .core.registry import ProjectRegistry
from .core.resolver import RootResolver
from .core.context import project_scope, with_project, run_in_project
from .core.service import ProjectService
from .models.project import Project
from .models.project_type import ProjectTypeSpec, MarkerProjectType, PredicateProjectType
from .tools.fs_walker import FileEnumerator, IgnoreRules
from .exceptions import (
    ProjscopeError,
    NotFoundError,
    InvalidProjectError,
    ExternalToolUnavailableError,
    CatalogError
)

__version__ = "0.1.0"
__author__ = "Projscope Team"

__all__ = [
    'TypeCatalog',
    'default_catalog',
    'ProjectRegistry',
    'RootResolver',
    'project_scope',
    'with_project',
    'run_in_project',
    'ProjectService',
    'Project',
    'ProjectTypeSpec',
    'MarkerProjectType',
    'PredicateProjectType',
    'FileEnumerator',
    'IgnoreRules',
    'ProjscopeError',
    'NotFoundError',
    'InvalidProjectError',
    'ExternalToolUnavailableError',
    'CatalogError'
]
