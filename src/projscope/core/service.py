"""
Project service for projscope.

ProjectService bundles one catalog, registry, resolver and file enumerator.
Editor commands, search dispatchers and tag generators receive a service
instead of reaching for global state, so each test can build its own.
"""

from pathlib import Path
from typing import Callable, List, Optional, Sequence, TypeVar, Union
import logging
import os
import shlex
import subprocess

from ..config.parser import ConfigParser
from ..models.config import ProjscopeConfig
from ..models.project import Project
from ..tools.fs_walker import FileEnumerator
from .catalog import TypeCatalog, default_catalog
from .context import project_scope, run_in_project, with_project
from .registry import ProjectRegistry
from .resolver import RootResolver


logger = logging.getLogger(__name__)

T = TypeVar('T')


class ProjectService:
    """
    Entry point used by the commands that run tools inside a project.

    Attributes:
        config: Active configuration
        catalog: Project types, configured types first
        registry: History of resolved projects
        resolver: Root resolver recording into ``registry``
        enumerator: File enumerator using the configured backend
    """

    def __init__(self, config: Optional[ProjscopeConfig] = None,
                 catalog: Optional[TypeCatalog] = None,
                 registry: Optional[ProjectRegistry] = None):
        self.config = config or ProjscopeConfig()
        self.catalog = catalog if catalog is not None else default_catalog()
        if self.config.project_types:
            self.catalog.prepend_all(self.config.project_type_specs())
        self.registry = registry if registry is not None else ProjectRegistry(self.catalog)
        self.resolver = RootResolver(self.catalog, self.registry)
        self.enumerator = FileEnumerator(self.config.ignore, self.config.enumerator, self.catalog)

    @classmethod
    def from_config_file(cls, config_path: Optional[Union[str, Path]] = None,
                         strict_mode: bool = False) -> 'ProjectService':
        """Build a service from a YAML configuration file (or the defaults)."""
        result = ConfigParser(strict_mode=strict_mode).load_config(config_path)
        for warning in result.warnings:
            logger.warning(warning)
        return cls(result.config)

    def resolve(self, directory: Optional[Union[str, Path]] = None) -> Project:
        """Resolve the project enclosing ``directory`` (default: cwd)."""
        return self.resolver.resolve(str(directory) if directory is not None else os.getcwd())

    def list_files(self, project: Project) -> List[str]:
        return self.enumerator.list_files(project)

    def scope(self, project: Project):
        """Context manager binding the working directory to ``project.root``."""
        return project_scope(project, self.catalog)

    def with_project(self, project: Project, body: Callable[[Project], T]) -> T:
        return with_project(project, body, self.catalog)

    def select(self, chooser: Callable[[Sequence[str]], str]) -> Project:
        return self.registry.select(chooser)

    def remove(self, project: Project) -> bool:
        return self.registry.remove(project)

    def projects(self) -> List[Project]:
        return self.registry.projects()

    def run(self, project: Project, argv: List[str], **kwargs) -> subprocess.CompletedProcess:
        """Run an external command from the project's root."""
        return run_in_project(project, argv, self.catalog, **kwargs)

    def tags_command(self, project: Project) -> List[str]:
        """
        Command that regenerates the project's tag index.

        Returns:
            Argument list: the project type's override, or the configured default
        """
        spec = self.catalog.get(project.type)
        command = spec.tags_command if spec is not None and spec.tags_command else self.config.tags.default_command
        return shlex.split(command)
