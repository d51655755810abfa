"""
Root resolver for projscope.

Walks from a starting directory up to the filesystem root and classifies
the nearest directory that any catalog type accepts.
"""

from typing import Optional
import logging
import os

from ..exceptions import NotFoundError
from ..models.project import Project, normalize_root
from .catalog import TypeCatalog
from .registry import ProjectRegistry


logger = logging.getLogger(__name__)


def parent_dir(path: str) -> str:
    """Return the slash-terminated parent of a slash-terminated directory."""
    return normalize_root(os.path.dirname(path.rstrip(os.sep)) or os.sep)


def is_filesystem_root(path: str) -> bool:
    return parent_dir(path) == path


class RootResolver:
    """
    Resolves the project a file or directory belongs to.

    The nearest matching ancestor wins; at each level the catalog decides the
    type by priority. Successful resolutions are recorded in the registry.
    """

    def __init__(self, catalog: TypeCatalog, registry: Optional[ProjectRegistry] = None):
        """
        Initialize the resolver.

        Args:
            catalog: Project types to test at each level
            registry: Registry recording resolved projects (optional)
        """
        self.catalog = catalog
        self.registry = registry

    def resolve(self, start_dir: str) -> Project:
        """
        Find the project enclosing ``start_dir``.

        Args:
            start_dir: Directory (or file) to start from

        Returns:
            Project rooted at the nearest matching ancestor

        Raises:
            NotFoundError: If no ancestor up to the filesystem root matches
        """
        self.catalog.freeze()
        start = os.path.expanduser(str(start_dir))
        if os.path.isfile(start):
            start = os.path.dirname(os.path.abspath(start))
        current = normalize_root(start)

        while True:
            spec = self.catalog.first_match(current)
            if spec is not None:
                project = Project.at(current, spec.name)
                logger.info(f"Resolved {start_dir} to {project.name} ({spec.name}) at {project.root}")
                if self.registry is not None:
                    self.registry.add(project)
                return project
            logger.debug(f"No project type matches {current}")
            if is_filesystem_root(current):
                raise NotFoundError(str(start_dir))
            current = parent_dir(current)
