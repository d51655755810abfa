"""
Project registry for projscope.

Keeps an ordered, root-deduplicated history of resolved projects. Stale
entries are pruned lazily, before every read.
"""

from typing import Callable, Dict, List, Optional, Sequence, Tuple
import logging
import os

from ..exceptions import InvalidProjectError
from ..models.project import Project, normalize_root
from .catalog import TypeCatalog


logger = logging.getLogger(__name__)


def project_problem(project: Project, catalog: TypeCatalog) -> Optional[str]:
    """
    Describe why ``project`` is no longer valid.

    Args:
        project: Project to check
        catalog: Catalog holding the project's recorded type

    Returns:
        A message, or None when the project still validates
    """
    if not project.name or not project.type:
        return f"Project at {project.root} has an empty name or type"
    if not os.path.isdir(project.root):
        return f"Project root no longer exists: {project.root}"
    spec = catalog.get(project.type)
    if spec is None:
        return f"Unknown project type '{project.type}' for {project.root}"
    if not spec.matches(project.root):
        return f"{project.root} is no longer a {project.type}"
    return None


def abbreviate_home(path: str) -> str:
    """Replace a leading home directory with ``~``."""
    home = os.path.expanduser('~').rstrip(os.sep)
    if home and (path == home or path.startswith(home + os.sep)):
        return '~' + path[len(home):]
    return path


class ProjectRegistry:
    """
    History of resolved projects, deduplicated by root.

    Insertion order is preserved; re-adding a known root keeps the earlier
    entry where it is unless the project type changed.
    """

    def __init__(self, catalog: TypeCatalog):
        self.catalog = catalog
        self._projects: List[Project] = []
        self._current: Optional[Project] = None

    def add(self, project: Project) -> None:
        """
        Insert ``project`` unless its root is already registered.

        A known root recorded under a different type is replaced, and the new
        entry goes to the end.
        """
        self._current = project
        for index, known in enumerate(self._projects):
            if known.root != project.root:
                continue
            if known.type == project.type:
                return
            del self._projects[index]
            logger.info(f"Project at {project.root} changed type from {known.type} to {project.type}")
            break
        self._projects.append(project)
        logger.debug(f"Registered project {project.name} at {project.root}")

    def remove(self, project: Project) -> bool:
        """
        Drop ``project`` from the registry.

        Returns:
            True if an entry was removed
        """
        if project not in self._projects:
            return False
        self._projects.remove(project)
        if self._current == project:
            self._current = None
        logger.info(f"Removed project {project.name} at {project.root}")
        return True

    def cleanup(self) -> List[Project]:
        """
        Remove every entry whose root vanished or no longer matches its type.

        Returns:
            The removed projects
        """
        self.catalog.freeze()
        kept = []
        dropped = []
        for project in self._projects:
            problem = project_problem(project, self.catalog)
            if problem:
                logger.info(f"Pruning stale project: {problem}")
                dropped.append(project)
            else:
                kept.append(project)
        self._projects = kept
        if self._current is not None and self._current in dropped:
            self._current = None
        return dropped

    def projects(self) -> List[Project]:
        """Return the registered projects, oldest first."""
        self.cleanup()
        return list(self._projects)

    @property
    def current(self) -> Optional[Project]:
        """The most recently added project, if it is still valid."""
        self.cleanup()
        return self._current

    def labels(self) -> List[Tuple[str, Project]]:
        """
        Build display labels for every registered project.

        Returns:
            ``(label, project)`` pairs, name padded to the longest name
        """
        projects = self.projects()
        width = max((len(p.name) for p in projects), default=0)
        return [(f"{p.name.ljust(width)}  {abbreviate_home(p.root)}", p) for p in projects]

    def select(self, chooser: Callable[[Sequence[str]], str]) -> Project:
        """
        Let ``chooser`` pick one of the registered projects by label.

        Args:
            chooser: Receives the labels and returns the chosen one

        Returns:
            The Project behind the chosen label

        Raises:
            InvalidProjectError: If the registry is empty or the label is unknown
        """
        pairs = self.labels()
        if not pairs:
            raise InvalidProjectError("No projects have been resolved yet")
        by_label: Dict[str, Project] = dict(pairs)
        choice = chooser([label for label, _ in pairs])
        if choice not in by_label:
            raise InvalidProjectError(f"No project matches selection: {choice!r}")
        return by_label[choice]

    def select_root(self, root: str) -> Project:
        """Return the registered project rooted at ``root``."""
        wanted = normalize_root(root)
        for project in self.projects():
            if project.root == wanted:
                return project
        raise InvalidProjectError(f"No registered project at {wanted}")

    def clear(self) -> None:
        self._projects = []
        self._current = None

    def __len__(self) -> int:
        return len(self.projects())

    def __contains__(self, project: object) -> bool:
        return project in self.projects()

    def __iter__(self):
        return iter(self.projects())
