"""
Context scope for projscope.

External tools run with the working directory bound to a project's root.
The binding lasts for the dynamic extent of one block and is always
restored, whether the block returns, raises or exits early.
"""

from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, TypeVar
import logging
import os
import shutil
import subprocess
import threading

from ..exceptions import ExternalToolUnavailableError, InvalidProjectError
from ..models.project import Project
from .catalog import TypeCatalog
from .registry import project_problem


logger = logging.getLogger(__name__)

T = TypeVar('T')

# The working directory is process-wide; scopes in other threads wait.
_cwd_lock = threading.RLock()


def validate_project(project: Project, catalog: TypeCatalog) -> None:
    """
    Check that ``project`` still describes a valid project.

    Raises:
        InvalidProjectError: If the root vanished, no longer matches its
            recorded type, or the name or type is empty
    """
    problem = project_problem(project, catalog)
    if problem:
        raise InvalidProjectError(problem, project)


@contextmanager
def project_scope(project: Project, catalog: TypeCatalog) -> Iterator[Project]:
    """
    Bind the working directory to the project's root for the ``with`` block.

    Args:
        project: Project to enter
        catalog: Catalog used to validate the project's type

    Yields:
        The validated project
    """
    validate_project(project, catalog)
    with _cwd_lock:
        previous = os.getcwd()
        os.chdir(project.root)
        logger.debug(f"Entered {project.root} (from {previous})")
        try:
            yield project
        finally:
            try:
                os.chdir(previous)
                logger.debug(f"Restored working directory {previous}")
            except OSError as e:
                logger.warning(f"Cannot restore working directory {previous}: {e}")


def with_project(project: Project, body: Callable[[Project], T], catalog: TypeCatalog) -> T:
    """
    Run ``body(project)`` inside the project's scope and return its result.
    """
    with project_scope(project, catalog) as scoped:
        return body(scoped)


def run_in_project(project: Project, argv: List[str], catalog: TypeCatalog,
                   check: bool = False, capture_output: bool = True,
                   timeout: Optional[float] = None) -> subprocess.CompletedProcess:
    """
    Run an external command with the project's root as working directory.

    Args:
        project: Project to run in
        argv: Command and arguments
        catalog: Catalog used to validate the project
        check: Raise CalledProcessError on a non-zero exit status
        capture_output: Capture stdout and stderr
        timeout: Seconds before the command is killed (optional)

    Returns:
        The completed process

    Raises:
        ExternalToolUnavailableError: If the executable cannot be found
        InvalidProjectError: If the project no longer validates
    """
    if not argv:
        raise ValueError("Command cannot be empty")
    if shutil.which(argv[0]) is None:
        raise ExternalToolUnavailableError(argv[0])

    with project_scope(project, catalog):
        logger.info(f"Running {' '.join(argv)} in {project.root}")
        try:
            return subprocess.run(argv, check=check, capture_output=capture_output, timeout=timeout)
        except FileNotFoundError as e:
            raise ExternalToolUnavailableError(argv[0]) from e
