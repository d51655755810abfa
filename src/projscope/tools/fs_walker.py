"""
File enumerator for projscope.

This module lists the regular files belonging to a resolved project. It
merges the global ignore rules with the project type's overrides, prunes
ignored directories without descending into them, and excludes files whose
names match an ignored wildcard case-insensitively. Enumeration runs an
external ``find`` process by default, with an in-process walker available.
"""

import fnmatch
import os
import stat
import subprocess
from typing import Dict, List, Optional, Iterator
import logging
from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import ExternalToolUnavailableError, InvalidProjectError
from ..models.config import (
    DEFAULT_IGNORED_DIRS,
    DEFAULT_IGNORED_FILES,
    EnumeratorBackend,
    EnumeratorConfig,
    IgnoreConfig
)
from ..models.project import Project
from ..models.project_type import ProjectTypeSpec


logger = logging.getLogger(__name__)


def _union(*groups: List[str]) -> List[str]:
    seen = set()
    merged = []
    for group in groups:
        for item in group:
            if item not in seen:
                seen.add(item)
                merged.append(item)
    return merged


class IgnoreRules(BaseModel):
    """
    Effective ignore rules for one enumeration.

    Attributes:
        directories: Directory names to prune
        files: Filename wildcards to exclude, matched case-insensitively
    """

    model_config = ConfigDict(frozen=True)

    directories: List[str] = Field(default_factory=lambda: list(DEFAULT_IGNORED_DIRS))
    files: List[str] = Field(default_factory=lambda: list(DEFAULT_IGNORED_FILES))

    @classmethod
    def merge(cls, global_rules: IgnoreConfig, spec: Optional[ProjectTypeSpec] = None) -> 'IgnoreRules':
        """
        Combine the global rules with a project type's overrides.

        Args:
            global_rules: Rules applied to every project
            spec: Project type contributing additional rules (optional)

        Returns:
            IgnoreRules holding both sets, duplicates removed
        """
        extra_dirs = spec.ignored_dirs if spec else []
        extra_files = spec.ignored_files if spec else []
        return cls(
            directories=_union(global_rules.directories, extra_dirs),
            files=_union(global_rules.files, extra_files)
        )

    def ignores_dir(self, name: str) -> bool:
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self.directories)

    def ignores_file(self, name: str) -> bool:
        lowered = name.lower()
        return any(fnmatch.fnmatchcase(lowered, pattern.lower()) for pattern in self.files)


def _or_clause(test: str, values: List[str]) -> List[str]:
    """Build ``( test V1 -o test V2 ... )``."""
    clause = ['(']
    for index, value in enumerate(values):
        if index:
            clause.append('-o')
        clause.extend([test, value])
    clause.append(')')
    return clause


def build_find_command(root: str, rules: IgnoreRules, find_executable: str = "find") -> List[str]:
    """
    Build the argv for listing a project's files with ``find``.

    The command prunes ignored directories, drops files matching an ignored
    wildcard (``-iname``), keeps regular files only and prints each path
    NUL-terminated.

    Args:
        root: Project root directory
        rules: Effective ignore rules
        find_executable: find binary to invoke

    Returns:
        Argument list suitable for subprocess
    """
    # -H follows a symlinked root but no links below it
    command = [find_executable, '-H', root.rstrip(os.sep) or os.sep, '-mindepth', '1']
    if rules.directories:
        command.extend(['(', '-type', 'd'])
        command.extend(_or_clause('-name', rules.directories))
        command.extend(['-prune', ')', '-o'])
    command.extend(['(', '-type', 'f'])
    if rules.files:
        command.append('!')
        command.extend(_or_clause('-iname', rules.files))
    command.extend(['-print0', ')'])
    return command


def parse_find_output(output: bytes) -> List[str]:
    """Split NUL-terminated find output into paths, dropping empty segments."""
    return [os.fsdecode(segment) for segment in output.split(b'\0') if segment]


class FileEnumerator:
    """
    Lists the files of a project.

    This class provides:
    - Ignore rule merging (global plus project type overrides)
    - Directory pruning, so ignored trees are never descended
    - A ``find`` backend and an in-process ``os.walk`` backend
    """

    def __init__(self, ignore: Optional[IgnoreConfig] = None,
                 settings: Optional[EnumeratorConfig] = None,
                 catalog=None):
        """
        Initialize the enumerator.

        Args:
            ignore: Global ignore rules (defaults when None)
            settings: Backend selection and find executable
            catalog: TypeCatalog used to look up a project's type overrides
        """
        self.ignore = ignore or IgnoreConfig()
        self.settings = settings or EnumeratorConfig()
        self.catalog = catalog
        self._stats = {
            'enumerations': 0,
            'files_listed': 0,
            'errors': 0
        }

    def rules_for(self, project: Project) -> IgnoreRules:
        """Effective ignore rules for ``project``."""
        spec = self.catalog.get(project.type) if self.catalog is not None else None
        return IgnoreRules.merge(self.ignore, spec)

    def list_files(self, project: Project) -> List[str]:
        """
        List every non-ignored regular file under the project's root.

        Args:
            project: Resolved project

        Returns:
            Absolute file paths, each exactly once, in no particular order

        Raises:
            InvalidProjectError: If the project root no longer exists
            ExternalToolUnavailableError: If the find executable is missing
        """
        if not os.path.isdir(project.root):
            raise InvalidProjectError(f"Project root no longer exists: {project.root}", project)

        rules = self.rules_for(project)
        if self.settings.backend == EnumeratorBackend.PYTHON:
            files = list(self._walk(project.root, rules))
        else:
            files = self._run_find(project.root, rules)

        self._stats['enumerations'] += 1
        self._stats['files_listed'] += len(files)
        logger.info(f"Listed {len(files)} files in {project.name}")
        return files

    def _run_find(self, root: str, rules: IgnoreRules) -> List[str]:
        command = build_find_command(root, rules, self.settings.find_executable)
        logger.debug(f"Running {' '.join(command)}")
        try:
            result = subprocess.run(command, stdout=subprocess.PIPE, stderr=subprocess.PIPE, check=False)
        except (FileNotFoundError, PermissionError) as e:
            self._stats['errors'] += 1
            raise ExternalToolUnavailableError(self.settings.find_executable) from e

        if result.returncode != 0:
            self._stats['errors'] += 1
            message = result.stderr.decode(errors='replace').strip()
            logger.warning(f"find exited with status {result.returncode} for {root}: {message}")
        return parse_find_output(result.stdout)

    def _walk(self, root: str, rules: IgnoreRules) -> Iterator[str]:
        def on_error(error: OSError) -> None:
            self._stats['errors'] += 1
            logger.warning(f"Cannot read directory {error.filename}: {error}")

        for current_dir, subdirs, files in os.walk(root.rstrip(os.sep) or os.sep, onerror=on_error):
            subdirs[:] = [d for d in subdirs if not rules.ignores_dir(d)]
            for filename in files:
                if rules.ignores_file(filename):
                    continue
                file_path = os.path.join(current_dir, filename)
                try:
                    mode = os.lstat(file_path).st_mode
                except OSError as e:
                    logger.warning(f"Cannot stat {file_path}: {e}")
                    self._stats['errors'] += 1
                    continue
                if stat.S_ISREG(mode):
                    yield file_path

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about enumerations run so far.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = {
            'enumerations': 0,
            'files_listed': 0,
            'errors': 0
        }
