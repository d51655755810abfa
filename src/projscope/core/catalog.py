"""
Type catalog for projscope.

The catalog is an ordered list of project types. Order is priority: when a
directory matches several types it is classified as the first one listed.
"""

from typing import Iterable, Iterator, List, Optional
import logging

from ..exceptions import CatalogError
from ..models.project_type import ProjectTypeSpec, MarkerProjectType, marker_type


logger = logging.getLogger(__name__)

VCS_MARKERS = [".git", ".hg", ".bzr", "_darcs", "_MTN", ".svn"]

RUBY_MARKERS = [
    "*.gemspec",
    "Gemfile",
    "Rakefile",
    "rakefile",
    "Rakefile.rb",
    ".rspec",
    ".autotest",
    "spec/spec_helper.rb",
    "test/test_helper.rb"
]

RUBY_PROJECT = "Version-controlled ruby project"
VCS_PROJECT = "Version-controlled project"


class TypeCatalog:
    """
    Priority-ordered collection of project types.

    The catalog can be extended until its first use by a resolver or
    registry, after which it is frozen and read-only.
    """

    def __init__(self, specs: Optional[Iterable[ProjectTypeSpec]] = None):
        self._specs: List[ProjectTypeSpec] = []
        self._frozen = False
        for spec in specs or []:
            self.append(spec)

    def _check_insert(self, spec: ProjectTypeSpec) -> None:
        if self._frozen:
            raise CatalogError("Type catalog is frozen; add project types before first use")
        if not isinstance(spec, ProjectTypeSpec):
            raise CatalogError(f"Expected a ProjectTypeSpec, got {type(spec).__name__}")
        if self.get(spec.name) is not None:
            raise CatalogError(f"Duplicate project type name: {spec.name}")

    def append(self, spec: ProjectTypeSpec) -> None:
        """Add a type with the lowest priority."""
        self._check_insert(spec)
        self._specs.append(spec)

    def prepend(self, spec: ProjectTypeSpec) -> None:
        """Add a type with the highest priority."""
        self._check_insert(spec)
        self._specs.insert(0, spec)

    def extend(self, specs: Iterable[ProjectTypeSpec]) -> None:
        """Append several types, keeping their order."""
        for spec in specs:
            self.append(spec)

    def prepend_all(self, specs: Iterable[ProjectTypeSpec]) -> None:
        """Prepend several types so that they end up in the given order."""
        for spec in reversed(list(specs)):
            self.prepend(spec)

    def freeze(self) -> None:
        """Make the catalog read-only."""
        if not self._frozen:
            logger.debug(f"Freezing type catalog with {len(self._specs)} types: {self.names()}")
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Optional[ProjectTypeSpec]:
        """Look up a type by name."""
        for spec in self._specs:
            if spec.name == name:
                return spec
        return None

    def names(self) -> List[str]:
        return [spec.name for spec in self._specs]

    def first_match(self, path: str) -> Optional[ProjectTypeSpec]:
        """
        Return the highest-priority type whose test accepts ``path``.

        Args:
            path: Directory to classify

        Returns:
            The matching ProjectTypeSpec, or None
        """
        for spec in self._specs:
            if spec.matches(path):
                return spec
        return None

    def __iter__(self) -> Iterator[ProjectTypeSpec]:
        return iter(list(self._specs))

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None


def ruby_project_type() -> MarkerProjectType:
    """Ruby project under version control, detected by build or test files."""
    return marker_type(
        RUBY_PROJECT,
        VCS_MARKERS,
        RUBY_MARKERS,
        ignored_dirs=["vendor", "tmp", "log", "coverage", ".bundle"],
        ignored_files=["*.log"]
    )


def vcs_project_type() -> MarkerProjectType:
    """Generic catch-all: any directory holding version control metadata."""
    return marker_type(VCS_PROJECT, VCS_MARKERS)


def default_catalog() -> TypeCatalog:
    """Return a fresh catalog of the built-in project types."""
    return TypeCatalog([ruby_project_type(), vcs_project_type()])
