"""
Unit tests for the root resolver.

Tests the upward walk, nearest-match and priority rules, failure when no
ancestor matches, and registration of resolved projects.
"""

import os
import shutil
import tempfile
from pathlib import Path
import pytest

from projscope.core.catalog import TypeCatalog, default_catalog, RUBY_PROJECT, VCS_PROJECT
from projscope.core.registry import ProjectRegistry
from projscope.core.resolver import RootResolver, parent_dir, is_filesystem_root
from projscope.exceptions import NotFoundError
from projscope.models.project import normalize_root
from projscope.models.project_type import marker_type


MARKER = ".projscope-test-marker"


class TestRootResolver:
    """Test cases for RootResolver."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.root = Path(self.temp_dir)
        self.catalog = default_catalog()
        self.registry = ProjectRegistry(self.catalog)
        self.resolver = RootResolver(self.catalog, self.registry)

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _make_repo(self, relative: str = "repo", *extra_files: str) -> Path:
        repo = self.root / relative
        (repo / ".git").mkdir(parents=True)
        for name in extra_files:
            (repo / name).write_text("")
        return repo

    def test_resolve_root_itself(self):
        """Resolving the root directory returns a project rooted there."""
        repo = self._make_repo()
        project = self.resolver.resolve(str(repo))

        assert project.root == normalize_root(str(repo))
        assert project.name == "repo"
        assert project.type == VCS_PROJECT

    def test_resolve_deep_subdirectory(self):
        """Any depth below the root resolves to the same project."""
        repo = self._make_repo()
        deep = repo / "a" / "b" / "c" / "d"
        deep.mkdir(parents=True)

        assert self.resolver.resolve(str(deep)) == self.resolver.resolve(str(repo))
        assert self.resolver.resolve(str(deep)).root == normalize_root(str(repo))

    def test_resolve_from_file(self):
        """A file path resolves through its directory."""
        repo = self._make_repo()
        (repo / "lib").mkdir()
        source = repo / "lib" / "main.rb"
        source.write_text("puts 1")

        assert self.resolver.resolve(str(source)).root == normalize_root(str(repo))

    def test_nearest_match_wins(self):
        """A nested project is preferred over its enclosing project."""
        outer = self._make_repo("outer")
        inner = self._make_repo("outer/vendor/inner")
        work = inner / "src"
        work.mkdir()

        project = self.resolver.resolve(str(work))
        assert project.root == normalize_root(str(inner))
        assert project.root != normalize_root(str(outer))

    def test_catalog_priority(self):
        """A directory matching both types resolves to the earlier one."""
        repo = self._make_repo("gem", "Gemfile")
        assert self.resolver.resolve(str(repo)).type == RUBY_PROJECT

    def test_priority_follows_catalog_order(self):
        """Swapping the order swaps the result."""
        catalog = TypeCatalog([
            marker_type("Generic", [MARKER]),
            marker_type("Specific", [MARKER], ["Gemfile"]),
        ])
        (self.root / MARKER).mkdir()
        (self.root / "Gemfile").write_text("")

        assert RootResolver(catalog).resolve(self.temp_dir).type == "Generic"

    def test_not_found(self):
        """No matching ancestor up to the filesystem root raises NotFoundError."""
        catalog = TypeCatalog([marker_type("Never", [MARKER + "-absent"])])
        resolver = RootResolver(catalog)
        deep = self.root / "x" / "y"
        deep.mkdir(parents=True)

        with pytest.raises(NotFoundError) as exc_info:
            resolver.resolve(str(deep))
        assert exc_info.value.start_dir == str(deep)

    def test_not_found_registers_nothing(self):
        """Failed resolutions leave the registry untouched."""
        catalog = TypeCatalog([marker_type("Never", [MARKER + "-absent"])])
        registry = ProjectRegistry(catalog)
        with pytest.raises(NotFoundError):
            RootResolver(catalog, registry).resolve(self.temp_dir)
        assert len(registry) == 0

    def test_resolution_registers_project(self):
        """Successful resolution records the project."""
        repo = self._make_repo()
        project = self.resolver.resolve(str(repo / ".git"))

        assert self.registry.projects() == [project]
        assert self.registry.current == project

    def test_resolution_idempotent(self):
        """Resolving twice yields equal projects and one registry entry."""
        repo = self._make_repo()
        first = self.resolver.resolve(str(repo))
        second = self.resolver.resolve(str(repo))

        assert first == second
        assert first.type == second.type
        assert len(self.registry) == 1

    def test_resolve_freezes_catalog(self):
        """The catalog becomes read-only once used."""
        self._make_repo()
        self.resolver.resolve(str(self.root / "repo"))
        assert self.catalog.frozen

    def test_resolver_without_registry(self):
        """A resolver can run without recording results."""
        repo = self._make_repo()
        project = RootResolver(default_catalog()).resolve(str(repo))
        assert project.type == VCS_PROJECT


class TestPathHelpers:
    """Test cases for the walk helpers."""

    def test_parent_dir(self):
        """Parents stay slash-terminated."""
        assert parent_dir(normalize_root("/a/b")) == normalize_root("/a")
        assert parent_dir(os.sep) == os.sep

    def test_is_filesystem_root(self):
        """Only the filesystem root is its own parent."""
        assert is_filesystem_root(os.sep)
        assert not is_filesystem_root(normalize_root("/a"))
