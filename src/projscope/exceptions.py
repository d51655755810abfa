"""
Exception hierarchy for projscope.

Every error raised by the resolution, registry, enumeration and scope layers
derives from ProjscopeError so that callers can catch the whole family.
"""

from typing import Optional


class ProjscopeError(Exception):
    """Base class for all projscope errors."""
    pass


class NotFoundError(ProjscopeError):
    """Raised when no ancestor of a directory matches any project type."""

    def __init__(self, start_dir: str):
        self.start_dir = start_dir
        super().__init__(f"No project found for {start_dir}")


class InvalidProjectError(ProjscopeError):
    """Raised when a previously resolved project no longer validates."""

    def __init__(self, message: str, project: Optional[object] = None):
        self.project = project
        super().__init__(message)


class ExternalToolUnavailableError(ProjscopeError):
    """Raised when an external executable cannot be found or started."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"External tool not available: {tool}")


class CatalogError(ProjscopeError):
    """Raised on invalid changes to a type catalog."""
    pass
