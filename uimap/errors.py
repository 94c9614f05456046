"""Exception taxonomy for project scans.

Only :class:`ProjectNotFoundError` escapes a scan. The remaining errors are
raised inside a single stage and absorbed there: the affected file or edge is
dropped and a warning is recorded on the result.
"""

from __future__ import annotations


class UimapError(RuntimeError):
    """Base class for scanner errors."""


class ProjectNotFoundError(UimapError):
    """Raised when the project root is missing, not a directory, or unreadable."""

    def __init__(self, path: str, reason: str | None = None) -> None:
        message = f"Project path not found: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = path


class FileReadError(UimapError):
    """Raised when a single source file cannot be read or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Unable to read {path}: {reason}")
        self.path = path


class ClassificationAmbiguous(UimapError):
    """Raised when a file matches no entity category."""

    def __init__(self, path: str, reason: str = "no recognizable exports") -> None:
        super().__init__(f"Could not classify {path}: {reason}")
        self.path = path


class ReferenceUnresolved(UimapError):
    """Raised when an identifier or navigation target matches no known entity."""

    def __init__(self, name: str, referrer: str) -> None:
        super().__init__(f"Unresolved reference '{name}' in {referrer}")
        self.name = name
        self.referrer = referrer


class CacheCorrupted(UimapError):
    """Raised when a cache file exists but cannot be decoded."""


class CacheMismatch(UimapError):
    """Raised when a cache file belongs to a different project path."""

    def __init__(self, expected: str, found: object) -> None:
        super().__init__(f"Scan cache is for {found!r}, expected {expected!r}")
        self.expected = expected
        self.found = found


__all__ = [
    "CacheCorrupted",
    "CacheMismatch",
    "ClassificationAmbiguous",
    "FileReadError",
    "ProjectNotFoundError",
    "ReferenceUnresolved",
    "UimapError",
]
