"""Persistent stores for scan state."""

from .scan_cache import ScanCache, normalise_project_path

__all__ = ["ScanCache", "normalise_project_path"]
