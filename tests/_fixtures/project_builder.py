"""Helper utilities for constructing temporary frontend projects in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Mapping, Optional

from uimap.models import Framework, RouterType, ScanResult
from uimap.scanner import ProjectScanner


class ProjectBuilder:
    """Utility for writing files into a throwaway project and rescanning it."""

    def __init__(self, tmp_path: Path) -> None:
        root = tmp_path / "project"
        root.mkdir()
        self.root = root.resolve()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def package(self, name: str = "fixture-app", **dependencies: str) -> None:
        """Write a package.json declaring ``dependencies`` (``react_router_dom`` -> ``react-router-dom``)."""
        payload = {
            "name": name,
            "dependencies": {key.replace("_", "-"): value for key, value in dependencies.items()},
        }
        (self.root / "package.json").write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def scan(self, **scanner_options: Any) -> ScanResult:
        """Return a fresh scan of the project contents."""
        return ProjectScanner(**scanner_options).scan(self.root)

    def file(self, relative: str) -> str:
        """Absolute path string of ``relative``, as reported in scan results."""
        return str(self.root / relative)


def empty_result(project_path: Path | str, *, name: Optional[str] = None) -> ScanResult:
    """A minimal ScanResult for tests that do not exercise the pipeline."""
    path = Path(project_path)
    return ScanResult(
        project_path=str(path),
        project_name=name or path.name,
        framework=Framework.UNKNOWN,
        router_type=RouterType.UNKNOWN,
        scanned_at="2024-01-01T00:00:00Z",
    )


__all__ = ["ProjectBuilder", "empty_result"]
