"""Tests for the scan result cache store."""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

import pytest

from uimap.errors import CacheCorrupted, CacheMismatch
from uimap.models import (
    ComponentInfo,
    DataDependency,
    DependencySet,
    DependencyType,
    Framework,
    LayoutNode,
    MiddlewareInfo,
    PageInfo,
    PropInfo,
    RouterType,
    ScanResult,
    ScanWarning,
)
from uimap.stores import ScanCache
from tests._fixtures.project_builder import empty_result


def _project(tmp_path: Path, name: str = "project") -> Path:
    root = tmp_path / name
    root.mkdir()
    return root.resolve()


def _result(root: Path) -> ScanResult:
    return ScanResult(
        project_path=str(root),
        project_name="shop",
        framework=Framework.NEXTJS,
        router_type=RouterType.NEXTJS_APP,
        scanned_at="2024-05-01T12:00:00Z",
        pages=(
            PageInfo(
                route="/blog/:slug",
                file_name="page.tsx",
                file_path=str(root / "app/blog/[slug]/page.tsx"),
                components=("Card",),
                data_dependencies=(DataDependency(DependencyType.FETCH, "/api/posts"),),
            ),
        ),
        components=(
            ComponentInfo(
                name="Card",
                file_name="Card.tsx",
                file_path=str(root / "components/Card.tsx"),
                is_client_component=True,
                props=(PropInfo("title", "string", False, '"Untitled"'),),
                used_in_pages=("/blog/:slug",),
                dependencies=DependencySet(hooks=("useTheme",)),
                all_dependencies=DependencySet(hooks=("useTheme",)),
            ),
        ),
        middleware=MiddlewareInfo(file_name="middleware.ts", file_path=str(root / "middleware.ts")),
        layout_hierarchy=LayoutNode(route="/", file_path=str(root / "app/layout.tsx")),
        warnings=(ScanWarning(kind="collision", message="Duplicate component 'Card'", path="components/Card.tsx"),),
    )


def test_scan_cache_round_trip(tmp_path: Path) -> None:
    root = _project(tmp_path)
    cache = ScanCache()
    result = _result(root)

    assert cache.save(root, result) is True
    assert cache.path_for(root) == root / ".uimap" / "scan.json"

    payload = json.loads(cache.path_for(root).read_text(encoding="utf-8"))
    assert payload["version"] == 1
    assert payload["projectPath"] == str(root)
    assert payload["cachedAt"].endswith("Z")

    assert cache.load(root) == result
    assert ScanCache().read(str(root) + "/") == result


def test_scan_cache_missing_file_returns_none(tmp_path: Path) -> None:
    root = _project(tmp_path)

    assert ScanCache().load(root) is None
    with pytest.raises(FileNotFoundError):
        ScanCache().read(root)


def test_scan_cache_rejects_snapshot_of_another_project(tmp_path: Path) -> None:
    original = _project(tmp_path, "original")
    moved = _project(tmp_path, "moved")
    cache = ScanCache()
    cache.save(original, empty_result(original))

    target = cache.path_for(moved)
    target.parent.mkdir(parents=True)
    shutil.copy(cache.path_for(original), target)

    assert cache.load(moved) is None
    with pytest.raises(CacheMismatch) as excinfo:
        cache.read(moved)
    assert excinfo.value.expected == str(moved)
    assert excinfo.value.found == str(original)


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        json.dumps({"version": 99, "projectPath": "", "scanResult": {}}),
        json.dumps([1, 2, 3]),
    ],
)
def test_scan_cache_rejects_corrupted_files(tmp_path: Path, content: str) -> None:
    root = _project(tmp_path)
    cache = ScanCache()
    cache.path_for(root).parent.mkdir(parents=True)
    cache.path_for(root).write_text(content, encoding="utf-8")

    assert cache.load(root) is None
    with pytest.raises(CacheCorrupted):
        cache.read(root)


def test_scan_cache_rejects_malformed_snapshot(tmp_path: Path) -> None:
    root = _project(tmp_path)
    cache = ScanCache()
    payload = {"version": 1, "projectPath": str(root), "scanResult": {"projectPath": str(root)}, "cachedAt": "x"}
    cache.path_for(root).parent.mkdir(parents=True)
    cache.path_for(root).write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(CacheCorrupted):
        cache.read(root)


def test_scan_cache_clear(tmp_path: Path) -> None:
    root = _project(tmp_path)
    cache = ScanCache(".cache/uimap")
    cache.save(root, empty_result(root))

    assert (root / ".cache" / "uimap" / "scan.json").exists()
    assert cache.clear(root) is True
    assert cache.clear(root) is False
    assert cache.load(root) is None


def test_scan_cache_write_failure_is_logged_and_reported(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    root = _project(tmp_path)
    # A regular file where the cache directory should be.
    (root / ".uimap").write_text("occupied", encoding="utf-8")
    cache = ScanCache()

    with caplog.at_level(logging.WARNING, logger="uimap.cache"):
        assert cache.save(root, empty_result(root)) is False

    assert "Failed to write scan cache" in caplog.text
    assert cache.load(root) is None
