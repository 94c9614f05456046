"""Tests for uimap.walker."""

from __future__ import annotations

from pathlib import Path

import pytest

from uimap.config import ScannerSettings
from uimap.errors import ProjectNotFoundError
from uimap.walker import is_source_file, walk_project
from tests._fixtures.project_builder import ProjectBuilder


def _relative(builder: ProjectBuilder, config: ScannerSettings | None = None) -> list[str]:
    result = walk_project(builder.root, config)
    return [result.relative(path) for path in result.files]


def test_walk_collects_conventional_roots_and_entry_files(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "app/page.tsx": "export default function Home() { return <main />; }\n",
            "components/Button.tsx": "export default function Button() { return <button />; }\n",
            "src/hooks/useAuth.ts": "export function useAuth() { return null; }\n",
            "src/App.tsx": "export default function App() { return <div />; }\n",
            "middleware.ts": "export function middleware() {}\n",
            "scripts/seed.ts": "export const seed = 1;\n",
            "next.config.js": "module.exports = {};\n",
        }
    )

    files = _relative(project_builder)

    assert files == [
        "app/page.tsx",
        "components/Button.tsx",
        "middleware.ts",
        "src/App.tsx",
        "src/hooks/useAuth.ts",
    ]


def test_walk_skips_build_output_tests_and_declarations(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "components/Card.tsx": "export default function Card() { return <div />; }\n",
            "components/Card.test.tsx": "test('renders', () => {});\n",
            "components/Card.stories.tsx": "export default {};\n",
            "components/types.d.ts": "declare const x: number;\n",
            "components/__tests__/Card.tsx": "export {};\n",
            "components/node_modules/dep/index.js": "module.exports = 1;\n",
            "components/.hidden/Secret.tsx": "export {};\n",
            "components/styles.css": "body {}\n",
        }
    )

    assert _relative(project_builder) == ["components/Card.tsx"]


def test_walk_respects_gitignore_and_configured_excludes(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            ".gitignore": "components/generated/\n*.draft.tsx\n",
            "components/Button.tsx": "export default function Button() { return <button />; }\n",
            "components/generated/Icon.tsx": "export default function Icon() { return <svg />; }\n",
            "components/Notes.draft.tsx": "export default function Notes() { return <p />; }\n",
            "components/legacy/Old.tsx": "export default function Old() { return <p />; }\n",
        }
    )

    files = _relative(project_builder, ScannerSettings(exclude_paths=["components/legacy/"]))
    assert files == ["components/Button.tsx"]

    unfiltered = _relative(project_builder, ScannerSettings(follow_gitignore=False))
    assert "components/generated/Icon.tsx" in unfiltered
    assert "components/Notes.draft.tsx" in unfiltered


def test_walk_includes_extra_roots(project_builder: ProjectBuilder) -> None:
    project_builder.write({"layouts/Shell.tsx": "export default function Shell() { return <div />; }\n"})

    assert _relative(project_builder) == []
    assert _relative(project_builder, ScannerSettings(extra_roots=["layouts"])) == ["layouts/Shell.tsx"]


def test_walk_rejects_missing_directory(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    with pytest.raises(ProjectNotFoundError) as excinfo:
        walk_project(missing)

    assert str(missing) in str(excinfo.value)


def test_walk_rejects_file_path(tmp_path: Path) -> None:
    target = tmp_path / "package.json"
    target.write_text("{}", encoding="utf-8")

    with pytest.raises(ProjectNotFoundError, match="not a directory"):
        walk_project(target)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Button.tsx", True),
        ("utils.js", True),
        ("index.jsx", True),
        ("env.d.ts", False),
        ("Button.spec.ts", False),
        ("README.md", False),
    ],
)
def test_is_source_file(name: str, expected: bool) -> None:
    assert is_source_file(name) is expected
