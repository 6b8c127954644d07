"""Tests for manifest reading."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from memorybank.analysis.manifest import read_manifest
from memorybank.analysis.models import DependencyKind
from memorybank.files.ops import LocalFileSystem


def _read(root: Path):  # type: ignore[no-untyped-def]
    names = [p.name for p in root.iterdir() if p.is_file()]
    return read_manifest(root, LocalFileSystem(), names)


class TestPackageJson:
    def test_metadata_dependencies_scripts_and_entry_points(self, tmp_path: Path) -> None:
        # Given
        (tmp_path / "package.json").write_text(
            json.dumps(
                {
                    "name": "demo",
                    "description": "Demo app",
                    "version": "2.1.0",
                    "main": "dist/index.js",
                    "bin": {"demo": "bin/demo.js"},
                    "scripts": {"build": "tsc"},
                    "dependencies": {"express": "^4.18.0"},
                    "devDependencies": {"jest": "^29.0.0"},
                }
            )
        )

        # When
        info = _read(tmp_path)

        # Then
        assert (info.name, info.description, info.version) == ("demo", "Demo app", "2.1.0")
        assert [(d.name, d.version, d.kind) for d in info.dependencies] == [
            ("express", "^4.18.0", DependencyKind.RUNTIME),
            ("jest", "^29.0.0", DependencyKind.DEVELOPMENT),
        ]
        assert info.scripts == {"build": "tsc"}
        assert info.entry_points == ("dist/index.js", "bin/demo.js")
        assert info.manifests == ("package.json",)

    def test_malformed_json_is_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text("{not json")

        info = _read(tmp_path)

        assert info.name == tmp_path.name
        assert info.dependencies == ()
        assert info.manifests == ()

    def test_non_object_json_is_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text("[1, 2]")

        assert _read(tmp_path).manifests == ()


class TestPyproject:
    def test_project_table(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            "[project]\n"
            'name = "tool"\n'
            'version = "0.3.0"\n'
            'dependencies = ["click>=8.1", "rich", "pydantic[email]>=2; python_version>\'3.8\'"]\n'
            "[project.optional-dependencies]\n"
            'test = ["pytest>=8"]\n'
            "[project.scripts]\n"
            'tool = "tool.cli:main"\n'
        )

        info = _read(tmp_path)

        assert info.name == "tool"
        assert [(d.name, d.version, d.kind) for d in info.dependencies] == [
            ("click", ">=8.1", DependencyKind.RUNTIME),
            ("rich", None, DependencyKind.RUNTIME),
            ("pydantic", ">=2", DependencyKind.RUNTIME),
            ("pytest", ">=8", DependencyKind.DEVELOPMENT),
        ]
        assert info.entry_points == ("tool.cli:main",)

    def test_malformed_toml_is_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[project\nname=")

        assert _read(tmp_path).manifests == ()


class TestRequirements:
    @pytest.mark.parametrize(
        ("filename", "kind"),
        [
            ("requirements.txt", DependencyKind.RUNTIME),
            ("requirements-dev.txt", DependencyKind.DEVELOPMENT),
            ("test-requirements.txt", DependencyKind.DEVELOPMENT),
        ],
    )
    def test_requirement_lines(self, tmp_path: Path, filename: str, kind: DependencyKind) -> None:
        (tmp_path / filename).write_text(
            "# pinned\nrequests==2.31.0\n-r base.txt\n\nflask  # web\n"
        )

        info = _read(tmp_path)

        assert [(d.name, d.version, d.kind) for d in info.dependencies] == [
            ("requests", "==2.31.0", kind),
            ("flask", None, kind),
        ]
        assert info.manifests == (filename,)


def test_no_manifest_defaults_to_directory_name(tmp_path: Path) -> None:
    info = read_manifest(tmp_path, LocalFileSystem(), [])

    assert info.name == tmp_path.name
    assert info.description == ""
    assert info.dependencies == ()


def test_symlinked_manifest_is_not_read(tmp_path: Path) -> None:
    # Given a package.json that links outside the project
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "real.json").write_text(json.dumps({"dependencies": {"express": "^4.0.0"}}))
    project = tmp_path / "proj"
    project.mkdir()
    os.symlink(outside / "real.json", project / "package.json")

    # When
    info = read_manifest(project, LocalFileSystem(), ["package.json"])

    # Then
    assert info.dependencies == ()
    assert info.manifests == ()
