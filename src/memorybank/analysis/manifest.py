"""Dependency manifest reading.

Understands ``package.json``, ``pyproject.toml`` and ``requirements*.txt``
at the project root. Absent manifests contribute nothing; malformed ones
are logged and skipped.
"""

from __future__ import annotations

import json
import re
import tomllib
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

from memorybank.analysis.models import DependencyFact, DependencyKind, ManifestInfo
from memorybank.files.ops import FileSystem

log = structlog.get_logger(__name__)

_REQUIREMENT_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)\s*(?:\[[^\]]*\])?\s*(.*)$")
_REQUIREMENTS_FILE_RE = re.compile(r"^(?:requirements.*|.*-requirements)\.txt$")


def _split_requirement(spec: str) -> tuple[str, str | None] | None:
    match = _REQUIREMENT_RE.match(spec.split(";")[0])
    if match is None:
        return None
    version = match.group(2).strip()
    return match.group(1), version or None


def _read_package_json(data: dict[str, Any], info: dict[str, Any]) -> None:
    for key in ("name", "description", "version"):
        if isinstance(data.get(key), str):
            info[key] = data[key]
    for section, kind in (
        ("dependencies", DependencyKind.RUNTIME),
        ("devDependencies", DependencyKind.DEVELOPMENT),
    ):
        deps = data.get(section)
        if isinstance(deps, dict):
            info["dependencies"].extend(
                DependencyFact(name=name, version=str(version), kind=kind, manifest="package.json")
                for name, version in deps.items()
            )
    scripts = data.get("scripts")
    if isinstance(scripts, dict):
        info["scripts"].update({k: str(v) for k, v in scripts.items()})
    for key in ("main", "module", "types"):
        if isinstance(data.get(key), str):
            info["entry_points"].append(data[key])
    bin_field = data.get("bin")
    if isinstance(bin_field, str):
        info["entry_points"].append(bin_field)
    elif isinstance(bin_field, dict):
        info["entry_points"].extend(str(v) for v in bin_field.values())


def _read_pyproject(data: dict[str, Any], info: dict[str, Any]) -> None:
    project = data.get("project")
    if not isinstance(project, dict):
        return
    for key in ("name", "description", "version"):
        if isinstance(project.get(key), str):
            info[key] = project[key]

    def add(specs: Any, kind: DependencyKind) -> None:
        for spec in specs if isinstance(specs, list) else ():
            parsed = _split_requirement(str(spec))
            if parsed is not None:
                info["dependencies"].append(
                    DependencyFact(parsed[0], parsed[1], kind, "pyproject.toml")
                )

    add(project.get("dependencies"), DependencyKind.RUNTIME)
    optional = project.get("optional-dependencies")
    if isinstance(optional, dict):
        for specs in optional.values():
            add(specs, DependencyKind.DEVELOPMENT)
    scripts = project.get("scripts")
    if isinstance(scripts, dict):
        info["scripts"].update({k: str(v) for k, v in scripts.items()})
        info["entry_points"].extend(str(v) for v in scripts.values())


def _read_requirements(text: str, filename: str, info: dict[str, Any]) -> None:
    lowered = filename.lower()
    kind = (
        DependencyKind.DEVELOPMENT
        if "dev" in lowered or "test" in lowered
        else DependencyKind.RUNTIME
    )
    for raw in text.splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line or line.startswith("-"):
            continue
        parsed = _split_requirement(line)
        if parsed is not None:
            info["dependencies"].append(DependencyFact(parsed[0], parsed[1], kind, filename))


def _is_manifest_name(filename: str) -> bool:
    return filename in ("package.json", "pyproject.toml") or bool(
        _REQUIREMENTS_FILE_RE.match(filename)
    )


def read_manifest(root: Path, fs: FileSystem, root_files: Iterable[str]) -> ManifestInfo:
    """Collect project metadata and dependencies from root-level manifests."""
    info: dict[str, Any] = {
        "name": root.name,
        "description": "",
        "version": "",
        "dependencies": [],
        "scripts": {},
        "entry_points": [],
    }
    manifests: list[str] = []
    names = sorted(root_files)

    for filename in names:
        if not _is_manifest_name(filename):
            continue
        stat = fs.stat(root / filename)
        if stat is None or stat.kind != "file":
            # Symlinked manifests are leaves; their targets are not read
            log.debug("manifest_skipped", path=filename, kind=stat.kind if stat else None)
            continue
        if filename == "package.json":
            parse = json.loads
            reader = _read_package_json
        elif filename == "pyproject.toml":
            parse = tomllib.loads
            reader = _read_pyproject
        elif _REQUIREMENTS_FILE_RE.match(filename):
            try:
                text = fs.read_text(root / filename)
            except OSError as e:
                log.warning("manifest_unreadable", path=filename, error=str(e))
                continue
            _read_requirements(text, filename, info)
            manifests.append(filename)
            continue
        else:
            continue

        try:
            data = parse(fs.read_text(root / filename))
        except OSError as e:
            log.warning("manifest_unreadable", path=filename, error=str(e))
            continue
        except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
            log.warning("manifest_malformed", path=filename, error=str(e))
            continue
        if not isinstance(data, dict):
            log.warning("manifest_malformed", path=filename, error="top level is not an object")
            continue
        reader(data, info)
        manifests.append(filename)

    return ManifestInfo(
        name=info["name"],
        description=info["description"],
        version=info["version"],
        dependencies=tuple(info["dependencies"]),
        scripts=info["scripts"],
        entry_points=tuple(dict.fromkeys(info["entry_points"])),
        manifests=tuple(manifests),
    )
