"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of memorybank modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("memorybank"):
        del sys.modules[module_name]

WriteTree = Callable[[dict[str, str]], Path]


@pytest.fixture(autouse=True)
def _isolate_config(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Keep the user's global config and MEMORYBANK__ env vars out of tests."""
    import os

    from memorybank.config import loader

    for key in list(os.environ):
        if key.upper().startswith("MEMORYBANK__"):
            monkeypatch.delenv(key)
    global_dir = tmp_path_factory.mktemp("global-config")
    monkeypatch.setattr(loader, "GLOBAL_CONFIG_PATH", global_dir / "config.yaml")


@pytest.fixture
def write_tree(tmp_path: Path) -> WriteTree:
    """Write ``{relative_path: content}`` under tmp_path and return tmp_path."""

    def _write(files: dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return tmp_path

    return _write


@pytest.fixture
def bank_dir(tmp_path: Path) -> Path:
    """The default memory bank directory under tmp_path."""
    path = tmp_path / ".github" / "memory-bank"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def index_path(tmp_path: Path) -> Path:
    """The default index document location under tmp_path (not created)."""
    return tmp_path / ".github" / "copilot-instructions.md"
