"""Tests for directory exclusion."""

import pytest

from memorybank.core.excludes import DEFAULT_PRUNABLE_DIRS, PRUNABLE_DIRS, VCS_DIRS, is_prunable


class TestIsPrunable:
    @pytest.mark.parametrize("name", [".git", "node_modules", "__pycache__", ".venv", "dist"])
    def test_given_builtin_name_when_checked_then_prunable(self, name: str) -> None:
        assert is_prunable(name)

    @pytest.mark.parametrize("name", ["src", "lib", "components", "tests"])
    def test_given_source_dir_when_checked_then_kept(self, name: str) -> None:
        assert not is_prunable(name)

    def test_given_egg_info_when_checked_then_prunable(self) -> None:
        assert is_prunable("memorybank.egg-info")

    def test_given_extra_names_when_checked_then_pruned(self) -> None:
        assert is_prunable("generated", frozenset({"generated"}))
        assert not is_prunable("generated")

    def test_vcs_dirs_are_always_part_of_the_pruned_set(self) -> None:
        assert VCS_DIRS <= PRUNABLE_DIRS
        assert DEFAULT_PRUNABLE_DIRS <= PRUNABLE_DIRS
