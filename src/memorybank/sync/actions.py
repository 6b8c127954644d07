"""Application of planned actions to the memory bank and index document.

Every write goes through the FileSystem primitives, and every target is
confined to the memory bank root. A failed action is reported as an
ActionOutcome, never raised.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

import structlog

from memorybank.config.constants import MEMORY_BANK_DIRNAME, MEMORY_BANK_SECTION_HEADING
from memorybank.config.models import MemoryBankConfig
from memorybank.core.errors import MemoryBankError
from memorybank.files.ops import FileSystem, LocalFileSystem, validate_path_in_root
from memorybank.sync.discovery import MemoryBankDiscoverer
from memorybank.sync.instructions import (
    ADDITIONAL_FILES_HEADING,
    CORE_FILE_DESCRIPTIONS,
    merge_section,
    render_section,
    section_bounds,
)
from memorybank.sync.models import ConflictAction
from memorybank.sync.references import extract_references, reference_matches, reference_spans

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ActionOutcome:
    applied: bool
    message: str
    path: str | None = None


def _title_for(rel_path: str) -> str:
    stem = PurePosixPath(rel_path).stem
    words = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", stem).replace("-", " ").replace("_", " ")
    return words.strip().title() or stem


def stub_document(rel_path: str) -> str:
    name = PurePosixPath(rel_path).name
    body = CORE_FILE_DESCRIPTIONS.get(name, f"Notes for {_title_for(rel_path).lower()}.")
    return f"# {_title_for(rel_path)}\n\n{body}\n"


def insert_reference(text: str, target: str) -> str:
    """Add ``- `target``` under the Additional Files heading of the managed section."""
    line = f"- `{target}`"
    bounds = section_bounds(text)
    if bounds is None:
        return (
            text.rstrip()
            + f"\n\n{MEMORY_BANK_SECTION_HEADING}\n\n{ADDITIONAL_FILES_HEADING}\n\n{line}\n"
        )

    start, end = bounds
    section, after = text[start:end], text[end:]
    idx = section.find(ADDITIONAL_FILES_HEADING)
    if idx == -1:
        section = section.rstrip("\n") + f"\n\n{ADDITIONAL_FILES_HEADING}\n\n{line}\n"
    else:
        heading_end = section.find("\n", idx)
        if heading_end == -1:
            section = section + f"\n\n{line}\n"
        else:
            insert_at = heading_end + 1
            if section[insert_at : insert_at + 1] == "\n":
                insert_at += 1
            section = section[:insert_at] + line + "\n" + section[insert_at:]
    if after and not section.endswith("\n\n"):
        section = section.rstrip("\n") + "\n\n"
    return text[:start] + section + after


# A separator left behind by a removed reference
_SEPARATOR_BEFORE = re.compile(r"(?:\s*,|\s+(?:and|or))\s*$")
_SEPARATOR_AFTER = re.compile(r"^\s*(?:,|(?:and|or)\b)\s*")


def _widen(line: str, start: int, end: int) -> tuple[int, int]:
    """Extend a token span over its code span or markdown link."""
    if line[start - 1 : start] == "`" and line[end : end + 1] == "`":
        return start - 1, end + 1
    if line[start - 2 : start] == "](" and line[end : end + 1] == ")":
        label = line.rfind("[", 0, start - 2)
        if label != -1:
            return label, end + 1
    return start, end


def strip_reference(line: str, target: str, prefixes: tuple[str, ...] = ()) -> str:
    """Remove references to ``target`` from one line of the index document.

    Returns an empty string when ``target`` was the line's only reference,
    so a list item naming just that document disappears. Other references
    on a mixed line are left in place.
    """
    spans = reference_spans(line, prefixes)
    hits = [(start, end) for ref, start, end in spans if reference_matches(ref, target)]
    if not hits:
        return line
    if len(hits) == len(spans):
        return ""
    for start, end in reversed(hits):
        start, end = _widen(line, start, end)
        head, tail = line[:start], line[end:]
        if before := _SEPARATOR_BEFORE.search(head):
            head = head[: before.start()]
        elif after := _SEPARATOR_AFTER.match(tail):
            tail = tail[after.end() :]
        if head[-1:].isspace() and tail[:1] == " ":
            tail = tail[1:]
        line = head + tail
    return line


class ActionApplier:
    """Applies ConflictActions for one project."""

    def __init__(
        self,
        project_root: Path,
        config: MemoryBankConfig | None = None,
        fs: FileSystem | None = None,
    ) -> None:
        self._root = project_root
        self._config = config or MemoryBankConfig()
        self._fs = fs or LocalFileSystem()
        self._mb_dir = self._config.memory_bank_dir(project_root)
        self._index = self._config.index_path(project_root)
        self._prefixes = (self._config.directory, MEMORY_BANK_DIRNAME)
        self._handlers: dict[str, Callable[[ConflictAction], ActionOutcome]] = {
            "add-reference": self._add_reference,
            "remove-reference": self._remove_reference,
            "create-file": self._create_file,
            "update-structure": self._update_structure,
            "delete-file": self._delete_file,
        }

    def apply(self, action: ConflictAction) -> ActionOutcome:
        try:
            outcome = self._handlers[action.action_type](action)
        except MemoryBankError as e:
            outcome = ActionOutcome(applied=False, message=e.message, path=e.path)
        except OSError as e:
            path = e.filename if isinstance(e.filename, str) else action.target_file
            outcome = ActionOutcome(applied=False, message=f"{e.strerror or e}: {path}", path=path)
        log.info(
            "action_applied" if outcome.applied else "action_failed",
            action=action.action_type,
            target=action.target_file,
            message=outcome.message,
        )
        return outcome

    def setup_index(self) -> ActionOutcome:
        """Create or refresh the managed section of the index document."""
        structure = MemoryBankDiscoverer(self._fs).discover_structure(self._mb_dir)
        section = render_section(structure, self._config.directory)
        self._fs.write_text(self._index, merge_section(self._read_index(), section))
        return ActionOutcome(True, "Index document updated", str(self._index))

    def _read_index(self) -> str | None:
        stat = self._fs.stat(self._index)
        if stat is None or stat.kind != "file":
            return None
        return self._fs.read_text(self._index)

    def _is_referenced(self, text: str, target: str) -> bool:
        return any(reference_matches(r, target) for r in extract_references(text, self._prefixes))

    def _add_reference(self, action: ConflictAction) -> ActionOutcome:
        target = action.target_file
        validate_path_in_root(self._mb_dir, target)
        text = self._read_index()
        if text is None:
            structure = MemoryBankDiscoverer(self._fs).discover_structure(self._mb_dir)
            text = render_section(structure, self._config.directory)
        elif self._is_referenced(text, target):
            return ActionOutcome(True, f"{target} is already referenced", str(self._index))
        if not self._is_referenced(text, target):
            text = insert_reference(text, target)
        self._fs.write_text(self._index, text)
        return ActionOutcome(True, f"Added reference to {target}", str(self._index))

    def _remove_reference(self, action: ConflictAction) -> ActionOutcome:
        target = action.target_file
        text = self._read_index()
        if text is None:
            return ActionOutcome(False, "Index document not found", str(self._index))
        lines = text.splitlines(keepends=True)
        kept = [strip_reference(line, target, self._prefixes) for line in lines]
        if kept == lines:
            return ActionOutcome(True, f"No reference to {target} found", str(self._index))
        self._fs.write_text(self._index, "".join(kept))
        return ActionOutcome(True, f"Removed reference to {target}", str(self._index))

    def _create_file(self, action: ConflictAction) -> ActionOutcome:
        path = validate_path_in_root(self._mb_dir, action.target_file)
        if self._fs.stat(path) is not None:
            return ActionOutcome(True, f"{action.target_file} already exists", str(path))
        self._fs.write_text(path, stub_document(action.target_file))
        return ActionOutcome(True, f"Created {action.target_file}", str(path))

    def _delete_file(self, action: ConflictAction) -> ActionOutcome:
        path = validate_path_in_root(self._mb_dir, action.target_file)
        stat = self._fs.stat(path)
        if stat is None or stat.kind != "file":
            return ActionOutcome(False, f"{action.target_file} not found", str(path))
        self._fs.remove(path)
        return ActionOutcome(True, f"Deleted {action.target_file}", str(path))

    def _update_structure(self, action: ConflictAction) -> ActionOutcome:
        return self.setup_index()
