"""Writing ``.github/copilot-instructions.md`` files.

Copilot reads project instructions from ``.github/copilot-instructions.md``.
:func:`resolve_target_path` applies that convention to a user-supplied
path, and :func:`write_instructions` writes the file.

An existing instructions file is **edited in place, never replaced**:
:func:`merge_instructions` keeps every existing section verbatim, adds
the generated sections it lacks, and only replaces the sections the
caller names explicitly.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Literal, NamedTuple

from instructkit_core.exceptions import InstructionsFileError
from instructkit_core.parsing import Section, render_sections, split_sections

_logger = logging.getLogger(__name__)

#: Location of the instructions file relative to a repository root.
INSTRUCTIONS_RELATIVE_PATH = Path(".github") / "copilot-instructions.md"


class MergeResult(NamedTuple):
    """Outcome of :func:`merge_instructions`."""

    content: str
    added_sections: list[str]
    updated_sections: list[str]


class WriteResult(NamedTuple):
    """Outcome of :func:`write_instructions`."""

    path: Path
    action: Literal["created", "merged", "unchanged"]
    content: str
    added_sections: list[str]
    updated_sections: list[str]


def resolve_target_path(project_root: Path, path: str | Path | None = None) -> Path:
    """Return where the instructions file for *project_root* belongs.

    * No *path*: ``<project_root>/.github/copilot-instructions.md``.
    * A *path* already ending in ``.github/copilot-instructions.md`` is
      used as given.
    * Any other *path* is treated as a repository root and gets
      ``.github/copilot-instructions.md`` appended.

    Relative paths are resolved against *project_root*.
    """
    root = Path(project_root)
    if path is None:
        return root / INSTRUCTIONS_RELATIVE_PATH

    target = Path(path)
    if not target.is_absolute():
        target = root / target
    if target.parts[-2:] == INSTRUCTIONS_RELATIVE_PATH.parts:
        return target
    return target / INSTRUCTIONS_RELATIVE_PATH


def merge_instructions(
    existing: str,
    generated: str,
    *,
    update_sections: Iterable[str] = (),
) -> MergeResult:
    """Merge *generated* instructions into an *existing* file.

    * The existing title and introduction are kept.  The generated ones
      are used only when the existing file has none.
    * Existing ``##`` sections are kept verbatim and in order, except
      those named in *update_sections*, whose bodies are replaced by the
      generated ones.
    * Generated sections missing from the existing file are appended.

    Section headings compare case-insensitively.
    """
    wanted = {h.lower() for h in update_sections}
    old_preamble, old_sections = split_sections(existing)
    new_preamble, new_sections = split_sections(generated)
    generated_by_heading = {s.heading.lower(): s for s in new_sections}

    merged: list[Section] = []
    updated: list[str] = []
    for section in old_sections:
        key = section.heading.lower()
        replacement = generated_by_heading.get(key)
        if key in wanted and replacement is not None and replacement.body.strip() != section.body.strip():
            merged.append(Section(section.heading, replacement.body))
            updated.append(section.heading)
        else:
            merged.append(section)

    present = {s.heading.lower() for s in old_sections}
    added: list[str] = []
    for section in new_sections:
        if section.heading.lower() not in present:
            merged.append(section)
            added.append(section.heading)

    preamble = old_preamble if old_preamble.strip() else new_preamble
    return MergeResult(render_sections(preamble, merged), added, updated)


def write_instructions(
    target: Path,
    content: str,
    *,
    update_sections: Iterable[str] = (),
    dry_run: bool = False,
) -> WriteResult:
    """Write *content* to *target*, merging into an existing file.

    Parent directories are created as needed.  With *dry_run* nothing is
    written but the result describes what would happen.

    Raises:
        InstructionsFileError: If *target* is a directory or cannot be
            read or written.
    """
    target = Path(target)
    if target.is_dir():
        raise InstructionsFileError(f"Target is a directory: {target}")

    if target.exists():
        try:
            existing = target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise InstructionsFileError(f"Cannot read existing file {target}: {exc}") from exc
        result = merge_instructions(existing, content, update_sections=update_sections)
        if not result.added_sections and not result.updated_sections:
            return WriteResult(target, "unchanged", existing, [], [])
        action: Literal["created", "merged", "unchanged"] = "merged"
        final = result.content
        added, updated = result.added_sections, result.updated_sections
    else:
        action = "created"
        final = content if content.endswith("\n") else content + "\n"
        added, updated = [], []

    if dry_run:
        _logger.info("Dry run: would %s %s", "create" if action == "created" else "update", target)
        return WriteResult(target, action, final, added, updated)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(final, encoding="utf-8")
    except OSError as exc:
        raise InstructionsFileError(f"Cannot write {target}: {exc}") from exc
    _logger.info("%s %s", action.capitalize(), target)
    return WriteResult(target, action, final, added, updated)
