"""Example template lookup and rendering.

``SKILL.md`` carries a Markdown table mapping tech stacks to example
templates::

    | Tech Stack         | Keywords          | Example File          |
    | ------------------ | ----------------- | --------------------- |
    | React (TypeScript) | react, typescript | react-typescript.md   |
    | Generic            | *                 | generic.md            |

:class:`TemplateTable` parses that table and selects the row that best
matches the tags reported by :func:`~instructkit_core.detect_tech_stack`.
:func:`render_template` then merges a :class:`~instructkit_core.ProjectProfile`
and the detection report into the selected template.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import PurePosixPath
from typing import NamedTuple

from instructkit_core.exceptions import TemplateNotFoundError
from instructkit_core.parsing import Section, extract_links, parse_table, render_sections, split_sections
from instructkit_core.profile import ProjectProfile
from instructkit_core.stacks import COMMAND_NAMES, StackReport

_logger = logging.getLogger(__name__)

#: Keyword that marks the fallback row of the lookup table.
FALLBACK_KEYWORD = "*"

_STACK_COLUMN = "Tech Stack"
_KEYWORDS_COLUMN = "Keywords"
_FILE_COLUMN = "Example File"

# Roles of common top-level directories, used when the profile does not
# describe the project structure.
_KNOWN_DIRS: dict[str, str] = {
    "src": "application source code",
    "app": "application code",
    "lib": "library code",
    "pkg": "reusable packages",
    "cmd": "executable entry points",
    "internal": "private packages",
    "tests": "test suite",
    "test": "test suite",
    "spec": "test suite",
    "docs": "documentation",
    "scripts": "developer and CI scripts",
    "public": "static assets served as-is",
    "components": "shared UI components",
    "pages": "route components",
    "config": "configuration",
    "migrations": "database migrations",
    "modules": "infrastructure modules",
    "environments": "per-environment configuration",
}


class TemplateEntry(NamedTuple):
    """One row of the lookup table."""

    stack: str
    keywords: frozenset[str]
    filename: str

    @property
    def is_fallback(self) -> bool:
        return FALLBACK_KEYWORD in self.keywords


class TemplateTable:
    """The stack-to-template lookup table of a skill.

    Rows keep their table order, which breaks ties during selection.

    Example::

        table = TemplateTable.from_markdown(await skill.get_body())
        entry = table.select(["react", "typescript", "javascript"])
        print(entry.filename)   # react-typescript.md
    """

    def __init__(self, entries: Iterable[TemplateEntry]) -> None:
        self._entries = list(entries)

    def __repr__(self) -> str:
        return f"TemplateTable({len(self._entries)} entries)"

    def __iter__(self) -> Iterator[TemplateEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_markdown(cls, markdown: str) -> TemplateTable:
        """Parse the first pipe table in *markdown*.

        The table needs ``Tech Stack`` and ``Example File`` columns;
        ``Keywords`` is optional and defaults to the lowercased stack
        label.  Rows without a filename are skipped with a warning.
        """
        entries: list[TemplateEntry] = []
        for row in parse_table(markdown):
            stack = row.get(_STACK_COLUMN, "").strip()
            filename = _cell_filename(row.get(_FILE_COLUMN, ""))
            if not stack or not filename:
                _logger.warning("Skipping template table row without stack or file: %s", row)
                continue
            raw_keywords = row.get(_KEYWORDS_COLUMN) or stack
            keywords = frozenset(
                k.strip().strip("`").lower() for k in raw_keywords.split(",") if k.strip()
            )
            entries.append(TemplateEntry(stack=stack, keywords=keywords, filename=filename))
        return cls(entries)

    def select(self, tags: Iterable[str]) -> TemplateEntry:
        """Return the entry that best matches the detected *tags*.

        Selection order:

        1. Entries whose keywords are all present in *tags*; the entry
           with the most keywords wins.
        2. Otherwise, the entry sharing the most keywords with *tags*.
        3. Otherwise, the ``*`` fallback entry.

        Ties are broken by table order.

        Raises:
            TemplateNotFoundError: If nothing matches and the table has
                no fallback row.
        """
        tagset = {t.lower() for t in tags}
        candidates = [e for e in self._entries if not e.is_fallback]

        full = [e for e in candidates if e.keywords <= tagset]
        if full:
            return max(full, key=lambda e: (len(e.keywords), -self._entries.index(e)))

        partial = [e for e in candidates if e.keywords & tagset]
        if partial:
            return max(
                partial, key=lambda e: (len(e.keywords & tagset), -self._entries.index(e))
            )

        for entry in self._entries:
            if entry.is_fallback:
                return entry
        raise TemplateNotFoundError(
            f"No example template matches stack {sorted(tagset)} and the table has no fallback"
        )

    def get(self, name: str) -> TemplateEntry:
        """Return the entry whose stack label, filename or file stem is *name*.

        Matching is case-insensitive.

        Raises:
            TemplateNotFoundError: If no entry matches.
        """
        wanted = name.strip().lower()
        for entry in self._entries:
            names = {entry.stack.lower(), entry.filename.lower(), PurePosixPath(entry.filename).stem}
            if wanted in names:
                return entry
        raise TemplateNotFoundError(f"Template {name!r} is not in the lookup table")

    def to_markdown(self) -> str:
        """Render the table back to Markdown."""
        lines = [
            f"| {_STACK_COLUMN} | {_KEYWORDS_COLUMN} | {_FILE_COLUMN} |",
            "| --- | --- | --- |",
        ]
        for entry in self._entries:
            keywords = ", ".join(sorted(entry.keywords))
            lines.append(f"| {entry.stack} | {keywords} | {entry.filename} |")
        return "\n".join(lines)


def _cell_filename(cell: str) -> str:
    """Extract a bare filename from a table cell (plain, backticked or linked)."""
    links = extract_links(cell)
    value = links[0] if links else cell.strip().strip("`")
    return PurePosixPath(value).name if value else ""


# ------------------------------------------------------------------
# Rendering
# ------------------------------------------------------------------


def render_template(
    template: str,
    profile: ProjectProfile | None = None,
    report: StackReport | None = None,
) -> str:
    """Merge project specifics into an example template.

    * The H1 title names the project when ``profile.name`` is set, and
      ``profile.description`` replaces the introduction below it.
    * ``Project Structure`` lists ``profile.structure``, or else the
      detected top-level directories.  The template's own structure is
      kept when neither is available.
    * ``Commands`` lists the profile's commands over the detected ones.
      The template's own block is kept when neither is available.
    * ``profile.guidelines`` are appended to ``Guidelines``.

    Returns:
        The rendered Markdown document.
    """
    profile = profile or ProjectProfile()
    preamble, sections = split_sections(template)

    if profile.name or profile.description:
        preamble = _render_preamble(preamble, profile)

    structure = _structure_lines(profile, report)
    if structure:
        _set_section(sections, "Project Structure", "\n".join(structure))

    commands = dict(report.commands) if report is not None else {}
    commands.update(profile.commands)
    if commands:
        _set_section(sections, "Commands", _commands_block(commands))

    if profile.guidelines:
        extra = "\n".join(f"- {g}" for g in profile.guidelines)
        index = _find_section(sections, "Guidelines")
        if index is None:
            sections.append(Section("Guidelines", extra))
        else:
            current = sections[index].body.rstrip("\n")
            sections[index] = Section(sections[index].heading, f"{current}\n{extra}\n")

    return render_sections(preamble, sections)


def _render_preamble(preamble: str, profile: ProjectProfile) -> str:
    lines = preamble.strip("\n").splitlines()
    title = lines[0] if lines and lines[0].startswith("# ") else "# Copilot Instructions"
    intro = "\n".join(lines[1:] if lines and lines[0].startswith("# ") else lines).strip()
    if profile.name:
        title = f"# Copilot Instructions for {profile.name}"
    if profile.description:
        intro = profile.description.strip()
    return f"{title}\n\n{intro}\n" if intro else f"{title}\n"


def _structure_lines(profile: ProjectProfile, report: StackReport | None) -> list[str]:
    if profile.structure:
        return [f"- `{path.rstrip('/')}/`: {role}" for path, role in profile.structure.items()]
    if report is None or not report.top_level_dirs:
        return []
    lines = []
    for name in report.top_level_dirs:
        role = _KNOWN_DIRS.get(name)
        lines.append(f"- `{name}/`: {role}" if role else f"- `{name}/`")
    return lines


def _commands_block(commands: dict[str, str]) -> str:
    order = {name: i for i, name in enumerate(COMMAND_NAMES)}
    names = sorted(commands, key=lambda n: (order.get(n, len(order)), n))
    lines = ["```bash"]
    for name in names:
        lines.append(f"# {name}")
        lines.append(commands[name])
    lines.append("```")
    return "\n".join(lines)


def _find_section(sections: list[Section], heading: str) -> int | None:
    wanted = heading.lower()
    for i, section in enumerate(sections):
        if section.heading.lower() == wanted:
            return i
    return None


def _set_section(sections: list[Section], heading: str, body: str) -> None:
    index = _find_section(sections, heading)
    if index is None:
        sections.append(Section(heading, body))
    else:
        sections[index] = Section(sections[index].heading, body)
