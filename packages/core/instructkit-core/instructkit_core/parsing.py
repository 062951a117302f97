"""Shared Markdown parsing utilities.

This module provides the helpers used across providers and the
generator to pick apart the Markdown files of a skill bundle:

* :func:`split_frontmatter` -- YAML frontmatter and body of ``SKILL.md``
  and ``*.agent.md`` files.
* :func:`split_sections` / :func:`render_sections` -- H2-level sections
  of a copilot instructions file, used when merging into existing files.
* :func:`parse_table` -- the first pipe table of a document, used for
  the stack-to-template lookup table in ``SKILL.md``.
* :func:`extract_links` -- inline link targets, used to find the skills
  an agent definition refers to.
"""

from __future__ import annotations

import re
from typing import Any, NamedTuple

import yaml

#: Frontmatter blocks larger than this are ignored (64 KiB).
MAX_FRONTMATTER_BYTES: int = 64 * 1024

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*\r?$", re.MULTILINE | re.DOTALL)
_H2_RE = re.compile(r"^##[ \t]+(.+?)[ \t#]*$")
_FENCE_RE = re.compile(r"^[ \t]{0,3}(```|~~~)")
_TABLE_SEPARATOR_RE = re.compile(r"^\|?[\s:|-]+\|?$")
_LINK_RE = re.compile(r"\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")


class Section(NamedTuple):
    """A level-two section of a Markdown document."""

    heading: str
    body: str


def split_frontmatter(raw: str) -> tuple[dict[str, Any], str]:
    """Split Markdown content into YAML frontmatter and body.

    Frontmatter is the YAML block delimited by ``---`` on its own line
    at the very start of the file.  If no valid frontmatter is detected
    the entire content is returned as the body with an empty dict.

    Args:
        raw: Full text content of a ``SKILL.md`` or agent file.

    Returns:
        A ``(frontmatter_dict, body_str)`` tuple.  *frontmatter_dict*
        is ``{}`` when no frontmatter is present.

    Example::

        meta, body = split_frontmatter(Path("SKILL.md").read_text())
        print(meta.get("name"))
    """
    match = _FRONTMATTER_RE.match(raw)
    if match is None:
        return {}, raw

    fm_text = match.group(1).strip()
    body = raw[match.end() :].strip()
    if len(fm_text.encode("utf-8")) > MAX_FRONTMATTER_BYTES:
        return {}, raw
    if not fm_text:
        return {}, body
    try:
        metadata = yaml.safe_load(fm_text)
    except yaml.YAMLError:
        return {}, raw
    if not isinstance(metadata, dict):
        return {}, raw
    return metadata, body


def split_sections(markdown: str) -> tuple[str, list[Section]]:
    """Split *markdown* at its ``##`` headings.

    Headings inside fenced code blocks are ignored.  ``###`` and deeper
    headings stay inside the body of their enclosing section.

    Returns:
        A ``(preamble, sections)`` tuple where *preamble* is everything
        before the first ``##`` heading (typically the H1 title and an
        introduction).
    """
    preamble: list[str] = []
    sections: list[Section] = []
    heading: str | None = None
    body: list[str] = []
    in_fence = False

    for line in markdown.splitlines(keepends=True):
        if _FENCE_RE.match(line):
            in_fence = not in_fence
        match = None if in_fence else _H2_RE.match(line.rstrip("\r\n"))
        if match is not None:
            if heading is not None:
                sections.append(Section(heading, "".join(body)))
            heading = match.group(1).strip()
            body = []
        elif heading is None:
            preamble.append(line)
        else:
            body.append(line)

    if heading is not None:
        sections.append(Section(heading, "".join(body)))
    return "".join(preamble), sections


def render_sections(preamble: str, sections: list[Section]) -> str:
    """Join a preamble and sections back into a Markdown document.

    Blank lines around each section are normalised to exactly one
    blank line between blocks, and the result ends with a newline.
    """
    parts: list[str] = []
    if preamble.strip():
        parts.append(preamble.strip("\n") + "\n\n")
    for section in sections:
        body = section.body.strip("\n")
        if body:
            parts.append(f"## {section.heading}\n\n{body}\n\n")
        else:
            parts.append(f"## {section.heading}\n\n")
    return "".join(parts).rstrip("\n") + "\n"


def parse_table(markdown: str) -> list[dict[str, str]]:
    """Parse the first pipe table in *markdown*.

    The first row is the header; the delimiter row (``|---|---|``) is
    skipped.  Each following row becomes a dict keyed by header cell.
    Rows with fewer cells than the header are padded with ``""``.

    Returns:
        A list of row dicts, empty if the document has no table.
    """
    rows: list[list[str]] = []
    in_fence = False
    for line in markdown.splitlines():
        if _FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        stripped = line.strip()
        if not in_fence and stripped.startswith("|"):
            rows.append(_split_row(stripped))
        elif rows:
            break

    if len(rows) < 2:
        return []

    header = rows[0]
    body = rows[1:]
    if body and _TABLE_SEPARATOR_RE.match("|".join(body[0])):
        body = body[1:]

    table: list[dict[str, str]] = []
    for cells in body:
        padded = cells + [""] * (len(header) - len(cells))
        table.append(dict(zip(header, padded)))
    return table


def _split_row(line: str) -> list[str]:
    """Split a ``| a | b |`` table row into stripped cells."""
    inner = line.strip().strip("|")
    return [cell.strip() for cell in inner.split("|")]


def extract_links(markdown: str) -> list[str]:
    """Return the targets of all inline ``[text](target)`` links, in order."""
    return _LINK_RE.findall(markdown)
