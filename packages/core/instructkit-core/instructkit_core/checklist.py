"""Validation checklist parsing and evaluation.

The skill bundle ships ``references/validation-checklist.md``, a flat
Markdown checklist grouped under ``##`` headings.  Items that can be
verified mechanically carry a rule in an HTML comment::

    ## Format
    - [ ] File is under 1000 lines <!-- check: max-lines:1000 -->
    - [ ] Commands are copy-pasteable <!-- check: copy-pasteable -->
    - [ ] Guidelines match how the team actually works

:func:`evaluate_checklist` runs every rule against a generated copilot
instructions file.  Items without a rule (like the last one above) are
reported as ``manual``: a human still has to look at them.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel

from instructkit_core.parsing import split_sections

_logger = logging.getLogger(__name__)

ItemStatus = Literal["passed", "failed", "manual"]

#: Rule signature: ``(content, argument) -> (passed, detail)``.
CheckRule = Callable[[str, "str | None"], tuple[bool, str]]

_ITEM_RE = re.compile(r"^\s*[-*]\s+\[[ xX]\]\s+(.*?)\s*$")
_RULE_RE = re.compile(r"<!--\s*check:\s*([a-z0-9-]+)(?::(.*?))?\s*-->")
_HEADING_RE = re.compile(r"^#{1,6}\s+(.+?)\s*#*\s*$")
_FENCE_RE = re.compile(r"^[ \t]{0,3}(```|~~~)\s*([\w+-]*)")
_SHELL_LANGS = frozenset({"", "bash", "sh", "shell", "console", "zsh", "powershell", "pwsh", "cmd"})
_PROMPT_RE = re.compile(r"^\s*(\$|>|PS>)\s")
_ANGLE_PLACEHOLDER_RE = re.compile(r"<[A-Za-z][\w-]*(?:[ _-][\w-]+)*>")
_PLACEHOLDER_RE = re.compile(
    r"\bTODO\b|\bTBD\b|\bFIXME\b|\{\{[^}]*\}\}|\[(?:PROJECT|YOUR|INSERT)[A-Z _-]*\]"
)
_STYLE_GUIDE_RES = (
    re.compile(r"https?://\S*(?:styleguide|style-guide|style_guide)\S*", re.IGNORECASE),
    re.compile(
        r"\b(?:airbnb|google|standard(?:js)?|uber|microsoft|idiomatic)\b[^\n.]{0,40}"
        r"\bstyle[ -]?guide\b",
        re.IGNORECASE,
    ),
)


class ChecklistItem(BaseModel):
    """One ``- [ ]`` line of the checklist."""

    section: str
    text: str
    rule: str | None = None
    argument: str | None = None


class ItemResult(BaseModel):
    """Outcome of one checklist item."""

    item: ChecklistItem
    status: ItemStatus
    detail: str = ""


class ChecklistReport(BaseModel):
    """Outcome of :func:`evaluate_checklist`."""

    results: list[ItemResult]

    @property
    def passed(self) -> bool:
        """``True`` when no item failed.  Manual items do not count."""
        return not self.failures

    @property
    def failures(self) -> list[ItemResult]:
        return [r for r in self.results if r.status == "failed"]

    @property
    def manual(self) -> list[ItemResult]:
        return [r for r in self.results if r.status == "manual"]

    def to_markdown(self) -> str:
        """Render the report as a checklist: ``[x]`` passed, ``[ ]`` failed, ``[?]`` manual."""
        marks = {"passed": "[x]", "failed": "[ ]", "manual": "[?]"}
        lines: list[str] = []
        section: str | None = None
        for result in self.results:
            if result.item.section != section:
                section = result.item.section
                if lines:
                    lines.append("")
                lines.append(f"## {section}")
            line = f"- {marks[result.status]} {result.item.text}"
            if result.status == "failed" and result.detail:
                line += f" ({result.detail})"
            lines.append(line)
        return "\n".join(lines)


class Checklist:
    """A parsed validation checklist."""

    def __init__(self, items: list[ChecklistItem]) -> None:
        self.items = items

    def __repr__(self) -> str:
        return f"Checklist({len(self.items)} items)"

    def __len__(self) -> int:
        return len(self.items)

    @classmethod
    def from_markdown(cls, text: str) -> Checklist:
        """Parse ``- [ ]`` / ``- [x]`` items, remembering their heading."""
        items: list[ChecklistItem] = []
        section = ""
        for line in text.splitlines():
            heading = _HEADING_RE.match(line)
            if heading:
                section = heading.group(1)
                continue
            match = _ITEM_RE.match(line)
            if not match:
                continue
            raw = match.group(1)
            rule_match = _RULE_RE.search(raw)
            rule = argument = None
            if rule_match:
                rule = rule_match.group(1)
                argument = (rule_match.group(2) or "").strip() or None
            item_text = _RULE_RE.sub("", raw).strip()
            items.append(ChecklistItem(section=section, text=item_text, rule=rule, argument=argument))
        return cls(items)


def evaluate_checklist(content: str, checklist: Checklist) -> ChecklistReport:
    """Evaluate *content* against every item of *checklist*.

    Items naming an unknown rule, or a rule whose argument cannot be
    used, are reported as ``manual`` and a warning is logged.
    """
    results: list[ItemResult] = []
    for item in checklist.items:
        if item.rule is None:
            results.append(ItemResult(item=item, status="manual"))
            continue
        rule = CHECK_RULES.get(item.rule)
        if rule is None:
            _logger.warning("Unknown checklist rule %r for item %r", item.rule, item.text)
            results.append(ItemResult(item=item, status="manual", detail=f"unknown rule {item.rule!r}"))
            continue
        try:
            ok, detail = rule(content, item.argument)
        except ValueError as exc:
            _logger.warning(
                "Invalid argument %r for checklist rule %r: %s", item.argument, item.rule, exc
            )
            results.append(
                ItemResult(item=item, status="manual", detail=f"invalid argument {item.argument!r}")
            )
            continue
        results.append(ItemResult(item=item, status="passed" if ok else "failed", detail=detail))
    return ChecklistReport(results=results)


# ------------------------------------------------------------------
# Rules
# ------------------------------------------------------------------


def _fenced_blocks(content: str) -> list[tuple[str, list[str]]]:
    """Return ``(info_string, lines)`` for every fenced code block."""
    blocks: list[tuple[str, list[str]]] = []
    lang: str | None = None
    lines: list[str] = []
    for line in content.splitlines():
        fence = _FENCE_RE.match(line)
        if fence and lang is None:
            lang = fence.group(2).lower()
            lines = []
        elif fence:
            blocks.append((lang, lines))
            lang = None
        elif lang is not None:
            lines.append(line)
    return blocks


def _outside_fences(content: str) -> list[str]:
    out: list[str] = []
    in_fence = False
    for line in content.splitlines():
        if _FENCE_RE.match(line):
            in_fence = not in_fence
        elif not in_fence:
            out.append(line)
    return out


def _check_max_lines(content: str, argument: str | None) -> tuple[bool, str]:
    limit = int(argument) if argument else 1000
    count = len(content.splitlines())
    return count < limit, f"{count} lines, limit {limit}"


def _check_single_h1(content: str, argument: str | None) -> tuple[bool, str]:
    count = sum(1 for line in _outside_fences(content) if line.startswith("# "))
    return count == 1, f"{count} top-level headings"


def _check_section(content: str, argument: str | None) -> tuple[bool, str]:
    if not argument:
        return False, "rule needs a heading argument"
    _, sections = split_sections(content)
    found = any(s.heading.lower() == argument.lower() for s in sections)
    return found, "" if found else f"missing '## {argument}' section"


def _check_commands_fenced(content: str, argument: str | None) -> tuple[bool, str]:
    heading = (argument or "Commands").lower()
    _, sections = split_sections(content)
    for section in sections:
        if section.heading.lower() == heading:
            if _fenced_blocks(section.body):
                return True, ""
            return False, f"'{section.heading}' has no fenced code block"
    return False, f"missing '## {argument or 'Commands'}' section"


def _check_copy_pasteable(content: str, argument: str | None) -> tuple[bool, str]:
    problems: list[str] = []
    for lang, lines in _fenced_blocks(content):
        if lang not in _SHELL_LANGS:
            continue
        for line in lines:
            if _PROMPT_RE.match(line):
                problems.append(f"prompt prefix in {line.strip()!r}")
            elif _ANGLE_PLACEHOLDER_RE.search(line):
                problems.append(f"placeholder in {line.strip()!r}")
    return not problems, "; ".join(problems[:3])


def _check_no_placeholders(content: str, argument: str | None) -> tuple[bool, str]:
    found = sorted({m.group(0) for m in _PLACEHOLDER_RE.finditer(content)})
    return not found, ", ".join(found)


def _check_no_empty_sections(content: str, argument: str | None) -> tuple[bool, str]:
    _, sections = split_sections(content)
    empty = [s.heading for s in sections if not s.body.strip()]
    return not empty, ", ".join(empty)


def _check_no_external_style_guides(content: str, argument: str | None) -> tuple[bool, str]:
    found = [m.group(0) for pattern in _STYLE_GUIDE_RES for m in pattern.finditer(content)]
    return not found, ", ".join(found[:3])


#: Built-in rules, keyed by the name used in ``<!-- check: name -->``.
CHECK_RULES: dict[str, CheckRule] = {
    "max-lines": _check_max_lines,
    "single-h1": _check_single_h1,
    "section": _check_section,
    "commands-fenced": _check_commands_fenced,
    "copy-pasteable": _check_copy_pasteable,
    "no-placeholders": _check_no_placeholders,
    "no-empty-sections": _check_no_empty_sections,
    "no-external-style-guides": _check_no_external_style_guides,
}
