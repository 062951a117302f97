"""End-to-end generation of copilot instructions files.

:class:`InstructionsGenerator` runs the workflow described in the
skill's ``SKILL.md`` against a real project:

1. detect the tech stack (:func:`~instructkit_core.detect_tech_stack`),
2. select an example template from the lookup table,
3. merge the user's :class:`~instructkit_core.ProjectProfile` into it,
4. write ``.github/copilot-instructions.md``, editing an existing file
   in place,
5. evaluate the result against the validation checklist.

Example::

    generator = InstructionsGenerator(registry.get_skill("copilot-instructions"))
    result = await generator.generate(Path("."), ProjectProfile(name="Acme"))
    written = await generator.write(Path("."), result)
    print(written.action, written.path)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import NamedTuple

from instructkit_core.checklist import ChecklistReport, evaluate_checklist
from instructkit_core.profile import ProjectProfile
from instructkit_core.skill import Skill
from instructkit_core.stacks import StackReport, detect_tech_stack
from instructkit_core.templates import TemplateEntry, render_template
from instructkit_core.writer import WriteResult, resolve_target_path, write_instructions

_logger = logging.getLogger(__name__)


class GenerationResult(NamedTuple):
    """Outcome of :meth:`InstructionsGenerator.generate`."""

    report: StackReport
    template: TemplateEntry
    content: str
    checklist: ChecklistReport


class InstructionsGenerator:
    """Generates copilot instructions from a skill bundle.

    Args:
        skill: The copilot instructions :class:`~instructkit_core.Skill`
            providing the lookup table, example templates and checklist.
    """

    def __init__(self, skill: Skill) -> None:
        self._skill = skill

    def __repr__(self) -> str:
        return f"InstructionsGenerator({self._skill.get_id()!r})"

    @property
    def skill(self) -> Skill:
        return self._skill

    def detect(self, project_root: Path) -> StackReport:
        """Detect the tech stack of *project_root*."""
        report = detect_tech_stack(project_root)
        _logger.debug("Detected stack for %s: %s", project_root, report.summary())
        return report

    async def select_template(self, report: StackReport, name: str | None = None) -> TemplateEntry:
        """Pick a lookup-table entry by explicit *name* or by detected stack.

        Raises:
            TemplateNotFoundError: If *name* is unknown, or nothing
                matches and the table has no fallback.
        """
        table = await self._skill.get_template_table()
        entry = table.get(name) if name else table.select(report.tags)
        _logger.debug("Selected template %s (%s)", entry.filename, entry.stack)
        return entry

    async def generate(
        self,
        project_root: Path,
        profile: ProjectProfile | None = None,
        *,
        template: str | None = None,
        report: StackReport | None = None,
    ) -> GenerationResult:
        """Render instructions for *project_root* without writing them.

        Args:
            project_root: The project to describe.
            profile: Project specifics from the interview.
            template: Explicit template name, skipping stack selection.
            report: A detection result to reuse instead of detecting
                again.

        Returns:
            The detection report, the chosen template, the rendered
            content and its checklist evaluation.
        """
        report = report or self.detect(project_root)
        entry = await self.select_template(report, template)
        raw = await self._skill.get_template(entry)
        content = render_template(raw, profile, report)
        checklist = await self.validate(content)
        return GenerationResult(report=report, template=entry, content=content, checklist=checklist)

    async def validate(self, content: str) -> ChecklistReport:
        """Evaluate *content* against the skill's validation checklist."""
        return evaluate_checklist(content, await self._skill.get_checklist())

    async def write(
        self,
        project_root: Path,
        result: GenerationResult,
        *,
        path: str | Path | None = None,
        update_sections: Iterable[str] = (),
        dry_run: bool = False,
    ) -> tuple[WriteResult, ChecklistReport]:
        """Write a generation result into the project.

        The file goes to ``.github/copilot-instructions.md`` under
        *project_root*, or under *path* (see
        :func:`~instructkit_core.resolve_target_path`).  An existing file
        is merged, not replaced.  Because merging can change the content,
        the checklist is evaluated again against the final file.

        Returns:
            The :class:`~instructkit_core.WriteResult` and the checklist
            report for the content as written.
        """
        target = resolve_target_path(project_root, path)
        written = write_instructions(
            target,
            result.content,
            update_sections=update_sections,
            dry_run=dry_run,
        )
        return written, await self.validate(written.content)
