"""Core runtime for generating GitHub Copilot instructions files.

This package turns a copilot instructions skill bundle (``SKILL.md``,
example templates, a validation checklist and an agent persona) into a
working generator for ``.github/copilot-instructions.md``:

* :class:`SkillProvider` -- abstract base class for skill bundle backends.
* :class:`Skill` -- lightweight runtime handle to a single skill.
* :class:`SkillRegistry` -- unified index of skills and agent personas.
* :func:`detect_tech_stack` -- inspects a project's marker files.
* :class:`TemplateTable` -- the stack-to-template lookup table.
* :class:`ProjectProfile` / :func:`interview_questions` -- project
  specifics gathered from the user.
* :class:`Checklist` / :func:`evaluate_checklist` -- validation of a
  generated file.
* :func:`write_instructions` -- writes or merges the instructions file.
* :class:`InstructionsGenerator` -- the whole workflow in one object.
* :class:`InstructKitError` -- base class for all library exceptions.

Install::

    pip install instructkit
"""

from instructkit_core.agent import AgentDefinition, parse_agent_definition
from instructkit_core.checklist import (
    Checklist,
    ChecklistItem,
    ChecklistReport,
    ItemResult,
    evaluate_checklist,
)
from instructkit_core.exceptions import (
    AgentNotFoundError,
    InstructionsFileError,
    InstructKitError,
    ResourceNotFoundError,
    SkillNotFoundError,
    TemplateNotFoundError,
)
from instructkit_core.generator import GenerationResult, InstructionsGenerator
from instructkit_core.parsing import split_frontmatter
from instructkit_core.profile import (
    InterviewQuestion,
    ProjectProfile,
    apply_answers,
    interview_questions,
)
from instructkit_core.provider import SkillProvider
from instructkit_core.registry import SkillRegistry
from instructkit_core.skill import Skill
from instructkit_core.stacks import DetectedStack, StackReport, detect_tech_stack
from instructkit_core.templates import TemplateEntry, TemplateTable, render_template
from instructkit_core.validation import validate_agent, validate_skill
from instructkit_core.writer import (
    MergeResult,
    WriteResult,
    merge_instructions,
    resolve_target_path,
    write_instructions,
)

__all__ = [
    "AgentDefinition",
    "AgentNotFoundError",
    "Checklist",
    "ChecklistItem",
    "ChecklistReport",
    "DetectedStack",
    "GenerationResult",
    "InstructKitError",
    "InstructionsFileError",
    "InstructionsGenerator",
    "InterviewQuestion",
    "ItemResult",
    "MergeResult",
    "ProjectProfile",
    "ResourceNotFoundError",
    "Skill",
    "SkillNotFoundError",
    "SkillProvider",
    "SkillRegistry",
    "StackReport",
    "TemplateEntry",
    "TemplateNotFoundError",
    "TemplateTable",
    "WriteResult",
    "apply_answers",
    "detect_tech_stack",
    "evaluate_checklist",
    "interview_questions",
    "merge_instructions",
    "parse_agent_definition",
    "render_template",
    "resolve_target_path",
    "split_frontmatter",
    "validate_agent",
    "validate_skill",
    "write_instructions",
]
