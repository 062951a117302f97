"""Lightweight runtime handle that delegates to a SkillProvider.

A :class:`Skill` object is the primary interface consumers use to work
with a single skill.  It is intentionally thin: every call is delegated
to the underlying :class:`~instructkit_core.SkillProvider`, so the handle
carries no cached state and is safe to discard or recreate at any time.

On top of raw content access the handle knows how to interpret the
pieces of a copilot instructions skill: the template lookup table in the
body, the validation checklist reference, and the trigger phrases in
the description.
"""

from __future__ import annotations

import re
from typing import Any

from instructkit_core.checklist import Checklist
from instructkit_core.provider import SkillProvider
from instructkit_core.templates import TemplateEntry, TemplateTable

#: Reference document holding the validation checklist.
DEFAULT_CHECKLIST = "validation-checklist.md"

_QUOTED_RE = re.compile(r"[\"“]([^\"“”]+)[\"”]")


class Skill:
    """Runtime handle to a single skill.

    Args:
        skill_id: The skill name (must match the ``name`` field in the
            skill's YAML frontmatter).
        provider: The :class:`~instructkit_core.SkillProvider` that
            owns this skill.

    Example::

        skill = registry.get_skill("copilot-instructions")
        table = await skill.get_template_table()
        template = await skill.get_example("react-typescript.md")
    """

    def __init__(self, skill_id: str, provider: SkillProvider) -> None:
        if not isinstance(skill_id, str) or not skill_id.strip():
            raise ValueError("skill_id must be a non-empty string")
        if not isinstance(provider, SkillProvider):
            raise TypeError(f"provider must be a SkillProvider, got {type(provider).__name__}")
        self._skill_id = skill_id
        self._provider = provider

    def get_id(self) -> str:
        """Return the unique skill name, matching the frontmatter ``name``."""
        return self._skill_id

    @property
    def provider(self) -> SkillProvider:
        return self._provider

    async def get_metadata(self) -> dict[str, Any]:
        """Return the parsed YAML frontmatter for this skill."""
        return await self._provider.get_metadata(self._skill_id)

    async def get_body(self) -> str:
        """Return the markdown workflow instructions for this skill."""
        return await self._provider.get_body(self._skill_id)

    async def get_reference(self, name: str) -> bytes:
        """Return the raw content of a bundled reference document.

        Raises:
            ResourceNotFoundError: If the reference does not exist.
        """
        return await self._provider.get_reference(self._skill_id, name)

    async def get_example(self, name: str) -> bytes:
        """Return the raw content of a bundled example template.

        Raises:
            ResourceNotFoundError: If the template does not exist.
        """
        return await self._provider.get_example(self._skill_id, name)

    async def get_template_table(self) -> TemplateTable:
        """Parse the stack-to-template lookup table from the skill body."""
        return TemplateTable.from_markdown(await self.get_body())

    async def get_template(self, entry: TemplateEntry) -> str:
        """Return the text of the example template for a lookup-table *entry*."""
        return (await self.get_example(entry.filename)).decode("utf-8")

    async def get_checklist(self, name: str = DEFAULT_CHECKLIST) -> Checklist:
        """Parse the validation checklist shipped as reference *name*."""
        raw = await self.get_reference(name)
        return Checklist.from_markdown(raw.decode("utf-8"))

    async def get_trigger_phrases(self) -> list[str]:
        """Return the quoted trigger phrases from the skill description.

        A description such as ``Use when asked to "create copilot
        instructions" or "set up copilot".`` yields
        ``["create copilot instructions", "set up copilot"]``.
        """
        description = (await self.get_metadata()).get("description") or ""
        return [p.strip() for p in _QUOTED_RE.findall(str(description)) if p.strip()]

    def __repr__(self) -> str:
        return f"Skill({self._skill_id!r})"
