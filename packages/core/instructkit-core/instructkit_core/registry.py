"""Unified skill and agent index with explicit registration.

The :class:`SkillRegistry` is the main entry-point for code that needs
skills.  Skills are registered explicitly with :meth:`SkillRegistry.register`,
which maps a skill ID to a :class:`~instructkit_core.Skill` handle backed
by the given provider.  Agent personas are registered with
:meth:`SkillRegistry.register_agent` once the skills they link to are in
place.

Example::

    from instructkit_core import SkillRegistry
    from instructkit_fs import BUNDLED_SKILLS_ROOT, LocalFileSystemSkillProvider

    provider = LocalFileSystemSkillProvider(BUNDLED_SKILLS_ROOT)
    registry = SkillRegistry()
    await registry.register("copilot-instructions", provider)
    await registry.register_agent("copilot-instructions-generator", provider)

    skill = registry.get_skill("copilot-instructions")
"""

from __future__ import annotations

from typing import Literal, overload
from xml.etree.ElementTree import Element, SubElement, indent, tostring

from instructkit_core.agent import AgentDefinition, parse_agent_definition
from instructkit_core.exceptions import AgentNotFoundError, SkillNotFoundError
from instructkit_core.provider import SkillProvider
from instructkit_core.skill import Skill
from instructkit_core.validation import validate_agent, validate_skill


class SkillRegistry:
    """Unified index over explicitly registered skills and agents.

    The registry enforces a **flat namespace**: each skill ID and each
    agent ID must be unique.  A :exc:`ValueError` is raised if a
    duplicate is detected.

    :meth:`register` and :meth:`register_agent` are ``async`` because
    they validate content fetched from providers before storing it.
    Lookups are synchronous.
    """

    def __init__(self) -> None:
        self._skills: dict[str, Skill] = {}
        self._agents: dict[str, AgentDefinition] = {}

    def __repr__(self) -> str:
        n = len(self._skills)
        label = "skill" if n == 1 else "skills"
        return f"SkillRegistry({n} {label}, {len(self._agents)} agents)"

    @overload
    async def register(self, skill_id: str, provider: SkillProvider) -> None: ...

    @overload
    async def register(self, skills: list[tuple[str, SkillProvider]]) -> None: ...

    async def register(
        self,
        skill_id_or_skills: str | list[tuple[str, SkillProvider]],
        provider: SkillProvider | None = None,
    ) -> None:
        """Register one or more skills with their providers.

        Each skill is validated with :func:`~instructkit_core.validate_skill`,
        catching misconfiguration (missing ``SKILL.md``, unreachable
        endpoint, invalid metadata) at registration time.

        **Single skill**::

            await registry.register("copilot-instructions", provider)

        **Batch registration**::

            await registry.register([
                ("copilot-instructions", fs_provider),
                ("team-conventions", http_provider),
            ])

        Batch registration is **atomic**: if any skill fails validation,
        none of the skills in the batch are registered.

        Raises:
            ValueError: If a *skill_id* is already registered, if a
                skill fails validation, or if the arguments are invalid.
        """
        if isinstance(skill_id_or_skills, str):
            if provider is None:
                raise ValueError("provider is required when registering a single skill")
            await self._register_one(skill_id_or_skills, provider)
        elif isinstance(skill_id_or_skills, list):
            if provider is not None:
                raise ValueError(
                    "provider must not be passed when registering a batch; "
                    "include providers in the list of tuples instead"
                )
            await self._register_batch(skill_id_or_skills)
        else:
            raise ValueError("Expected a skill_id string or a list of (skill_id, provider) tuples")

    async def _register_one(self, skill_id: str, provider: SkillProvider) -> None:
        """Validate and register a single skill."""
        if skill_id in self._skills:
            raise ValueError(f"Duplicate skill_id '{skill_id}' -- already registered")
        skill = Skill(skill_id=skill_id, provider=provider)
        errors = await validate_skill(skill)
        if errors:
            raise ValueError(
                f"Skill '{skill_id}' failed validation:\n" + "\n".join(f"  - {e}" for e in errors)
            )
        self._skills[skill_id] = skill

    async def _register_batch(self, skills: list[tuple[str, SkillProvider]]) -> None:
        """Validate and register a batch of skills atomically."""
        seen: set[str] = set()
        for skill_id, _ in skills:
            if skill_id in self._skills:
                raise ValueError(f"Duplicate skill_id '{skill_id}' -- already registered")
            if skill_id in seen:
                raise ValueError(f"Duplicate skill_id '{skill_id}' within the batch")
            seen.add(skill_id)

        validated: list[tuple[str, Skill]] = []
        for skill_id, prov in skills:
            skill = Skill(skill_id=skill_id, provider=prov)
            errors = await validate_skill(skill)
            if errors:
                raise ValueError(
                    f"Skill '{skill_id}' failed validation:\n"
                    + "\n".join(f"  - {e}" for e in errors)
                )
            validated.append((skill_id, skill))

        for skill_id, skill in validated:
            self._skills[skill_id] = skill

    async def register_agent(self, agent_id: str, provider: SkillProvider) -> AgentDefinition:
        """Load, validate and register an agent persona.

        Every skill the agent links to must already be registered.

        Returns:
            The parsed :class:`~instructkit_core.AgentDefinition`.

        Raises:
            AgentNotFoundError: If the provider has no such agent.
            ValueError: If *agent_id* is already registered or the
                definition is invalid.
        """
        if agent_id in self._agents:
            raise ValueError(f"Duplicate agent_id '{agent_id}' -- already registered")
        agent = parse_agent_definition(await provider.get_agent(agent_id))
        errors = validate_agent(agent, agent_id, known_skills=self._skills)
        if errors:
            raise ValueError(
                f"Agent '{agent_id}' failed validation:\n" + "\n".join(f"  - {e}" for e in errors)
            )
        self._agents[agent_id] = agent
        return agent

    def list_skills(self) -> list[Skill]:
        """Return registered skills sorted by ID."""
        return sorted(self._skills.values(), key=lambda s: s.get_id())

    def get_skill(self, skill_id: str) -> Skill:
        """Return the :class:`~instructkit_core.Skill` handle by name.

        Raises:
            SkillNotFoundError: If no skill with the given name is registered.
        """
        try:
            return self._skills[skill_id]
        except KeyError:
            raise SkillNotFoundError(f"Skill '{skill_id}' not found in registry") from None

    def list_agents(self) -> list[AgentDefinition]:
        """Return registered agents sorted by name."""
        return sorted(self._agents.values(), key=lambda a: a.name)

    def get_agent(self, agent_id: str) -> AgentDefinition:
        """Return a registered agent definition.

        Raises:
            AgentNotFoundError: If no agent with the given ID is registered.
        """
        try:
            return self._agents[agent_id]
        except KeyError:
            raise AgentNotFoundError(f"Agent '{agent_id}' not found in registry") from None

    async def match_skills(self, prompt: str) -> list[Skill]:
        """Return the skills a natural-language *prompt* activates.

        A skill matches when one of its quoted trigger phrases, or its
        name with hyphens read as spaces, occurs in *prompt*
        (case-insensitive).  Results are sorted by ID.
        """
        text = " ".join(prompt.lower().split())
        matches: list[Skill] = []
        for skill in self.list_skills():
            phrases = [p.lower() for p in await skill.get_trigger_phrases()]
            phrases.append(skill.get_id().replace("-", " "))
            if any(" ".join(p.split()) in text for p in phrases):
                matches.append(skill)
        return matches

    async def get_skills_catalog(
        self,
        *,
        format: Literal["xml", "markdown"] = "xml",
    ) -> str:
        """Build a skill-catalog string for system-prompt injection.

        ``"xml"``
            An ``<available_skills>`` XML block.

        ``"markdown"``
            A human-readable Markdown catalog listing every registered
            skill's name and description.

        Raises:
            ValueError: If *format* is not ``"xml"`` or ``"markdown"``.
        """
        if format == "xml":
            return await self._build_xml()
        if format == "markdown":
            return await self._build_markdown()
        msg = f"Unsupported format {format!r}; expected 'xml' or 'markdown'."
        raise ValueError(msg)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _build_xml(self) -> str:
        """Return an ``<available_skills>`` XML block."""
        skills = self.list_skills()
        if not skills:
            return "<available_skills />"

        root = Element("available_skills")
        for skill in skills:
            meta = await skill.get_metadata()
            skill_el = SubElement(root, "skill")
            name_el = SubElement(skill_el, "name")
            name_el.text = meta.get("name", skill.get_id())
            desc_el = SubElement(skill_el, "description")
            desc_el.text = meta.get("description", "")
        indent(root, space="  ")
        return tostring(root, encoding="unicode")

    async def _build_markdown(self) -> str:
        """Return a Markdown-formatted skill catalog."""
        skills = self.list_skills()
        if not skills:
            return "No skills are currently available."

        lines: list[str] = ["# Available Skills", ""]
        for skill in skills:
            meta = await skill.get_metadata()
            name = meta.get("name", skill.get_id())
            description = meta.get("description", "No description available.")
            lines.append(f"## {name}")
            lines.append(f"- **Description**: {description}")
            lines.append("")

        return "\n".join(lines)
