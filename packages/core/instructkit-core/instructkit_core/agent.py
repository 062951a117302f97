"""Agent persona definitions.

An agent is a named persona that a user selects explicitly in their
assistant.  Its file (``agents/<id>.agent.md``) has YAML frontmatter with
``name``, ``description`` and ``tools``, followed by free-text persona
instructions that link to the skills it uses::

    ---
    name: copilot-instructions-generator
    description: Generates .github/copilot-instructions.md files.
    tools: [read, edit, search]
    ---

    Follow the [copilot-instructions skill](../copilot-instructions/SKILL.md).
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from instructkit_core.parsing import extract_links, split_frontmatter


class AgentDefinition(BaseModel):
    """A parsed agent persona.

    Attributes:
        name: Agent identifier.
        description: What the agent does.
        tools: Tool names the hosting assistant should grant.
        body: Persona instructions (Markdown).
        skill_links: IDs of the skills linked from the body, in order
            of first appearance.
    """

    name: str
    description: str
    tools: list[str] = Field(default_factory=list)
    body: str = ""
    skill_links: list[str] = Field(default_factory=list)


def skill_ids_from_links(markdown: str) -> list[str]:
    """Return skill IDs of links whose target ends in ``<skill-id>/SKILL.md``."""
    ids: list[str] = []
    for target in extract_links(markdown):
        path = PurePosixPath(target.split("#", 1)[0])
        if path.name == "SKILL.md" and len(path.parts) >= 2:
            skill_id = path.parts[-2]
            if skill_id not in ids:
                ids.append(skill_id)
    return ids


def parse_agent_definition(raw: str) -> AgentDefinition:
    """Parse the text of an ``*.agent.md`` file.

    Raises:
        ValueError: If the file has no frontmatter or the frontmatter
            lacks a string ``name`` / ``description`` or has a
            malformed ``tools`` entry.
    """
    metadata, body = split_frontmatter(raw)
    if not metadata:
        raise ValueError("Agent definition has no YAML frontmatter")
    tools = metadata.get("tools") or []
    if isinstance(tools, str):
        tools = [t.strip() for t in tools.split(",") if t.strip()]
    data: dict[str, Any] = {
        "name": metadata.get("name"),
        "description": metadata.get("description"),
        "tools": tools,
        "body": body,
        "skill_links": skill_ids_from_links(body),
    }
    try:
        return AgentDefinition(**data)
    except ValidationError as exc:
        raise ValueError(f"Invalid agent definition: {exc}") from exc
