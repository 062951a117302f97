"""Validate skills and agent definitions.

:func:`validate_skill` checks a skill's ``SKILL.md`` frontmatter and
body; :func:`validate_agent` checks a parsed agent persona and the skills
it links to.  Both return a list of human-readable error strings (empty
if valid) rather than raising, so that callers can report every problem
at once.

Example::

    from instructkit_core import Skill, validate_skill

    skill = Skill(skill_id="copilot-instructions", provider=provider)
    errors = await validate_skill(skill)
    if errors:
        for msg in errors:
            print(f"  - {msg}")
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from instructkit_core.agent import AgentDefinition
    from instructkit_core.skill import Skill

_logger = logging.getLogger(__name__)

# Names are 1-64 chars, lowercase alphanumeric + hyphens, must not
# start/end with a hyphen and must not contain consecutive hyphens.
_NAME_RE = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")
_NAME_MAX_LEN = 64
_DESCRIPTION_MAX_LEN = 1024

# Known optional fields with their expected types.
_OPTIONAL_FIELDS: dict[str, type] = {
    "license": str,
    "compatibility": dict,
    "metadata": dict,
    "allowed-tools": list,
}

_KNOWN_KEYS: frozenset[str] = frozenset({"name", "description"} | _OPTIONAL_FIELDS.keys())


def _name_errors(label: str, name: Any, expected: str) -> list[str]:
    """Check a ``name`` field shared by skills and agents."""
    if not name:
        return [f"{label}: metadata missing required 'name' field"]
    if not isinstance(name, str):
        return [f"{label}: name must be a string, got {type(name).__name__}"]
    errors: list[str] = []
    if len(name) > _NAME_MAX_LEN:
        errors.append(f"{label}: name exceeds {_NAME_MAX_LEN} characters")
    if "--" in name:
        errors.append(f"{label}: name contains consecutive hyphens")
    if not _NAME_RE.match(name):
        errors.append(
            f"{label}: name must be lowercase alphanumeric "
            f"and hyphens, must not start or end with a hyphen"
        )
    if name != expected:
        errors.append(f"{label}: metadata name '{name}' does not match id '{expected}'")
    return errors


def _description_errors(label: str, description: Any) -> list[str]:
    if not description:
        return [f"{label}: metadata missing required 'description' field"]
    if not isinstance(description, str):
        return [f"{label}: description must be a string, got {type(description).__name__}"]
    if len(description) > _DESCRIPTION_MAX_LEN:
        return [f"{label}: description exceeds {_DESCRIPTION_MAX_LEN} characters"]
    return []


async def validate_skill(skill: Skill) -> list[str]:
    """Validate a single skill.

    Validation rules:

    * Skill body must be non-empty.
    * ``name`` (required) -- 1-64 characters, lowercase ``[a-z0-9-]``,
      must not start or end with a hyphen, must not contain consecutive
      hyphens, and must match the skill ID.
    * ``description`` (required) -- 1-1024 characters.
    * Optional fields must have the expected type.  Unknown keys are
      logged as a warning but are not errors.

    Args:
        skill: The :class:`~instructkit_core.Skill` to validate.

    Returns:
        A list of human-readable error messages.  An empty list means
        the skill is valid.
    """
    errors: list[str] = []
    skill_id = skill.get_id()
    label = f"Skill '{skill_id}'"

    try:
        body = await skill.get_body()
        if not body or not body.strip():
            errors.append(f"{label}: body is empty")
    except Exception as exc:
        errors.append(f"{label}: failed to read body: {exc}")

    try:
        metadata = await skill.get_metadata()
    except Exception as exc:
        errors.append(f"{label}: failed to read metadata: {exc}")
        return errors

    errors.extend(_name_errors(label, metadata.get("name"), skill_id))
    errors.extend(_description_errors(label, metadata.get("description")))

    for key, expected_type in _OPTIONAL_FIELDS.items():
        value = metadata.get(key)
        if value is not None and not isinstance(value, expected_type):
            errors.append(
                f"{label}: field '{key}' must be "
                f"{expected_type.__name__}, got {type(value).__name__}"
            )

    unknown = set(metadata.keys()) - _KNOWN_KEYS
    if unknown:
        _logger.warning(
            "Skill '%s': unknown metadata keys: %s",
            skill_id,
            ", ".join(sorted(unknown)),
        )

    return errors


def validate_agent(
    agent: AgentDefinition,
    agent_id: str,
    *,
    known_skills: Iterable[str] | None = None,
) -> list[str]:
    """Validate a parsed agent definition.

    Validation rules:

    * ``name`` and ``description`` follow the same rules as skills;
      ``name`` must match *agent_id*.
    * ``tools`` entries must be non-empty strings.
    * The body must link at least one skill (``.../<skill-id>/SKILL.md``).
    * When *known_skills* is given, every linked skill must be in it.

    Returns:
        A list of human-readable error messages (empty if valid).
    """
    label = f"Agent '{agent_id}'"
    errors = _name_errors(label, agent.name, agent_id)
    errors.extend(_description_errors(label, agent.description))

    blank = [t for t in agent.tools if not t.strip()]
    if blank:
        errors.append(f"{label}: tools must be non-empty strings")

    if not agent.skill_links:
        errors.append(f"{label}: body does not link any skill")
    elif known_skills is not None:
        known = set(known_skills)
        missing = [s for s in agent.skill_links if s not in known]
        if missing:
            errors.append(f"{label}: links unregistered skills: {', '.join(missing)}")

    return errors
