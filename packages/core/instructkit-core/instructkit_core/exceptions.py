"""Exception hierarchy for instructkit.

All exceptions raised by :mod:`instructkit_core` (and by the providers
and integrations built on it) inherit from :class:`InstructKitError`,
allowing callers to catch the entire family with a single ``except``
clause.

Lookup failures -- a missing skill, example template, reference
document or agent definition -- also inherit from :class:`LookupError`
so that they can be caught idiomatically with ``except LookupError``.
"""


class InstructKitError(Exception):
    """Base exception for all instructkit errors."""


class SkillNotFoundError(InstructKitError, LookupError):
    """A requested skill does not exist.

    Raised by :class:`~instructkit_core.SkillProvider` methods when the
    given *skill_id* cannot be resolved, and by
    :meth:`SkillRegistry.get_skill <instructkit_core.SkillRegistry.get_skill>`
    when the skill is not registered.

    Example::

        try:
            skill = registry.get_skill("nonexistent")
        except SkillNotFoundError:
            print("Skill not found")
    """


class ResourceNotFoundError(InstructKitError, LookupError):
    """A requested resource does not exist within a skill.

    Resources are the reference documents (such as the validation
    checklist) and the example templates bundled with a skill.
    """


class TemplateNotFoundError(ResourceNotFoundError):
    """No example template matches the requested stack or name.

    Raised by :meth:`TemplateTable.select
    <instructkit_core.TemplateTable.select>` when the lookup table has
    neither a matching row nor a ``*`` fallback row, and by
    :meth:`TemplateTable.get <instructkit_core.TemplateTable.get>` for
    unknown template names.
    """


class AgentNotFoundError(InstructKitError, LookupError):
    """A requested agent definition does not exist."""


class InstructionsFileError(InstructKitError):
    """The target path for a copilot instructions file cannot be used.

    Example::

        try:
            write_instructions(target, content)
        except InstructionsFileError as exc:
            print(f"Cannot write instructions: {exc}")
    """
