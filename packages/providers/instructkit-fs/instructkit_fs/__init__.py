"""Local filesystem skill provider for instructkit.

This package provides :class:`LocalFileSystemSkillProvider`, a concrete
implementation of :class:`~instructkit_core.SkillProvider` that reads
skill bundles from a local directory tree, and ships the copilot
instructions skill bundle itself under :data:`BUNDLED_SKILLS_ROOT`.

Install::

    pip install instructkit
"""

from instructkit_fs.local import BUNDLED_SKILLS_ROOT, LocalFileSystemSkillProvider

#: ID of the bundled copilot instructions skill.
BUNDLED_SKILL_ID = "copilot-instructions"

#: ID of the bundled agent persona.
BUNDLED_AGENT_ID = "copilot-instructions-generator"

__all__ = [
    "BUNDLED_AGENT_ID",
    "BUNDLED_SKILLS_ROOT",
    "BUNDLED_SKILL_ID",
    "LocalFileSystemSkillProvider",
]
