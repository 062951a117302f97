"""Abstract interface for skill bundle retrieval.

This module defines :class:`SkillProvider`, the abstract base class that
all skill bundle backends must implement.  A bundle is laid out as::

    root/
    ├── copilot-instructions/
    │   ├── SKILL.md                        # frontmatter + workflow + lookup table
    │   ├── references/validation-checklist.md
    │   └── examples/react-typescript.md    # one example template per stack
    └── agents/
        └── copilot-instructions-generator.agent.md

Content is disclosed progressively:

1. **Metadata** -- the ``SKILL.md`` frontmatter.
2. **Body** -- the ``SKILL.md`` instructions, including the template
   lookup table.
3. **Resources** -- reference documents and example templates, served
   one at a time by name.

A provider is a **content accessor**: given an ID it serves content.
It does **not** enumerate or discover skills; registration is explicit
via :meth:`SkillRegistry.register <instructkit_core.SkillRegistry.register>`.

All methods are ``async`` so that implementations backed by network I/O
can be non-blocking.  Concrete implementations include
:class:`~instructkit_fs.LocalFileSystemSkillProvider` and
:class:`~instructkit_http.HTTPStaticFileSkillProvider`.
"""

from abc import ABC, abstractmethod
from typing import Any


class SkillProvider(ABC):
    """Abstract base class that every skill bundle backend must implement.

    Implementations must keep expensive I/O lazy: reading bodies,
    templates and references should only happen when the corresponding
    method is called.

    Example::

        class MyProvider(SkillProvider):
            async def get_metadata(self, skill_id: str) -> dict: ...
            async def get_body(self, skill_id: str) -> str: ...
            # ... remaining abstract methods
    """

    @abstractmethod
    async def get_metadata(self, skill_id: str) -> dict[str, Any]:
        """Return the parsed YAML frontmatter of a skill's ``SKILL.md``.

        Args:
            skill_id: The skill name to look up.

        Returns:
            Dictionary of frontmatter key-value pairs.

        Raises:
            SkillNotFoundError: If the skill does not exist.
        """

    @abstractmethod
    async def get_body(self, skill_id: str) -> str:
        """Return the markdown body (workflow instructions) of a skill.

        Args:
            skill_id: The skill name to look up.

        Returns:
            The markdown instruction text.

        Raises:
            SkillNotFoundError: If the skill does not exist.
        """

    @abstractmethod
    async def get_reference(self, skill_id: str, name: str) -> bytes:
        """Return the raw bytes of a reference document.

        Args:
            skill_id: The skill name containing the reference.
            name: Filename inside the skill's ``references/`` directory.

        Raises:
            ResourceNotFoundError: If the reference does not exist.
        """

    @abstractmethod
    async def get_example(self, skill_id: str, name: str) -> bytes:
        """Return the raw bytes of an example template.

        Args:
            skill_id: The skill name containing the template.
            name: Filename inside the skill's ``examples/`` directory.

        Raises:
            ResourceNotFoundError: If the template does not exist.
        """

    @abstractmethod
    async def get_agent(self, agent_id: str) -> str:
        """Return the full text of an agent definition file.

        Agent definitions live next to the skills in an ``agents/``
        directory and are named ``<agent_id>.agent.md``.

        Raises:
            AgentNotFoundError: If the agent definition does not exist.
        """
