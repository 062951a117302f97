"""Local filesystem-based skill provider.

This module implements :class:`LocalFileSystemSkillProvider`, which
serves skill bundles from a local directory tree:

* **Metadata** is obtained by parsing only the YAML frontmatter.
* **Body** is the markdown content after the frontmatter.
* **Resources** (reference documents, example templates) and agent
  definitions are read on demand.

All methods are ``async`` to satisfy the
:class:`~instructkit_core.SkillProvider` interface.  File I/O is
synchronous internally because bundle files are small and local disk
reads do not meaningfully block the event loop.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from instructkit_core import (
    AgentNotFoundError,
    ResourceNotFoundError,
    SkillNotFoundError,
    SkillProvider,
    split_frontmatter,
)

#: Default maximum file size in bytes (10 MB).
DEFAULT_MAX_FILE_BYTES: int = 10 * 1024 * 1024

#: Directory holding the skill bundle shipped with this package.
BUNDLED_SKILLS_ROOT: Path = Path(__file__).resolve().parent / "bundled"

_AGENTS_DIR = "agents"
_AGENT_SUFFIX = ".agent.md"


class LocalFileSystemSkillProvider(SkillProvider):
    """Skill provider backed by a local directory tree.

    Each immediate subdirectory of *root* that contains a ``SKILL.md``
    file is a skill; the directory name is its ID and must match the
    ``name`` field in the frontmatter.  Agent personas live in
    ``root/agents/<agent-id>.agent.md``.

    Expected layout::

        root/
        ├── copilot-instructions/
        │   ├── SKILL.md
        │   ├── references/validation-checklist.md
        │   └── examples/react-typescript.md
        └── agents/
            └── copilot-instructions-generator.agent.md

    Args:
        root: Path to the top-level bundle directory.
        max_file_bytes: Maximum allowed file size in bytes.  Larger
            files are treated as missing.  Defaults to 10 MB.

    Raises:
        NotADirectoryError: If *root* does not exist or is not a
            directory.

    Example::

        provider = LocalFileSystemSkillProvider(BUNDLED_SKILLS_ROOT)
        registry = SkillRegistry()
        await registry.register("copilot-instructions", provider)
    """

    def __init__(self, root: Path, *, max_file_bytes: int = DEFAULT_MAX_FILE_BYTES) -> None:
        self._root = Path(root)
        if not self._root.is_dir():
            raise NotADirectoryError(f"Skill root does not exist: {self._root}")
        self._max_file_bytes = max_file_bytes

    def __repr__(self) -> str:
        return f"LocalFileSystemSkillProvider({str(self._root)!r})"

    # ------------------------------------------------------------------
    # Metadata & body, parsed from SKILL.md
    # ------------------------------------------------------------------

    async def get_metadata(self, skill_id: str) -> dict[str, Any]:
        """Parse and return the YAML frontmatter of a skill's ``SKILL.md``.

        Raises:
            SkillNotFoundError: If the skill directory or ``SKILL.md``
                does not exist.
        """
        frontmatter, _ = split_frontmatter(self._read_skill_md(skill_id))
        return frontmatter

    async def get_body(self, skill_id: str) -> str:
        """Return the markdown body after the YAML frontmatter.

        Raises:
            SkillNotFoundError: If the skill directory or ``SKILL.md``
                does not exist.
        """
        _, body = split_frontmatter(self._read_skill_md(skill_id))
        return body

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    async def get_reference(self, skill_id: str, name: str) -> bytes:
        """Read a file from the skill's ``references/`` directory.

        Raises:
            ResourceNotFoundError: If the file does not exist.
        """
        return self._read_subdir_file(skill_id, "references", name)

    async def get_example(self, skill_id: str, name: str) -> bytes:
        """Read a file from the skill's ``examples/`` directory.

        Raises:
            ResourceNotFoundError: If the file does not exist.
        """
        return self._read_subdir_file(skill_id, "examples", name)

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------

    async def get_agent(self, agent_id: str) -> str:
        """Read ``agents/<agent_id>.agent.md``.

        Raises:
            AgentNotFoundError: If the file does not exist, escapes the
                root or exceeds the size limit.
        """
        agents_dir = (self._root / _AGENTS_DIR).resolve()
        path = (agents_dir / f"{agent_id}{_AGENT_SUFFIX}").resolve()
        if path.parent != agents_dir:
            raise AgentNotFoundError(f"Invalid agent_id: {agent_id!r}")
        if not path.is_file():
            raise AgentNotFoundError(f"Agent not found: {agent_id!r}")
        if path.stat().st_size > self._max_file_bytes:
            raise AgentNotFoundError(
                f"Agent {agent_id!r} exceeds maximum size ({self._max_file_bytes} bytes)"
            )
        return path.read_text(encoding="utf-8")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _skill_dir(self, skill_id: str) -> Path:
        """Resolve and validate the directory path for a skill.

        Raises:
            SkillNotFoundError: If the directory does not exist or lies
                outside the root.
        """
        path = (self._root / skill_id).resolve()
        if not path.is_relative_to(self._root.resolve()):
            raise SkillNotFoundError(f"Invalid skill_id: {skill_id!r}")
        if not path.is_dir():
            raise SkillNotFoundError(f"Skill not found: {skill_id!r}")
        return path

    def _read_skill_md(self, skill_id: str) -> str:
        """Read the full text of a skill's ``SKILL.md`` file.

        Raises:
            SkillNotFoundError: If the directory or file does not exist.
        """
        skill_md = self._skill_dir(skill_id) / "SKILL.md"
        if not skill_md.is_file():
            raise SkillNotFoundError(f"SKILL.md not found for skill {skill_id!r}")
        size = skill_md.stat().st_size
        if size > self._max_file_bytes:
            raise SkillNotFoundError(
                f"SKILL.md for skill {skill_id!r} exceeds maximum size "
                f"({self._max_file_bytes} bytes)"
            )
        return skill_md.read_text(encoding="utf-8")

    def _read_subdir_file(self, skill_id: str, subdir: str, name: str) -> bytes:
        """Read a single file from a skill's subdirectory.

        Raises:
            ResourceNotFoundError: If the file does not exist, escapes
                the skill directory or exceeds the size limit.
        """
        skill_dir = self._skill_dir(skill_id)
        path = (skill_dir / subdir / name).resolve()
        if not path.is_relative_to(skill_dir / subdir):
            raise ResourceNotFoundError(f"Invalid resource name: {name!r}")
        if not path.is_file():
            raise ResourceNotFoundError(
                f"Resource {name!r} not found in {subdir}/ for skill {skill_id!r}"
            )
        size = path.stat().st_size
        if size > self._max_file_bytes:
            raise ResourceNotFoundError(
                f"Resource {name!r} for skill {skill_id!r} exceeds maximum size "
                f"({self._max_file_bytes} bytes)"
            )
        return path.read_bytes()
