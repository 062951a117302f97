"""MCP server builder for instructkit.

This module creates a `FastMCP <https://pypi.org/project/mcp/>`_ server
that exposes a :class:`~instructkit_core.SkillRegistry` and the copilot
instructions workflow as MCP tools and resources.

Tools
-----

==================================  ==================================================
Tool name                           Description
==================================  ==================================================
``get_skill_metadata``              Read frontmatter (name, description, ...).
``get_skill_body``                  Load the full skill instructions.
``get_skill_reference``             Read a single reference document.
``list_templates``                  Show the stack-to-template lookup table.
``get_template``                    Read one example template.
``detect_tech_stack``               Inspect a project directory.
``generate_copilot_instructions``   Render instructions for a project.
``validate_copilot_instructions``   Check content against the checklist.
``write_copilot_instructions``      Write or merge the instructions file.
==================================  ==================================================

Resources
---------

==========================================  ==============================================
URI                                         Description
==========================================  ==============================================
``skills://catalog/xml``                    XML catalog of all registered skills.
``skills://catalog/markdown``               Markdown catalog of all registered skills.
``skills://tools-usage-instructions``       Workflow instructions for using the tools.
==========================================  ==============================================

Example::

    from instructkit_mcp_server import build_default_registry, create_mcp_server

    registry = await build_default_registry()
    server = create_mcp_server(registry, name="Copilot Instructions")
    server.run()  # stdio by default
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from instructkit_core import (
    InstructionsGenerator,
    ProjectProfile,
    SkillProvider,
    SkillRegistry,
    resolve_target_path,
    write_instructions,
)

from instructkit_mcp_server.config import DEFAULT_GENERATOR_SKILL, ServerConfig

# ------------------------------------------------------------------
# Provider resolution
# ------------------------------------------------------------------

#: Provider types that are recognized by :func:`_resolve_provider`.
SUPPORTED_PROVIDERS: frozenset[str] = frozenset({"fs", "http"})


def _resolve_provider(provider_type: str, options: dict[str, Any]) -> SkillProvider:
    """Map a provider type string and options to a concrete provider.

    The ``fs`` provider defaults to the bundled skill directory when no
    ``root`` option is given.

    Raises:
        ImportError: If the required provider package is not installed.
        ValueError: If *provider_type* is not recognized.
    """
    if provider_type == "fs":
        try:
            from instructkit_fs import BUNDLED_SKILLS_ROOT, LocalFileSystemSkillProvider
        except ImportError as exc:
            raise ImportError(
                "Provider 'fs' requires the instructkit_fs package. "
                "Install it with:  pip install instructkit"
            ) from exc
        root = Path(options["root"]) if "root" in options else BUNDLED_SKILLS_ROOT
        return LocalFileSystemSkillProvider(root=root)

    if provider_type == "http":
        try:
            from instructkit_http import HTTPStaticFileSkillProvider
        except ImportError as exc:
            raise ImportError(
                "Provider 'http' requires the instructkit_http package. "
                "Install it with:  pip install instructkit"
            ) from exc
        # Only pass constructor-safe keys; runtime objects like
        # ``client`` cannot come from a config file.
        safe_http_keys = {"base_url", "headers", "params", "require_tls"}
        filtered = {k: v for k, v in options.items() if k in safe_http_keys}
        return HTTPStaticFileSkillProvider(**filtered)

    raise ValueError(
        f"Unknown provider type: {provider_type!r}. "
        f"Supported types: {', '.join(sorted(SUPPORTED_PROVIDERS))}"
    )


async def build_registry(config: ServerConfig) -> SkillRegistry:
    """Register every skill in *config*, then the agents they serve."""
    registry = SkillRegistry()
    providers: list[tuple[SkillProvider, list[str]]] = []
    for skill_cfg in config.skills:
        provider = _resolve_provider(skill_cfg.provider, skill_cfg.options)
        await registry.register(skill_cfg.id, provider)
        providers.append((provider, skill_cfg.agents))
    for provider, agent_ids in providers:
        for agent_id in agent_ids:
            await registry.register_agent(agent_id, provider)
    return registry


async def build_default_registry() -> SkillRegistry:
    """Register the bundled copilot instructions skill and its agent."""
    from instructkit_fs import BUNDLED_AGENT_ID

    config = ServerConfig(
        name="Copilot Instructions",
        skills=[
            {
                "id": DEFAULT_GENERATOR_SKILL,
                "provider": "fs",
                "agents": [BUNDLED_AGENT_ID],
            }
        ],
    )
    return await build_registry(config)


# ------------------------------------------------------------------
# Server builder
# ------------------------------------------------------------------


def create_mcp_server(
    registry: SkillRegistry,
    *,
    name: str,
    instructions: str | None = None,
    generator_skill: str = DEFAULT_GENERATOR_SKILL,
) -> FastMCP:
    """Build an MCP server that exposes the copilot instructions workflow.

    The returned :class:`~mcp.server.fastmcp.FastMCP` server is
    transport-agnostic.  Call ``server.run()`` to start with the
    default stdio transport, or ``server.run(transport="streamable-http")``
    for HTTP.

    Args:
        registry: The :class:`~instructkit_core.SkillRegistry` whose
            skills should be exposed via MCP.
        name: Display name for the MCP server.
        instructions: Optional server-level instructions sent to the
            MCP client during initialization.
        generator_skill: ID of the registered skill that provides the
            lookup table, templates and checklist for the generation
            tools.  Resolved lazily, on each tool call.

    Returns:
        A configured :class:`~mcp.server.fastmcp.FastMCP` server
        instance, ready for ``server.run()``.
    """
    mcp = FastMCP(name, instructions=instructions)

    def _generator() -> InstructionsGenerator:
        return InstructionsGenerator(registry.get_skill(generator_skill))

    # ------------------------------------------------------------------
    # Skill content tools
    # ------------------------------------------------------------------

    @mcp.tool()
    async def get_skill_metadata(skill_id: str) -> str:
        """Get structured metadata (name, description, and optional fields like license) for a specific skill."""  # noqa: E501
        skill = registry.get_skill(skill_id)
        return json.dumps(await skill.get_metadata())

    @mcp.tool()
    async def get_skill_body(skill_id: str) -> str:
        """Get the full instructions and guidance (markdown body) for a specific skill."""
        skill = registry.get_skill(skill_id)
        return await skill.get_body()

    @mcp.tool()
    async def get_skill_reference(skill_id: str, name: str) -> str:
        """Get the full content of a specific reference document from a skill.

        Binary content is decoded as UTF-8 with replacement characters
        for non-decodable bytes.
        """
        skill = registry.get_skill(skill_id)
        return (await skill.get_reference(name)).decode("utf-8", errors="replace")

    # ------------------------------------------------------------------
    # Workflow tools
    # ------------------------------------------------------------------

    @mcp.tool()
    async def list_templates() -> str:
        """List the example templates as a Markdown table of tech stack, keywords and file."""
        table = await _generator().skill.get_template_table()
        return table.to_markdown()

    @mcp.tool()
    async def get_template(name: str) -> str:
        """Get an example template by tech stack label or file name (e.g. 'Django' or 'python-django.md')."""  # noqa: E501
        skill = _generator().skill
        entry = (await skill.get_template_table()).get(name)
        return await skill.get_template(entry)

    @mcp.tool()
    async def detect_tech_stack(project_path: str) -> str:
        """Detect the tech stack, package manager, commands and top-level directories of a local project."""  # noqa: E501
        report = _generator().detect(Path(project_path))
        return report.model_dump_json()

    @mcp.tool()
    async def generate_copilot_instructions(
        project_path: str,
        name: str | None = None,
        description: str | None = None,
        template: str | None = None,
        commands: dict[str, str] | None = None,
        guidelines: list[str] | None = None,
    ) -> str:
        """Generate copilot instructions for a local project without writing them.

        Detects the stack, picks the matching example template (or the
        named *template*), fills in the project details and returns JSON
        with the selected template, the rendered content and the
        checklist results.
        """
        profile = ProjectProfile(
            name=name,
            description=description,
            commands=commands or {},
            guidelines=guidelines or [],
        )
        result = await _generator().generate(Path(project_path), profile, template=template)
        return json.dumps(
            {
                "template": result.template.filename,
                "stack": result.report.tags,
                "content": result.content,
                "checklist_passed": result.checklist.passed,
                "checklist": result.checklist.to_markdown(),
            }
        )

    @mcp.tool()
    async def validate_copilot_instructions(content: str) -> str:
        """Check copilot instructions content against the validation checklist.

        Returns a Markdown checklist: [x] passed, [ ] failed, [?] needs
        manual review.
        """
        report = await _generator().validate(content)
        status = "PASSED" if report.passed else "FAILED"
        return f"{status}\n\n{report.to_markdown()}"

    @mcp.tool()
    async def write_copilot_instructions(
        project_path: str,
        content: str,
        path: str | None = None,
        update_sections: list[str] | None = None,
    ) -> str:
        """Write copilot instructions into a project's .github/copilot-instructions.md.

        An existing file is edited in place: its sections are kept, missing
        sections are added, and only the sections listed in
        update_sections are replaced.
        """
        target = resolve_target_path(Path(project_path), path)
        written = write_instructions(target, content, update_sections=update_sections or ())
        return json.dumps(
            {
                "path": str(written.path),
                "action": written.action,
                "added_sections": written.added_sections,
                "updated_sections": written.updated_sections,
            }
        )

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    @mcp.resource("skills://catalog/xml")
    async def skills_catalog_xml() -> str:
        """XML catalog of all registered skills for system-prompt injection."""
        return await registry.get_skills_catalog(format="xml")

    @mcp.resource("skills://catalog/markdown")
    async def skills_catalog_markdown() -> str:
        """Markdown catalog of all registered skills for system-prompt injection."""
        return await registry.get_skills_catalog(format="markdown")

    @mcp.resource("skills://tools-usage-instructions")
    def skills_tools_usage_instructions() -> str:
        """Workflow instructions explaining how to use the copilot instructions tools."""
        return _TOOLS_USAGE_INSTRUCTIONS

    return mcp


_TOOLS_USAGE_INSTRUCTIONS = """\
## How to Create Copilot Instructions

These tools create and maintain `.github/copilot-instructions.md` files \
for local projects.

### Workflow

1. **Detect** - Call `detect_tech_stack(project_path)` to learn the \
languages, frameworks and commands of the project.
2. **Pick a template** - `list_templates()` shows the lookup table; \
`get_template(name)` returns one example.
3. **Interview** - Ask the user only for what detection did not answer: \
project name, a short description, missing build/test/lint commands and \
house rules.
4. **Generate** - Call `generate_copilot_instructions(project_path, ...)` \
with the answers. Review the returned content.
5. **Validate** - Call `validate_copilot_instructions(content)` after \
every manual edit and fix each failed item.
6. **Write** - Call `write_copilot_instructions(project_path, content)`. \
An existing file is merged, never replaced.

### Important guidelines

- **Edit in place.** Pass `update_sections` only for sections the user \
asked to change.
- **Use the skill.** `get_skill_body(skill_id)` and \
`get_skill_reference(skill_id, name)` return the full workflow and the \
validation checklist.\
"""
