"""MCP server for creating copilot instructions.

This package bridges :mod:`instructkit_core` and the `Model Context
Protocol <https://modelcontextprotocol.io>`_, providing:

* :func:`create_mcp_server` -- builds a FastMCP server from a
  :class:`~instructkit_core.SkillRegistry`.
* :func:`build_registry` / :func:`build_default_registry` -- register
  skills from a :class:`ServerConfig` or the bundled skill.
* CLI entry-point (``instructkit-mcp-server --config server.json``)
  for zero-code server startup.

Quick start (programmatic)::

    from instructkit_mcp_server import build_default_registry, create_mcp_server

    registry = await build_default_registry()
    server = create_mcp_server(registry, name="Copilot Instructions")
    server.run()  # stdio by default
"""

from instructkit_mcp_server.config import ServerConfig, SkillConfig, load_config
from instructkit_mcp_server.server import (
    build_default_registry,
    build_registry,
    create_mcp_server,
)

__all__ = [
    "ServerConfig",
    "SkillConfig",
    "build_default_registry",
    "build_registry",
    "create_mcp_server",
    "load_config",
]
