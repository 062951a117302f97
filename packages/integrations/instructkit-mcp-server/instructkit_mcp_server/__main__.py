"""Run the instructkit MCP server.

Usage::

    python -m instructkit_mcp_server
    python -m instructkit_mcp_server --config server.yaml
    python -m instructkit_mcp_server --config server.json --transport streamable-http

Without ``--config`` the server exposes the bundled
``copilot-instructions`` skill and its generator agent.  The config file
is a JSON or YAML document conforming to
:class:`~instructkit_mcp_server.config.ServerConfig`.

MCP client integration (stdio transport)::

    {
        "command": "instructkit-mcp-server",
        "args": ["--config", "server.json"]
    }
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from instructkit_core import InstructKitError, SkillRegistry
from instructkit_mcp_server.config import DEFAULT_GENERATOR_SKILL, load_config
from instructkit_mcp_server.server import (
    build_default_registry,
    build_registry,
    create_mcp_server,
)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments, load config, and start the MCP server."""
    parser = argparse.ArgumentParser(
        prog="instructkit-mcp-server",
        description="Start an MCP server that creates copilot instructions.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a JSON or YAML configuration file (default: bundled skill).",
    )
    parser.add_argument(
        "--transport",
        default="stdio",
        choices=["stdio", "streamable-http"],
        help="MCP transport type (default: stdio).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    # stdout carries the stdio transport; log to stderr only.
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    name = "Copilot Instructions"
    instructions: str | None = None
    generator_skill = DEFAULT_GENERATOR_SKILL

    if args.config is None:
        build = build_default_registry()
    else:
        config_path: Path = args.config
        if not config_path.exists():
            print(f"Error: config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        try:
            config = load_config(config_path)
        except (ValueError, ValidationError, yaml.YAMLError) as exc:
            print(f"Error: invalid config file {config_path}: {exc}", file=sys.stderr)
            sys.exit(1)
        name = config.name
        instructions = config.instructions
        generator_skill = config.generator_skill or DEFAULT_GENERATOR_SKILL
        build = build_registry(config)

    try:
        registry: SkillRegistry = asyncio.run(build)
    except (InstructKitError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    server = create_mcp_server(
        registry,
        name=name,
        instructions=instructions,
        generator_skill=generator_skill,
    )
    server.run(transport=args.transport)


if __name__ == "__main__":
    main()
