"""Pydantic configuration models for the instructkit MCP server.

This module defines the declarative configuration schema used by the
CLI (``python -m instructkit_mcp_server --config server.json``).

String values may contain ``${VAR}`` placeholders that are resolved
from environment variables at load time.  Unset variables resolve to
an empty string and emit a warning.

Example config (JSON)::

    {
        "name": "Copilot Instructions",
        "generator_skill": "copilot-instructions",
        "skills": [
            {
                "id": "copilot-instructions",
                "provider": "fs",
                "options": {"root": "./skills"},
                "agents": ["copilot-instructions-generator"]
            },
            {
                "id": "team-conventions",
                "provider": "http",
                "options": {
                    "base_url": "https://example.com/skills",
                    "headers": {"Authorization": "Bearer ${API_TOKEN}"}
                }
            }
        ]
    }
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

_logger = logging.getLogger(__name__)

#: Skill used by the generation tools when the config does not name one.
DEFAULT_GENERATOR_SKILL = "copilot-instructions"


class SkillConfig(BaseModel):
    """Configuration for a single skill."""

    id: str = Field(..., description="Skill identifier")
    provider: str = Field(..., description="Provider type ('fs' or 'http')")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Provider-specific options passed to the provider constructor",
    )
    agents: list[str] = Field(
        default_factory=list,
        description="Agent personas served by the same provider",
    )


class ServerConfig(BaseModel):
    """Top-level configuration for the instructkit MCP server.

    Attributes:
        name: Display name shown to MCP clients during initialization.
        instructions: Optional server-level instructions sent to the
            client during the MCP handshake.
        generator_skill: ID of the skill whose lookup table, templates
            and checklist the generation tools use.  Must be one of
            *skills*; defaults to the first configured skill.
        skills: One or more skill definitions to register.
    """

    name: str = Field(..., description="Display name for the MCP server")
    instructions: str | None = Field(None, description="Optional server-level instructions")
    generator_skill: str | None = Field(None, description="Skill used by the generation tools")
    skills: list[SkillConfig] = Field(..., description="Skills to register", min_length=1)

    @model_validator(mode="after")
    def _generator_skill_is_configured(self) -> ServerConfig:
        if self.generator_skill is None:
            self.generator_skill = self.skills[0].id
        elif self.generator_skill not in {s.id for s in self.skills}:
            raise ValueError(
                f"generator_skill {self.generator_skill!r} is not one of the configured skills"
            )
        return self


def load_config(path: Path) -> ServerConfig:
    """Load a JSON or YAML config file, resolving ``${VAR}`` placeholders.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file is not valid JSON or holds no mapping.
        pydantic.ValidationError: If the data does not match :class:`ServerConfig`.
    """
    raw = Path(path).read_text(encoding="utf-8")
    if Path(path).suffix in (".yaml", ".yml"):
        data = yaml.safe_load(raw)
    else:
        data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")
    return ServerConfig(**resolve_env_vars(data))


# ------------------------------------------------------------------
# Environment variable resolution
# ------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def resolve_env_vars(data: Any) -> Any:
    """Recursively resolve ``${VAR}`` placeholders in config data.

    Walks dicts, lists, and strings.  Non-string scalars (``int``,
    ``float``, ``bool``, ``None``) are returned as-is.

    Unset environment variables resolve to an empty string and a
    warning is logged.
    """
    if isinstance(data, str):
        return _resolve_env_vars_in_string(data)
    if isinstance(data, dict):
        return {k: resolve_env_vars(v) for k, v in data.items()}
    if isinstance(data, list):
        return [resolve_env_vars(item) for item in data]
    return data


def _resolve_env_vars_in_string(value: str) -> str:
    """Replace ``${VAR_NAME}`` tokens in *value* with ``os.environ``."""

    def _replace(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name, "")
        if not env_value:
            _logger.warning(
                "Environment variable '%s' is not set or empty",
                var_name,
            )
        return env_value

    return _ENV_VAR_RE.sub(_replace, value)
