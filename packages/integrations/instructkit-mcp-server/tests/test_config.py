"""Tests for config loading and config-driven MCP server creation."""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from instructkit_core import SkillProvider
from instructkit_fs import BUNDLED_SKILLS_ROOT
from instructkit_mcp_server.config import (
    DEFAULT_GENERATOR_SKILL,
    ServerConfig,
    SkillConfig,
    load_config,
    resolve_env_vars,
)
from instructkit_mcp_server.server import (
    SUPPORTED_PROVIDERS,
    _resolve_provider,
    build_registry,
    create_mcp_server,
)


def _write_skill(root: Path, skill_id: str) -> None:
    """Create a minimal valid skill directory."""
    skill_dir = root / skill_id
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "SKILL.md").write_text(
        f"---\nname: {skill_id}\ndescription: Test skill.\n---\n# {skill_id}\nInstructions.",
        encoding="utf-8",
    )


# ------------------------------------------------------------------
# Models
# ------------------------------------------------------------------


class TestSkillConfig:
    def test_minimal(self):
        cfg = SkillConfig(id="my-skill", provider="fs")
        assert cfg.options == {}
        assert cfg.agents == []

    @pytest.mark.parametrize("data", [{"provider": "fs"}, {"id": "my-skill"}])
    def test_required_fields(self, data):
        with pytest.raises(ValidationError):
            SkillConfig(**data)


class TestServerConfig:
    def test_generator_skill_defaults_to_first_skill(self):
        cfg = ServerConfig(
            name="Test",
            skills=[SkillConfig(id="team", provider="fs"), SkillConfig(id="b", provider="fs")],
        )
        assert cfg.generator_skill == "team"
        assert cfg.instructions is None

    def test_generator_skill_must_be_configured(self):
        with pytest.raises(ValidationError, match="generator_skill"):
            ServerConfig(
                name="Test",
                generator_skill="missing",
                skills=[SkillConfig(id="team", provider="fs")],
            )

    def test_empty_skills_raises(self):
        with pytest.raises(ValidationError):
            ServerConfig(name="Test", skills=[])

    def test_roundtrip(self):
        cfg = ServerConfig(
            name="RT",
            instructions="Hello",
            skills=[SkillConfig(id="a", provider="fs", options={"root": "/tmp"}, agents=["x"])],
        )
        assert ServerConfig(**cfg.model_dump()) == cfg


class TestLoadConfig:
    def test_json(self, tmp_path):
        path = tmp_path / "server.json"
        path.write_text(
            json.dumps({"name": "Server", "skills": [{"id": "s1", "provider": "fs"}]}),
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert cfg.name == "Server"
        assert cfg.generator_skill == "s1"

    def test_yaml_with_env_vars(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SKILLS_TOKEN", "tok-abc")
        path = tmp_path / "server.yaml"
        path.write_text(
            "name: YAML Server\n"
            "skills:\n"
            "  - id: team\n"
            "    provider: http\n"
            "    options:\n"
            "      base_url: https://cdn.example.com\n"
            "      headers:\n"
            "        Authorization: Bearer ${SKILLS_TOKEN}\n",
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert cfg.skills[0].options["headers"]["Authorization"] == "Bearer tok-abc"

    def test_invalid_json_raises_value_error(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{invalid json", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.json")


# ------------------------------------------------------------------
# Provider resolution
# ------------------------------------------------------------------


class TestResolveProvider:
    def test_supported_providers_constant(self):
        assert SUPPORTED_PROVIDERS == {"fs", "http"}

    def test_fs_provider(self, tmp_path):
        provider = _resolve_provider("fs", {"root": str(tmp_path)})
        assert isinstance(provider, SkillProvider)

    def test_fs_provider_defaults_to_bundled_root(self):
        provider = _resolve_provider("fs", {})
        assert repr(provider) == f"LocalFileSystemSkillProvider({str(BUNDLED_SKILLS_ROOT)!r})"

    async def test_http_provider_ignores_unknown_options(self):
        provider = _resolve_provider(
            "http",
            {"base_url": "https://example.com", "client": "ignored", "headers": {"X": "1"}},
        )
        assert isinstance(provider, SkillProvider)
        await provider.aclose()

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError, match="Unknown provider type"):
            _resolve_provider("gcs", {})

    @pytest.mark.parametrize(
        ("provider_type", "module", "options"),
        [
            ("fs", "instructkit_fs", {"root": "."}),
            ("http", "instructkit_http", {"base_url": "https://x.com"}),
        ],
    )
    def test_import_error(self, provider_type, module, options):
        with (
            patch.dict("sys.modules", {module: None}),
            pytest.raises(ImportError, match=module),
        ):
            _resolve_provider(provider_type, options)


# ------------------------------------------------------------------
# Config-driven registry and server
# ------------------------------------------------------------------


class TestBuildRegistry:
    async def test_registers_skills_and_agents(self, tmp_path):
        _write_skill(tmp_path, "team")
        (tmp_path / "agents").mkdir()
        (tmp_path / "agents" / "writer.agent.md").write_text(
            "---\nname: writer\ndescription: Writes.\n---\nUse [team](../team/SKILL.md).\n",
            encoding="utf-8",
        )
        config = ServerConfig(
            name="Test",
            skills=[
                SkillConfig(
                    id="team", provider="fs", options={"root": str(tmp_path)}, agents=["writer"]
                ),
                SkillConfig(id=DEFAULT_GENERATOR_SKILL, provider="fs"),
            ],
        )
        registry = await build_registry(config)
        assert {s.get_id() for s in registry.list_skills()} == {"team", DEFAULT_GENERATOR_SKILL}
        assert registry.get_agent("writer").skill_links == ["team"]

    async def test_server_from_config(self, tmp_path):
        _write_skill(tmp_path, "skill-a")
        config = ServerConfig(
            name="My Server",
            instructions="Custom instructions",
            skills=[SkillConfig(id="skill-a", provider="fs", options={"root": str(tmp_path)})],
        )
        server = create_mcp_server(
            await build_registry(config),
            name=config.name,
            instructions=config.instructions,
            generator_skill=config.generator_skill,
        )
        assert server.name == "My Server"
        assert server.instructions == "Custom instructions"
        result = await server.call_tool("get_skill_metadata", {"skill_id": "skill-a"})
        content = result[0] if isinstance(result, tuple) else result
        assert json.loads(content[0].text)["name"] == "skill-a"


# ------------------------------------------------------------------
# Environment variable resolution
# ------------------------------------------------------------------


class TestResolveEnvVars:
    def test_nested_structure(self, monkeypatch):
        monkeypatch.setenv("CDN_TOKEN", "tok-abc")
        data = {"a": {"b": [{"c": "Bearer ${CDN_TOKEN}"}, "plain"]}, "n": 3}
        assert resolve_env_vars(data) == {"a": {"b": [{"c": "Bearer tok-abc"}, "plain"]}, "n": 3}

    def test_non_string_scalars_unchanged(self):
        assert resolve_env_vars(42) == 42
        assert resolve_env_vars(True) is True
        assert resolve_env_vars(None) is None

    def test_dollar_without_braces_not_replaced(self):
        assert resolve_env_vars("$VAR") == "$VAR"

    def test_unset_var_resolves_to_empty_with_warning(self, monkeypatch, caplog):
        monkeypatch.delenv("MISSING_VAR", raising=False)
        with caplog.at_level(logging.WARNING, logger="instructkit_mcp_server.config"):
            assert resolve_env_vars("x-${MISSING_VAR}-y") == "x--y"
        assert "MISSING_VAR" in caplog.text


# ------------------------------------------------------------------
# Entry point (__main__.py)
# ------------------------------------------------------------------


class TestMain:
    def test_missing_config_file_exits(self, tmp_path):
        from instructkit_mcp_server.__main__ import main

        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(tmp_path / "nonexistent.json")])
        assert exc_info.value.code == 1

    def test_invalid_config_exits(self, tmp_path, capsys):
        from instructkit_mcp_server.__main__ import main

        path = tmp_path / "bad.json"
        path.write_text("{invalid json", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(path)])
        assert exc_info.value.code == 1
        assert "invalid config file" in capsys.readouterr().err

    def test_unknown_skill_exits(self, tmp_path):
        from instructkit_mcp_server.__main__ import main

        path = tmp_path / "server.json"
        path.write_text(
            json.dumps(
                {
                    "name": "S",
                    "skills": [{"id": "ghost", "provider": "fs", "options": {"root": str(tmp_path)}}],
                }
            ),
            encoding="utf-8",
        )
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(path)])
        assert exc_info.value.code == 1

    @pytest.mark.parametrize("transport", ["stdio", "streamable-http"])
    def test_runs_server_with_transport(self, tmp_path, transport):
        from instructkit_mcp_server.__main__ import main

        _write_skill(tmp_path, "cli-skill")
        path = tmp_path / "server.yaml"
        path.write_text(
            f"name: CLI Server\nskills:\n  - id: cli-skill\n    provider: fs\n"
            f"    options:\n      root: '{tmp_path}'\n",
            encoding="utf-8",
        )
        with patch("mcp.server.fastmcp.FastMCP.run") as run:
            main(["--config", str(path), "--transport", transport])
        run.assert_called_once_with(transport=transport)

    def test_default_registry_without_config(self):
        from instructkit_mcp_server.__main__ import main

        with patch("mcp.server.fastmcp.FastMCP.run") as run:
            main([])
        run.assert_called_once_with(transport="stdio")
