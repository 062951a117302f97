"""Tests for validate_skill and validate_agent."""

import logging
from unittest.mock import AsyncMock

import pytest

from instructkit_core import AgentDefinition, Skill, SkillProvider, validate_agent, validate_skill


def _skill(metadata=None, body="# Body", skill_id="copilot-instructions") -> Skill:
    provider = AsyncMock(spec=SkillProvider)
    provider.get_metadata.return_value = (
        metadata
        if metadata is not None
        else {"name": skill_id, "description": "Creates copilot instructions."}
    )
    provider.get_body.return_value = body
    return Skill(skill_id, provider)


class TestValidateSkill:
    async def test_valid(self):
        assert await validate_skill(_skill()) == []

    async def test_empty_body(self):
        errors = await validate_skill(_skill(body="   \n"))
        assert any("body is empty" in e for e in errors)

    async def test_missing_name(self):
        errors = await validate_skill(_skill({"description": "x"}))
        assert any("missing required 'name'" in e for e in errors)

    async def test_missing_description(self):
        errors = await validate_skill(_skill({"name": "copilot-instructions"}))
        assert any("missing required 'description'" in e for e in errors)

    async def test_name_mismatch(self):
        errors = await validate_skill(_skill({"name": "other", "description": "x"}))
        assert any("does not match" in e for e in errors)

    @pytest.mark.parametrize("name", ["Upper", "-leading", "trailing-", "under_score"])
    async def test_bad_name_format(self, name):
        errors = await validate_skill(_skill({"name": name, "description": "x"}, skill_id=name))
        assert any("lowercase alphanumeric" in e for e in errors)

    async def test_consecutive_hyphens(self):
        errors = await validate_skill(_skill({"name": "a--b", "description": "x"}, skill_id="a--b"))
        assert any("consecutive hyphens" in e for e in errors)

    async def test_name_too_long(self):
        name = "a" * 65
        errors = await validate_skill(_skill({"name": name, "description": "x"}, skill_id=name))
        assert any("exceeds 64 characters" in e for e in errors)

    async def test_description_too_long(self):
        meta = {"name": "copilot-instructions", "description": "x" * 1025}
        errors = await validate_skill(_skill(meta))
        assert any("exceeds 1024 characters" in e for e in errors)

    async def test_optional_field_wrong_type(self):
        meta = {"name": "copilot-instructions", "description": "x", "license": 3}
        errors = await validate_skill(_skill(meta))
        assert any("field 'license' must be str" in e for e in errors)

    async def test_unknown_keys_warn(self, caplog):
        meta = {"name": "copilot-instructions", "description": "x", "color": "blue"}
        with caplog.at_level(logging.WARNING):
            assert await validate_skill(_skill(meta)) == []
        assert "unknown metadata keys: color" in caplog.text

    async def test_body_error_reported(self):
        skill = _skill()
        skill.provider.get_body.side_effect = OSError("disk gone")
        errors = await validate_skill(skill)
        assert any("failed to read body: disk gone" in e for e in errors)

    async def test_metadata_error_reported(self):
        skill = _skill()
        skill.provider.get_metadata.side_effect = RuntimeError("boom")
        errors = await validate_skill(skill)
        assert errors == ["Skill 'copilot-instructions': failed to read metadata: boom"]


def _agent(**overrides) -> AgentDefinition:
    data = {
        "name": "copilot-instructions-generator",
        "description": "Generates copilot instructions.",
        "tools": ["read", "edit"],
        "body": "Use [it](../copilot-instructions/SKILL.md).",
        "skill_links": ["copilot-instructions"],
    }
    data.update(overrides)
    return AgentDefinition(**data)


class TestValidateAgent:
    def test_valid(self):
        assert validate_agent(_agent(), "copilot-instructions-generator") == []

    def test_valid_with_known_skills(self):
        errors = validate_agent(
            _agent(), "copilot-instructions-generator", known_skills=["copilot-instructions"]
        )
        assert errors == []

    def test_name_mismatch(self):
        errors = validate_agent(_agent(), "other-agent")
        assert any("does not match id 'other-agent'" in e for e in errors)

    def test_no_skill_links(self):
        errors = validate_agent(_agent(skill_links=[]), "copilot-instructions-generator")
        assert any("does not link any skill" in e for e in errors)

    def test_unregistered_skills(self):
        errors = validate_agent(_agent(), "copilot-instructions-generator", known_skills=[])
        assert any("links unregistered skills: copilot-instructions" in e for e in errors)

    def test_blank_tool(self):
        errors = validate_agent(_agent(tools=["read", " "]), "copilot-instructions-generator")
        assert any("tools must be non-empty" in e for e in errors)

    def test_empty_description(self):
        errors = validate_agent(_agent(description=""), "copilot-instructions-generator")
        assert any("missing required 'description'" in e for e in errors)
