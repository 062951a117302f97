"""Tests for Skill -- delegation to the provider and bundle interpretation."""

from unittest.mock import AsyncMock

import pytest

from instructkit_core import ResourceNotFoundError, Skill, SkillProvider, TemplateEntry

_BODY = """\
# Copilot Instructions

## Examples

| Tech Stack | Keywords | Example File |
| --- | --- | --- |
| Django | django | python-django.md |
| Python | python | python.md |
| Generic | * | generic.md |
"""

_CHECKLIST = b"""\
# Validation Checklist

## Structure

- [ ] One H1 heading <!-- check: single-h1 -->
- [ ] Reads well
"""


def _make_mock_provider() -> AsyncMock:
    provider = AsyncMock(spec=SkillProvider)
    provider.get_metadata.return_value = {
        "name": "copilot-instructions",
        "description": 'Use when asked to "create copilot instructions" or “set up copilot”.',
    }
    provider.get_body.return_value = _BODY
    provider.get_reference.return_value = _CHECKLIST
    provider.get_example.return_value = b"# Copilot Instructions\n"
    return provider


class TestSkill:
    def test_skill_id(self):
        skill = Skill("copilot-instructions", _make_mock_provider())
        assert skill.get_id() == "copilot-instructions"

    def test_provider_property(self):
        provider = _make_mock_provider()
        assert Skill("copilot-instructions", provider).provider is provider

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError, match="non-empty"):
            Skill("  ", _make_mock_provider())

    def test_non_provider_rejected(self):
        with pytest.raises(TypeError, match="SkillProvider"):
            Skill("copilot-instructions", object())

    async def test_metadata_delegates(self):
        provider = _make_mock_provider()
        meta = await Skill("copilot-instructions", provider).get_metadata()
        provider.get_metadata.assert_called_once_with("copilot-instructions")
        assert meta["name"] == "copilot-instructions"

    async def test_body_delegates(self):
        provider = _make_mock_provider()
        body = await Skill("copilot-instructions", provider).get_body()
        provider.get_body.assert_called_once_with("copilot-instructions")
        assert "## Examples" in body

    async def test_get_reference_delegates(self):
        provider = _make_mock_provider()
        await Skill("copilot-instructions", provider).get_reference("validation-checklist.md")
        provider.get_reference.assert_called_once_with(
            "copilot-instructions", "validation-checklist.md"
        )

    async def test_get_example_delegates(self):
        provider = _make_mock_provider()
        data = await Skill("copilot-instructions", provider).get_example("go.md")
        provider.get_example.assert_called_once_with("copilot-instructions", "go.md")
        assert data == b"# Copilot Instructions\n"

    async def test_missing_example_propagates(self):
        provider = _make_mock_provider()
        provider.get_example.side_effect = ResourceNotFoundError("nope.md")
        with pytest.raises(ResourceNotFoundError):
            await Skill("copilot-instructions", provider).get_example("nope.md")

    async def test_template_table_from_body(self):
        table = await Skill("copilot-instructions", _make_mock_provider()).get_template_table()
        assert [e.filename for e in table] == ["python-django.md", "python.md", "generic.md"]

    async def test_get_template_decodes_example(self):
        provider = _make_mock_provider()
        entry = TemplateEntry("Go", frozenset({"go"}), "go.md")
        text = await Skill("copilot-instructions", provider).get_template(entry)
        provider.get_example.assert_called_once_with("copilot-instructions", "go.md")
        assert text == "# Copilot Instructions\n"

    async def test_get_checklist_reads_default_reference(self):
        provider = _make_mock_provider()
        checklist = await Skill("copilot-instructions", provider).get_checklist()
        provider.get_reference.assert_called_once_with(
            "copilot-instructions", "validation-checklist.md"
        )
        assert len(checklist) == 2
        assert checklist.items[0].rule == "single-h1"
        assert checklist.items[1].rule is None

    async def test_trigger_phrases(self):
        phrases = await Skill("copilot-instructions", _make_mock_provider()).get_trigger_phrases()
        assert phrases == ["create copilot instructions", "set up copilot"]

    async def test_trigger_phrases_without_description(self):
        provider = _make_mock_provider()
        provider.get_metadata.return_value = {"name": "copilot-instructions"}
        assert await Skill("copilot-instructions", provider).get_trigger_phrases() == []

    def test_repr(self):
        assert repr(Skill("copilot-instructions", _make_mock_provider())) == (
            "Skill('copilot-instructions')"
        )
